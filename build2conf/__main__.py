"""
Publish build artifacts to Confluence wiki.

Uploads the artifacts of a successful build as attachments to a Confluence page, and rewrites portions of the page content
with a chain of configurable markup editors.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import argparse
import logging
import os.path
import sys
from io import StringIO
from pathlib import Path

from . import __version__
from .build import BuildContext, BuildResult
from .config import load_configuration
from .environment import ArgumentError
from .publisher import Publisher
from .sites import SiteRegistry
from .validation import check_page_name, check_space_name


class Arguments(argparse.Namespace):
    config: Path
    result: str | None
    workspace: Path | None
    artifacts_dir: Path | None
    build_number: str | None
    build_url: str | None
    check: bool
    loglevel: str


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.prog = os.path.basename(os.path.dirname(__file__))
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("config", type=Path, help="Path to YAML file with Confluence sites and publisher configuration.")
    parser.add_argument(
        "-r",
        "--result",
        choices=[result.value for result in BuildResult],
        type=str.upper,
        help="Build result (default: value of BUILD_RESULT, or SUCCESS).",
    )
    parser.add_argument("-w", "--workspace", type=Path, help="Build workspace directory (default: value of WORKSPACE).")
    parser.add_argument(
        "--artifacts-dir",
        dest="artifacts_dir",
        type=Path,
        help="Directory of archived build artifacts (default: value of ARTIFACTS_DIR).",
    )
    parser.add_argument("--build-number", dest="build_number", help="Build number (default: value of BUILD_NUMBER).")
    parser.add_argument("--build-url", dest="build_url", help="Build URL (default: value of BUILD_URL).")
    parser.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Verify that the configured spaces and pages exist instead of publishing.",
    )
    parser.add_argument(
        "-l",
        "--loglevel",
        choices=[
            logging.getLevelName(level).lower()
            for level in (
                logging.DEBUG,
                logging.INFO,
                logging.WARN,
                logging.ERROR,
                logging.CRITICAL,
            )
        ],
        default=logging.getLevelName(logging.INFO),
        help="Use this option to set the log verbosity.",
    )
    return parser


def get_help() -> str:
    parser = get_parser()
    with StringIO() as buf:
        parser.print_help(file=buf)
        return buf.getvalue()


def get_build_context(args: Arguments) -> BuildContext:
    env = dict(os.environ)
    if args.build_number is not None:
        env["BUILD_NUMBER"] = args.build_number
    if args.build_url is not None:
        env["BUILD_URL"] = args.build_url

    return BuildContext.from_environment(
        env,
        result=BuildResult(args.result) if args.result else None,
        workspace=args.workspace,
        artifacts_dir=args.artifacts_dir,
    )


def check(registry: SiteRegistry, publishers: list[Publisher]) -> bool:
    "Runs configuration checks for each publisher, and reports whether all of them passed."

    success = True
    for publisher in publishers:
        options = publisher.options
        for what, result in (
            (options.space, check_space_name(registry, options.site, options.space)),
            (f"{options.space}/{options.page}", check_page_name(registry, options.site, options.space, options.page)),
        ):
            if result.ok:
                logging.info("%s: %s", what, result.message or "OK")
            else:
                logging.error("%s: %s", what, result.message)
                success = False
    return success


def main() -> None:
    parser = get_parser()
    args = Arguments()
    parser.parse_args(namespace=args)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
    )

    try:
        configuration = load_configuration(args.config)
        registry = SiteRegistry(configuration.sites)
        publishers = [Publisher(options, registry) for options in configuration.publishers]
        build = get_build_context(args)
    except (ArgumentError, OSError) as e:
        parser.error(str(e))

    if args.check:
        if not check(registry, publishers):
            sys.exit(1)
        return

    for publisher in publishers:
        publisher.perform(build)


if __name__ == "__main__":
    main()
