"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
import mimetypes
import os
import re
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(name: str) -> str:
    "MIME type for a file name based on its extension."

    content_type, _ = mimetypes.guess_type(name, strict=True)
    if not content_type:
        # Confluence does not allow an empty content type
        return DEFAULT_CONTENT_TYPE
    return content_type


def find_artifacts(directory: Path | None) -> list[Path]:
    """
    Recursively scans a directory, returning all regular files encountered.

    :param directory: Directory of archived build artifacts.
    :returns: Files in depth-first order; an empty list if the directory does not exist.
    """

    if directory is None or not directory.is_dir():
        return []

    files: list[Path] = []
    with os.scandir(directory) as it:
        entries = list(it)
    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            # symbolic links to directories are not followed, which rules out cycles
            files.extend(find_artifacts(path))
        elif entry.is_file():
            files.append(path)
    return files


def split_file_set(file_set: str) -> list[str]:
    "Splits an Ant-style file set into individual patterns."

    return [pattern for pattern in re.split(r"[,\s]+", file_set) if pattern]


def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.replace("\\", "/")
    if pattern.endswith("/"):
        # a trailing slash stands for everything below the directory
        pattern = f"{pattern}**"
    if pattern.endswith("**"):
        pattern = f"{pattern}/*"
    return pattern


def _glob(workspace: Path, pattern: str) -> list[Path] | None:
    """
    Evaluates a single pattern against the workspace.

    :returns: Matching paths in sorted order, or `None` if the pattern is not a valid relative glob pattern.
    """

    try:
        return sorted(workspace.glob(_normalize_pattern(pattern)))
    except (ValueError, NotImplementedError) as e:
        # e.g. absolute patterns, or `**` combined with other characters in a path component (prior to Python 3.13)
        LOGGER.warning("Invalid file set pattern '%s': %s", pattern, e)
        return None


def list_workspace_files(workspace: Path, file_set: str) -> list[Path]:
    """
    Lists the regular files in a workspace that match an Ant-style file set.

    :param workspace: Root directory the patterns are relative to.
    :param file_set: Comma or whitespace separated glob patterns, e.g. `dist/*.whl, reports/**/*.html`.
    :returns: Matching files, sorted within each pattern, each file listed once.
    """

    files: list[Path] = []
    seen: set[Path] = set()
    for pattern in split_file_set(file_set):
        for path in _glob(workspace, pattern) or []:
            if not path.is_file():
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(path)
    return files


def validate_file_set(workspace: Path, file_set: str) -> str | None:
    """
    Explains why a file set might not match any file.

    :returns: A human-readable hint, or `None` if there is nothing to add.
    """

    for pattern in split_file_set(file_set):
        if _glob(workspace, pattern) is None:
            return f"'{pattern}' doesn't match anything: not a valid pattern relative to the workspace"

        prefix: list[str] = []
        for part in _normalize_pattern(pattern).split("/")[:-1]:
            if any(c in part for c in "*?["):
                break
            prefix.append(part)
        if prefix and not workspace.joinpath(*prefix).is_dir():
            return f"'{pattern}' doesn't match anything: '{'/'.join(prefix)}' does not exist in the workspace"
    return None


def collect_artifacts(
    *,
    artifacts_dir: Path | None,
    workspace: Path,
    file_set: str | None,
    attach_archived_artifacts: bool,
) -> list[Path]:
    """
    Produces the ordered list of files to upload.

    Archived artifacts come first, followed by workspace files matched by the file set that are not already in the list.

    :param artifacts_dir: Directory of archived build artifacts.
    :param workspace: Build workspace directory.
    :param file_set: Environment-expanded Ant-style file set, or `None` to skip workspace files.
    :param attach_archived_artifacts: Whether to include archived artifacts.
    """

    files: list[Path] = []

    if attach_archived_artifacts:
        archived = find_artifacts(artifacts_dir)
        LOGGER.info("Found %d archived artifact(s) to upload to Confluence...", len(archived))
        files.extend(archived)

    file_set = file_set.strip() if file_set else None
    if not file_set:
        return files

    LOGGER.info("Evaluating file set pattern: %s", file_set)
    workspace_files = list_workspace_files(workspace, file_set)
    if not workspace_files:
        LOGGER.info("No files matched the pattern '%s'.", file_set)
        msg = validate_file_set(workspace, file_set)
        if msg is not None:
            LOGGER.info(msg)
        return files

    LOGGER.info("Found %d workspace artifact(s) to upload to Confluence...", len(workspace_files))
    known = {file.resolve() for file in files}
    for file in workspace_files:
        if file.resolve() in known:
            LOGGER.info(" - pattern matched an archived artifact: %s", file.name)
            continue
        known.add(file.resolve())
        files.append(file)

    return files
