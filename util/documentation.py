"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import argparse
import os
import re
from pathlib import Path

from build2conf.__main__ import get_help


def patch_help(help_text: str) -> str:
    "Updates the help text returned by `argparse` to be consistent across Python versions."

    # replace verbose options like `-w WORKSPACE, --workspace WORKSPACE` with their compact equivalent `-w, --workspace WORKSPACE`
    # use vertical tab character `\v` as a marker to indicate where re-alignment is necessary
    repl_text, count = re.subn(r"-(?P<short>[-a-z]+) (?P<arg>[_A-Z]+|\{[^{}]+\}), --(?P<long>[-a-z]+) (?P=arg)", r"-\g<short>, --\g<long> \g<arg>\v", help_text)

    if count > 0:
        # determine column index at which help description is aligned
        re_align = re.search(r"^(?P<indent>.*)show this help message and exit$", help_text, flags=re.MULTILINE)
        if re_align is None:
            return help_text
        indent = len(re_align.group("indent"))

        def _align(m: re.Match[str]) -> str:
            option: str = m.group("option")
            description: str = m.group("description")
            if len(option) + 2 > indent:
                # spans across lines
                return option + "\n" + " " * indent + description
            else:
                # same line
                return option + " " * (indent - len(option)) + description

        # re-align text as necessary
        return re.sub(r"^(?P<option>.+)\v\n? *(?P<description>.+)$", _align, repl_text, flags=re.MULTILINE)
    else:
        return help_text


def update_console(text: str, help_text: str) -> str:
    "Updates the console output section in `README.md`."

    output, count = re.subn(
        r"^```console\n\$ python3 -m build2conf --help\n.*?^```$",
        f"```console\n$ python3 -m build2conf --help\n{help_text}```",
        text,
        count=1,
        flags=re.DOTALL | re.MULTILINE,
    )
    if count != 1:
        raise ValueError("missing placeholder for console output")
    return output


class Arguments(argparse.Namespace):
    check: bool


parser = argparse.ArgumentParser()
parser.add_argument(
    "--check",
    action="store_true",
    default=False,
    help="verify if documentation is up-to-date and raise an error when changes are identified",
)
args = Arguments()
parser.parse_args(namespace=args)

# locate repository root
root_path = Path(__file__).parent.parent

# read README.md
os.environ["COLUMNS"] = "160"  # ensures consistent column width across platforms
help_text = patch_help(get_help())
readme_path = root_path / "README.md"
with open(readme_path, "r") as input_file:
    input_content = input_file.read()

# update README.md
output_content = update_console(input_content, help_text)

# write README.md
if args.check:
    if input_content != output_content:
        raise ValueError(f"outdated file: {readme_path}")
else:
    with open(readme_path, "w") as output_file:
        output_file.write(output_content)
