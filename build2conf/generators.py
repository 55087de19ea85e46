"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .build import BuildContext
from .compatibility import override
from .environment import ArgumentError, PageError
from .markdown import markdown_to_html

LOGGER = logging.getLogger(__name__)


class MarkupGenerator(ABC):
    "Produces the markup that an editor inserts into page content."

    @abstractmethod
    def generate(self, build: BuildContext) -> str:
        """
        Generates markup for a build.

        :param build: The build that triggers publishing.
        :returns: Markup in Confluence Storage Format.
        """
        ...


class TextGenerator(MarkupGenerator):
    "Inserts literal markup with build environment variables expanded."

    text: str

    def __init__(self, text: str) -> None:
        self.text = text

    @override
    def generate(self, build: BuildContext) -> str:
        return build.expand(self.text)


class FileGenerator(MarkupGenerator):
    "Inserts the contents of a file in the build workspace."

    file: str

    def __init__(self, file: str) -> None:
        if not file:
            raise ArgumentError("file generator requires a file name")
        self.file = file

    @override
    def generate(self, build: BuildContext) -> str:
        name = build.expand(self.file)
        path = Path(name)
        if not path.is_absolute():
            if build.workspace is None:
                raise PageError(f"workspace unavailable; cannot read file: {name}")
            path = build.workspace / path

        LOGGER.debug("Reading markup from file: %s", path)
        with open(path, "r", encoding="utf-8") as f:
            return f.read()


class MarkdownGenerator(MarkupGenerator):
    "Inserts Markdown text, expanded with build environment variables and rendered to XHTML."

    text: str

    def __init__(self, text: str) -> None:
        self.text = text

    @override
    def generate(self, build: BuildContext) -> str:
        return markdown_to_html(build.expand(self.text))
