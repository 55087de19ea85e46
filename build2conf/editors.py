"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from .build import BuildContext
from .compatibility import override
from .environment import ArgumentError, TokenNotFoundError
from .generators import MarkupGenerator

LOGGER = logging.getLogger(__name__)


class MarkupEditor(ABC):
    """
    Transforms page content by inserting markup produced by a generator.

    Editors are applied in the order they are configured; each editor sees the output of the previous one.
    """

    display_name: str = "Markup editor"

    generator: MarkupGenerator

    def __init__(self, generator: MarkupGenerator) -> None:
        self.generator = generator

    def perform_replacement(self, build: BuildContext, content: str) -> str:
        """
        Applies this editor to page content.

        :param build: The build that triggers publishing.
        :param content: Current page content.
        :returns: New page content.
        :raises TokenNotFoundError: The marker token the editor relies on is absent from the content.
        """

        generated = self.generator.generate(build)
        return self.perform_edits(content, generated)

    @abstractmethod
    def perform_edits(self, content: str, generated: str) -> str:
        "Combines page content with generated markup."
        ...


class AppendEditor(MarkupEditor):
    display_name = "Append content"

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        return content + generated


class PrependEditor(MarkupEditor):
    display_name = "Prepend content"

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        return generated + content


class TokenEditor(MarkupEditor):
    "Base class for editors that locate a marker token in page content."

    token: str

    def __init__(self, generator: MarkupGenerator, token: str) -> None:
        super().__init__(generator)
        if not token:
            raise ArgumentError(f"{type(self).__name__} requires a marker token")
        self.token = token

    def find_token(self, content: str, token: str, start: int = 0) -> int:
        index = content.find(token, start)
        if index < 0:
            raise TokenNotFoundError(f"Marker token could not be located in the page content: {token}")
        return index


class BeforeTokenEditor(TokenEditor):
    display_name = "Insert content before token"

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        index = self.find_token(content, self.token)
        return content[:index] + generated + content[index:]


class AfterTokenEditor(TokenEditor):
    display_name = "Insert content after token"

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        index = self.find_token(content, self.token) + len(self.token)
        return content[:index] + generated + content[index:]


class ReplaceTokenEditor(TokenEditor):
    display_name = "Replace token"

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        self.find_token(content, self.token)
        return content.replace(self.token, generated)


class BetweenTokensEditor(MarkupEditor):
    "Replaces the text between a start and an end marker token, keeping the markers."

    display_name = "Replace content between tokens"

    start_token: str
    end_token: str

    def __init__(self, generator: MarkupGenerator, start_token: str, end_token: str) -> None:
        super().__init__(generator)
        if not start_token or not end_token:
            raise ArgumentError("BetweenTokensEditor requires a start and an end marker token")
        self.start_token = start_token
        self.end_token = end_token

    @override
    def perform_edits(self, content: str, generated: str) -> str:
        start = content.find(self.start_token)
        if start < 0:
            raise TokenNotFoundError(f"Start-marker token could not be located in the page content: {self.start_token}")
        start += len(self.start_token)

        end = content.find(self.end_token, start)
        if end < 0:
            raise TokenNotFoundError(f"End-marker token could not be located after the start-marker token: {self.end_token}")

        return content[:start] + generated + content[end:]


def apply_editors(editors: Iterable[MarkupEditor], build: BuildContext, content: str) -> str:
    """
    Folds page content through a chain of editors.

    An editor whose marker token is missing is skipped, and its input passes through unchanged to the next editor.

    :param editors: Editors in the order they are to be applied.
    :param build: The build that triggers publishing.
    :param content: Initial page content.
    :returns: Page content after all applicable editors have run.
    """

    for editor in editors:
        LOGGER.info("Performing wiki edits: %s", editor.display_name)
        try:
            content = editor.perform_replacement(build, content)
        except TokenNotFoundError as e:
            LOGGER.error("ERROR while performing replacement: %s", e)
    return content
