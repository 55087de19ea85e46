"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
import typing
from pathlib import Path

import yaml
from cattrs import BaseValidationError

from .editors import AfterTokenEditor, AppendEditor, BeforeTokenEditor, BetweenTokensEditor, MarkupEditor, PrependEditor, ReplaceTokenEditor
from .environment import ArgumentError
from .generators import FileGenerator, MarkdownGenerator, MarkupGenerator, TextGenerator
from .options import Configuration, EditorConfig, GeneratorConfig
from .serializer import JsonType, json_to_object

LOGGER = logging.getLogger(__name__)


def create_generator(config: GeneratorConfig) -> MarkupGenerator:
    "Instantiates a markup generator from its configuration record."

    match config.kind:
        case "text":
            return TextGenerator(config.text)
        case "markdown":
            return MarkdownGenerator(config.text)
        case "file":
            return FileGenerator(config.file or "")
        case _:
            raise NotImplementedError("match not exhaustive")


def create_editor(config: EditorConfig) -> MarkupEditor:
    "Instantiates a markup editor from its configuration record."

    generator = create_generator(config.generator)
    match config.kind:
        case "append":
            return AppendEditor(generator)
        case "prepend":
            return PrependEditor(generator)
        case "before_token":
            return BeforeTokenEditor(generator, config.token or "")
        case "after_token":
            return AfterTokenEditor(generator, config.token or "")
        case "replace_token":
            return ReplaceTokenEditor(generator, config.token or "")
        case "between_tokens":
            return BetweenTokensEditor(generator, config.start_token or "", config.end_token or "")
        case _:
            raise NotImplementedError("match not exhaustive")


def create_editors(configs: list[EditorConfig]) -> list[MarkupEditor]:
    return [create_editor(config) for config in configs]


def parse_configuration(data: JsonType) -> Configuration:
    """
    Converts raw configuration data into a structured object.

    A single publisher may be given under the key `publisher` instead of a list under `publishers`.
    """

    if data is None:
        return Configuration()
    if not isinstance(data, dict):
        raise ArgumentError("expected: configuration as a mapping of keys to values")

    data = dict(data)
    publisher = data.pop("publisher", None)
    if publisher is not None:
        publishers = list(typing.cast(list[JsonType], data.get("publishers") or []))
        publishers.append(publisher)
        data["publishers"] = publishers

    try:
        return json_to_object(Configuration, data)
    except BaseValidationError as ex:
        raise ArgumentError(f"invalid configuration: {ex}") from ex


def load_configuration(path: Path) -> Configuration:
    "Reads sites and publishers from a YAML configuration file."

    LOGGER.debug("Loading configuration from %s", path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as ex:
            raise ArgumentError(f"unable to parse configuration file {path}: {ex}") from ex

    return parse_configuration(typing.cast(JsonType, data))
