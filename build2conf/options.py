"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

from dataclasses import dataclass, field
from typing import Literal

from .sites import ConfluenceSite

DEFAULT_COMMENT = "Published from Jenkins build: $BUILD_URL"


@dataclass
class GeneratorConfig:
    """
    Configures the source of markup an editor inserts.

    :param kind: `text` for literal markup, `file` for the contents of a workspace file, `markdown` for Markdown rendered to XHTML.
    :param text: Literal markup or Markdown text; build environment variables are expanded.
    :param file: Path to a file, relative to the workspace; build environment variables are expanded.
    """

    kind: Literal["text", "file", "markdown"] = "text"
    text: str = ""
    file: str | None = None


@dataclass
class EditorConfig:
    """
    Configures a single markup editor.

    :param kind: Editor type.
    :param generator: Source of the markup to insert.
    :param token: Marker token for `before_token`, `after_token` and `replace_token` editors.
    :param start_token: Start-marker token for the `between_tokens` editor.
    :param end_token: End-marker token for the `between_tokens` editor.
    """

    kind: Literal["append", "prepend", "before_token", "after_token", "between_tokens", "replace_token"]
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    token: str | None = None
    start_token: str | None = None
    end_token: str | None = None


@dataclass
class PublisherOptions:
    """
    Configures publishing the results of a build to a Confluence page.

    :param space: Confluence space key of the target page.
    :param page: Title of the target page.
    :param site: Name of a configured site, or `None` for the first site.
    :param attach_archived_artifacts: Whether to upload the archived artifacts of the build.
    :param file_set: Ant-style file set of workspace files to upload, e.g. `dist/*.whl, reports/**/*.html`.
    :param editors: Markup editors applied to the page content, in order.
    :param comment: Template for the attachment comment and the page version message.
    """

    space: str
    page: str
    site: str | None = None
    attach_archived_artifacts: bool = False
    file_set: str | None = None
    editors: list[EditorConfig] = field(default_factory=list)
    comment: str = DEFAULT_COMMENT


@dataclass
class Configuration:
    """
    Contents of a configuration file.

    :param sites: Confluence sites available to publishers.
    :param publishers: Publishing steps to run after a build.
    """

    sites: list[ConfluenceSite] = field(default_factory=list)
    publishers: list[PublisherOptions] = field(default_factory=list)
