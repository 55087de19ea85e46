"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import enum
from dataclasses import dataclass

from .environment import ArgumentError, ConfluenceError
from .sites import SiteRegistry


@enum.unique
class ValidationKind(enum.Enum):
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a configuration check. Checks never raise; a failed check carries a human-readable message.

    :param kind: Whether the check passed.
    :param message: Details, if any.
    """

    kind: ValidationKind
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is ValidationKind.OK

    @staticmethod
    def success(message: str = "") -> "ValidationResult":
        return ValidationResult(ValidationKind.OK, message)

    @staticmethod
    def error(message: str) -> "ValidationResult":
        return ValidationResult(ValidationKind.ERROR, message)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def check_space_name(registry: SiteRegistry, site_name: str | None, space_name: str | None) -> ValidationResult:
    "Checks whether a space exists on a site."

    if _blank(space_name):
        return ValidationResult.success()

    site = registry.get_site(site_name)
    if site is None:
        return ValidationResult.error(f"Unknown site: {site_name}")

    try:
        with site.create_session() as session:
            space = session.get_space(space_name or "")
    except (ArgumentError, ConfluenceError) as e:
        return ValidationResult.error(str(e))

    if space is not None:
        return ValidationResult.success(f"OK: {space.name or space.key}")
    return ValidationResult.error("Space not found")


def check_page_name(registry: SiteRegistry, site_name: str | None, space_name: str | None, page_name: str | None) -> ValidationResult:
    "Checks whether a page exists in a space."

    if _blank(space_name) or _blank(page_name):
        return ValidationResult.success()

    site = registry.get_site(site_name)
    if site is None:
        return ValidationResult.error(f"Unknown site: {site_name}")

    try:
        with site.create_session() as session:
            page = session.get_page(space_name or "", page_name or "")
    except (ArgumentError, ConfluenceError) as e:
        return ValidationResult.error(str(e))

    if page is not None:
        return ValidationResult.success(f"OK: {page.title}")
    return ValidationResult.error("Page not found")
