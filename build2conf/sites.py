"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .api import ConfluenceAPI
from .environment import ConnectionProperties

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfluenceSite:
    """
    A named Confluence endpoint that publishers refer to.

    :param name: Name that identifies the site in publisher configuration.
    :param url: Confluence site URL, e.g. `https://wiki.example.com/confluence/`.
    :param username: Confluence user name (falls back to `CONFLUENCE_USER_NAME`).
    :param api_key: Confluence API key or password (falls back to `CONFLUENCE_API_KEY`).
    :param headers: Additional HTTP headers to pass to Confluence REST API calls.
    """

    name: str
    url: str
    username: str | None = None
    api_key: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def connection_properties(self) -> ConnectionProperties:
        return ConnectionProperties(
            base_url=self.url,
            user_name=self.username,
            api_key=self.api_key,
            headers=self.headers or None,
        )

    def create_session(self) -> ConfluenceAPI:
        "Returns a context manager that opens a session to this site."

        return ConfluenceAPI(self.connection_properties())


class SiteRegistry:
    "Holds the set of configured Confluence sites, replaced as a whole on reconfiguration."

    _sites: tuple[ConfluenceSite, ...]

    def __init__(self, sites: Iterable[ConfluenceSite] = ()) -> None:
        self._sites = tuple(sites)

    @property
    def sites(self) -> list[ConfluenceSite]:
        return list(self._sites)

    def configure(self, sites: Iterable[ConfluenceSite]) -> None:
        "Replaces all configured sites."

        self._sites = tuple(sites)
        LOGGER.debug("Configured %d Confluence site(s)", len(self._sites))

    def get_site_by_name(self, name: str) -> ConfluenceSite | None:
        for site in self._sites:
            if site.name == name:
                return site
        return None

    def get_site(self, name: str | None) -> ConfluenceSite | None:
        """
        Resolves a configured site name.

        :param name: Site name, or `None` to choose the default site (the first one configured).
        :returns: The matching site, or `None` if no site matches.
        """

        if name is None:
            return self._sites[0] if self._sites else None
        return self.get_site_by_name(name)

    def __len__(self) -> int:
        return len(self._sites)
