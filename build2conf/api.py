"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import enum
import logging
import typing
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote, urlencode, urlparse, urlunparse

import requests
from cattrs import BaseValidationError

from .environment import ConfluenceError, ConnectionProperties, PageError
from .serializer import JsonType, json_to_object, object_to_json_payload

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

API_PREFIX = "rest/api"


def build_url(base_url: str, query: dict[str, str] | None = None) -> str:
    "Builds a URL with scheme, host, port, path and query string parameters."

    scheme, netloc, path, params, query_str, fragment = urlparse(base_url)

    if params:
        raise ValueError("expected: url with no parameters")
    if query_str:
        raise ValueError("expected: url with no query string")
    if fragment:
        raise ValueError("expected: url with no fragment")

    url_parts = (scheme, netloc, path, None, urlencode(query) if query else None, None)
    return urlunparse(url_parts)


def _raise_for_status(response: requests.Response) -> None:
    "Maps an HTTP error status to the single error kind reported to callers."

    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        raise ConfluenceError(str(e)) from e


def _response_json(response: requests.Response) -> JsonType:
    "Decodes the JSON body of a response, reporting malformed payloads as a remote failure."

    try:
        return typing.cast(JsonType, response.json())
    except ValueError as e:
        raise ConfluenceError(f"malformed JSON in response: {e}") from e


def _response_object(typ: type[T], data: JsonType) -> T:
    "Converts a JSON payload into a response type, reporting unexpected payloads as a remote failure."

    try:
        return json_to_object(typ, data)
    except (BaseValidationError, TypeError, ValueError) as e:
        raise ConfluenceError(f"unexpected response for {typ.__name__}: {e}") from e


def _response_results(data: JsonType) -> list[JsonType]:
    "Extracts the list of items from a result-set payload."

    if not isinstance(data, dict):
        raise ConfluenceError("unexpected response: expected a result-set object")
    results = data.get("results", [])
    if not isinstance(results, list):
        raise ConfluenceError("unexpected response: expected a list of results")
    return results


@enum.unique
class ConfluenceRepresentation(enum.Enum):
    STORAGE = "storage"
    WIKI = "wiki"


@enum.unique
class ConfluenceStatus(enum.Enum):
    CURRENT = "current"
    DRAFT = "draft"
    ARCHIVED = "archived"
    TRASHED = "trashed"
    HISTORICAL = "historical"


@dataclass(frozen=True)
class ConfluenceLinks:
    webui: str = ""
    download: str = ""


@dataclass(frozen=True)
class ConfluenceSpace:
    """
    Holds Confluence space metadata.

    :param key: Short key that identifies the space, e.g. `DEV`.
    :param name: Human-readable space name.
    """

    key: str
    name: str = ""


@dataclass(frozen=True)
class ConfluenceSpaceRef:
    key: str


@dataclass(frozen=True)
class ConfluenceContentVersion:
    number: int
    minorEdit: bool = False
    message: str | None = None


@dataclass(frozen=True)
class ConfluencePageStorage:
    """
    Holds Confluence page content.

    :param value: Body of the content, in the format found in the representation field.
    :param representation: Type of content representation used (e.g. Confluence Storage Format).
    """

    value: str
    representation: ConfluenceRepresentation = ConfluenceRepresentation.STORAGE


@dataclass(frozen=True)
class ConfluencePageBody:
    storage: ConfluencePageStorage


@dataclass(frozen=True)
class ConfluencePage:
    """
    Holds Confluence page data fetched for a single publish operation.

    :param id: Confluence page ID.
    :param title: Page title, unique within a space.
    :param space: The space the page belongs to.
    :param version: Page version. Incremented when the page is updated.
    :param body: Page content.
    :param status: Page status.
    """

    id: str
    title: str
    space: ConfluenceSpace
    version: ConfluenceContentVersion
    body: ConfluencePageBody
    status: ConfluenceStatus = ConfluenceStatus.CURRENT
    _links: ConfluenceLinks = field(default_factory=ConfluenceLinks)

    @property
    def content(self) -> str:
        return self.body.storage.value

    @property
    def space_key(self) -> str:
        return self.space.key

    @property
    def webui_link(self) -> str:
        return self._links.webui


@dataclass(frozen=True)
class ConfluenceAttachmentExtensions:
    mediaType: str = "application/octet-stream"
    fileSize: int = 0
    comment: str | None = None


@dataclass(frozen=True)
class ConfluenceAttachment:
    """
    Holds data for an object uploaded to Confluence as a page attachment.

    :param id: Unique ID for the attachment.
    :param title: Attachment title, which is the file name.
    :param extensions: Media type, size and comment for the attachment.
    :param status: Attachment status.
    """

    id: str
    title: str
    extensions: ConfluenceAttachmentExtensions = field(default_factory=ConfluenceAttachmentExtensions)
    status: ConfluenceStatus = ConfluenceStatus.CURRENT
    _links: ConfluenceLinks = field(default_factory=ConfluenceLinks)

    @property
    def media_type(self) -> str:
        return self.extensions.mediaType

    @property
    def comment(self) -> str | None:
        return self.extensions.comment

    @property
    def webui_link(self) -> str:
        return self._links.webui


@dataclass(frozen=True)
class ConfluenceUpdatePageRequest:
    id: str
    type: str
    status: ConfluenceStatus
    title: str
    space: ConfluenceSpaceRef
    body: ConfluencePageBody
    version: ConfluenceContentVersion


class ConfluenceAPI:
    """
    Represents an active connection to a Confluence server.
    """

    properties: ConnectionProperties
    session: "ConfluenceSession | None" = None

    def __init__(self, properties: ConnectionProperties | None = None) -> None:
        self.properties = properties or ConnectionProperties()

    def __enter__(self) -> "ConfluenceSession":
        session = requests.Session()
        if self.properties.user_name:
            session.auth = (self.properties.user_name, self.properties.api_key)
        else:
            session.headers.update({"Authorization": f"Bearer {self.properties.api_key}"})

        if self.properties.headers:
            session.headers.update(self.properties.headers)

        self.session = ConfluenceSession(session, base_url=self.properties.base_url)
        return self.session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None


class ConfluenceSession:
    """
    Information about an open session to a Confluence server.

    Exposes the operations needed to publish build results: look up a page by space and title, update page content, look up a
    space, and upload a page attachment. Every failure is reported as a `ConfluenceError`.
    """

    _session: requests.Session
    base_url: str

    def __init__(self, session: requests.Session, *, base_url: str) -> None:
        self._session = session
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def close(self) -> None:
        self._session.close()
        self._session = requests.Session()

    def _build_url(self, path: str, query: dict[str, str] | None = None) -> str:
        """
        Builds a full URL for invoking the Confluence API.

        :param path: Path of API endpoint to invoke.
        :param query: Query parameters to pass to the API endpoint.
        :returns: A full URL.
        """

        base_url = f"{self.base_url}{API_PREFIX}{path}"
        return build_url(base_url, query)

    def absolute_url(self, link: str) -> str:
        "Turns a link relative to the Confluence site into an absolute URL."

        if not link:
            return self.base_url
        if urlparse(link).scheme:
            return link
        return f"{self.base_url}{link.lstrip('/')}"

    def _get_response(self, path: str, query: dict[str, str] | None = None) -> requests.Response:
        url = self._build_url(path, query)
        try:
            response = self._session.get(url, headers={"Accept": "application/json"}, verify=True)
        except requests.RequestException as e:
            raise ConfluenceError(f"failed to retrieve {url}: {e}") from e
        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)
        return response

    def _get_results(self, path: str, *, query: dict[str, str] | None = None) -> list[JsonType]:
        "Retrieves the first batch of results from a result-set returned by Confluence API."

        response = self._get_response(path, query)
        _raise_for_status(response)
        return _response_results(_response_json(response))

    def _put(self, path: str, body: Any) -> None:
        "Updates an existing object via Confluence REST API."

        url = self._build_url(path)
        try:
            response = self._session.put(
                url,
                data=object_to_json_payload(body),
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                verify=True,
            )
        except requests.RequestException as e:
            raise ConfluenceError(f"failed to update {url}: {e}") from e
        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)
        _raise_for_status(response)

    def get_page(self, space_key: str, title: str) -> ConfluencePage | None:
        """
        Retrieves Confluence wiki page details and content by title.

        :param space_key: The Confluence space key.
        :param title: The page title. Pages in the same Confluence space have a unique title.
        :returns: Confluence page info and content, or `None` if no such page exists.
        """

        LOGGER.info("Looking up page with title %s in space %s", title, space_key)
        query = {
            "spaceKey": space_key,
            "title": title,
            "type": "page",
            "expand": "body.storage,version,space",
        }
        results = self._get_results("/content", query=query)
        if not results:
            return None
        return _response_object(ConfluencePage, results[0])

    def update_page(self, page: ConfluencePage, content: str, comment: str | None = None) -> None:
        """
        Saves a new version of a Confluence page.

        :param page: Page data as fetched from Confluence.
        :param content: New page body in Confluence Storage Format.
        :param comment: Version message shown in page history.
        """

        LOGGER.info("Updating page: %s", page.id)
        request = ConfluenceUpdatePageRequest(
            id=page.id,
            type="page",
            status=ConfluenceStatus.CURRENT,
            title=page.title,
            space=ConfluenceSpaceRef(key=page.space_key),
            body=ConfluencePageBody(storage=ConfluencePageStorage(value=content, representation=page.body.storage.representation)),
            version=ConfluenceContentVersion(number=page.version.number + 1, minorEdit=False, message=comment),
        )
        self._put(f"/content/{page.id}", request)

    def get_space(self, space_key: str) -> ConfluenceSpace | None:
        """
        Retrieves Confluence space metadata.

        :param space_key: The Confluence space key.
        :returns: Space metadata, or `None` if no such space exists.
        """

        response = self._get_response(f"/space/{quote(space_key, safe='')}")
        if response.status_code == 404:
            return None
        _raise_for_status(response)
        return _response_object(ConfluenceSpace, _response_json(response))

    def get_attachment_by_name(self, page_id: str, filename: str) -> ConfluenceAttachment | None:
        """
        Retrieves a Confluence page attachment by file name.

        :param page_id: The Confluence page ID.
        :param filename: The attachment file name to search for.
        :returns: Confluence attachment information, or `None` if the page has no such attachment.
        """

        results = self._get_results(f"/content/{page_id}/child/attachment", query={"filename": filename})
        if len(results) != 1:
            return None
        return _response_object(ConfluenceAttachment, results[0])

    def upload_attachment(
        self,
        page_id: str,
        attachment_path: Path,
        *,
        content_type: str,
        comment: str | None = None,
    ) -> ConfluenceAttachment:
        """
        Uploads a file as an attachment to a Confluence page.

        If the page already has an attachment with the same name, a new version of that attachment is uploaded.

        :param page_id: Confluence page ID.
        :param attachment_path: Path to the file to upload as an attachment.
        :param content_type: Attachment MIME type.
        :param comment: Attachment description.
        :returns: Information about the attachment created or updated.
        """

        if not attachment_path.is_file():
            raise PageError(f"file not found: {attachment_path}")

        attachment_name = attachment_path.name
        existing = self.get_attachment_by_name(page_id, attachment_name)
        if existing is not None:
            path = f"/content/{page_id}/child/attachment/{existing.id}/data"
        else:
            path = f"/content/{page_id}/child/attachment"

        url = self._build_url(path)
        with open(attachment_path, "rb") as attachment_file:
            file_to_upload: dict[str, tuple[str | None, Any, str, dict[str, str]]] = {
                "comment": (
                    None,
                    comment,
                    "text/plain; charset=utf-8",
                    {},
                ),
                "file": (
                    attachment_name,
                    attachment_file,
                    content_type,
                    {"Expires": "0"},
                ),
            }
            LOGGER.info("Uploading attachment: %s", attachment_name)
            try:
                response = self._session.post(
                    url,
                    files=file_to_upload,
                    headers={
                        "X-Atlassian-Token": "no-check",
                        "Accept": "application/json",
                    },
                    verify=True,
                )
            except requests.RequestException as e:
                raise ConfluenceError(f"failed to upload {attachment_name}: {e}") from e

        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)
        _raise_for_status(response)

        data = _response_json(response)
        if isinstance(data, dict) and "results" in data:
            results = _response_results(data)
            if not results:
                raise ConfluenceError(f"no attachment returned for upload of {attachment_name}")
            result = results[0]
        else:
            result = data

        return _response_object(ConfluenceAttachment, result)
