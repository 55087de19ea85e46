"""
Publish build artifacts to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/build2conf
"""

import logging

from .api import ConfluencePage, ConfluenceSession
from .artifacts import collect_artifacts, guess_content_type
from .build import BuildContext, BuildResult
from .config import create_editors
from .editors import MarkupEditor, apply_editors
from .environment import ConfluenceError, PageError
from .options import PublisherOptions
from .sites import SiteRegistry

LOGGER = logging.getLogger(__name__)


class Publisher:
    """
    Publishes the results of a successful build to a Confluence page.

    Uploads attachments first, then rewrites the page content with the configured editors. Publishing never fails the
    build: every error is logged and swallowed.
    """

    options: PublisherOptions
    registry: SiteRegistry
    editors: list[MarkupEditor]

    def __init__(self, options: PublisherOptions, registry: SiteRegistry, editors: list[MarkupEditor] | None = None) -> None:
        """
        Initializes a new publisher instance.

        :param options: Target page, files to upload and editors to apply.
        :param registry: Configured Confluence sites.
        :param editors: Editors to apply; instantiated from `options` when omitted.
        """

        self.options = options
        self.registry = registry
        self.editors = editors if editors is not None else create_editors(options.editors)

    def perform(self, build: BuildContext) -> bool:
        """
        Runs after a build has completed.

        :param build: The build that triggers publishing.
        :returns: Always `True`, so that the build is not failed by publishing.
        """

        if build.result is not BuildResult.SUCCESS:
            # don't process unsuccessful builds
            LOGGER.info("Build status is not SUCCESS (%s).", build.result.value)
            return True

        site = self.registry.get_site(self.options.site)
        if site is None:
            LOGGER.error("Unknown Confluence site: %s", self.options.site or "(default)")
            return True

        try:
            with site.create_session() as session:
                self.publish(build, session)
        except Exception:
            LOGGER.exception("Failed to publish to Confluence page: %s", self.options.page)

        # not returning the outcome of the individual steps, publishing should not fail the build
        return True

    def publish(self, build: BuildContext, session: ConfluenceSession) -> bool:
        """
        Fetches the target page once, then uploads attachments and performs wiki edits.

        :returns: True if all steps were carried out.
        """

        page = session.get_page(self.options.space, self.options.page)
        if page is None:
            LOGGER.error("Page not found: '%s' in space %s", self.options.page, self.options.space)
            return False

        result = True

        try:
            result &= self.perform_attachments(build, session, page)
        except Exception:
            LOGGER.exception("Unable to upload attachments to Confluence page: %s", page.title)
            result = False

        try:
            result &= self.perform_wiki_replacements(build, session, page)
        except Exception:
            LOGGER.exception("Unable to perform wiki edits on Confluence page: %s", page.title)
            result = False

        return result

    def perform_attachments(self, build: BuildContext, session: ConfluenceSession, page: ConfluencePage) -> bool:
        "Uploads archived artifacts and matching workspace files as attachments, one by one."

        workspace = build.workspace
        if workspace is None or not workspace.is_dir():
            # possibly running on an agent that went down
            LOGGER.error("Workspace is unavailable.")
            return False

        comment = build.expand(self.options.comment)
        LOGGER.info("Uploading attachments to Confluence page: %s", session.absolute_url(page.webui_link))

        file_set = build.expand(self.options.file_set) if self.options.file_set else None
        files = collect_artifacts(
            artifacts_dir=build.artifacts_dir,
            workspace=workspace,
            file_set=file_set,
            attach_archived_artifacts=self.options.attach_archived_artifacts,
        )

        LOGGER.info("Uploading %d file(s) to Confluence...", len(files))
        for file in files:
            content_type = guess_content_type(file.name)
            LOGGER.info(" - Uploading file: %s (%s)", file.name, content_type)

            try:
                attachment = session.upload_attachment(page.id, file, content_type=content_type, comment=comment)
                LOGGER.info("   done: %s", session.absolute_url(attachment.webui_link))
            except (ConfluenceError, PageError, OSError):
                LOGGER.exception("Unable to upload file: %s", file.name)

        LOGGER.info("Done")
        return True

    def perform_wiki_replacements(self, build: BuildContext, session: ConfluenceSession, page: ConfluencePage) -> bool:
        "Applies the editors to the current page content and saves the result as a new page version."

        comment = build.expand(self.options.comment)
        content = apply_editors(self.editors, build, page.content)
        session.update_page(page, content, comment)
        return True
