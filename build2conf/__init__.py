"""
Publish build artifacts to Confluence wiki.

Uploads the artifacts of a successful build as attachments to a Confluence page, and rewrites portions of the page content
with a chain of configurable markup editors.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

__author__ = "Levente Hunyadi"
__copyright__ = "Copyright 2022-2026, Levente Hunyadi"
__license__ = "MIT"
__maintainer__ = "Levente Hunyadi"
__status__ = "Production"
