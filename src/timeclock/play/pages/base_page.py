"""
Page object model for the time clock Base Page.
Wraps a server-rendered HTML document and the lookups shared by all pages.
"""
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString
import logging

from timeclock.errors import PageParseError, PageStructureError

logger = logging.getLogger(__name__)

# Tags whose contents are never rendered as text
NON_RENDERED_TAGS = ["script", "style", "template"]


class BasePage:
    """Represents a parsed time clock page."""

    def __init__(self, html: Union[str, bytes, None], url: Optional[str] = None, status: Optional[int] = None) -> None:
        """
        Parse the page body once into a document tree.

        Args:
            html: Raw HTML body of the response
            url: Optional URL the body was fetched from (diagnostics only)
            status: Optional HTTP status of the response (diagnostics only)

        Raises:
            PageParseError: If the body is empty or contains no HTML elements
        """
        self.url = url
        self.status = status

        if isinstance(html, bytes):
            html = html.decode("utf-8", errors="replace")

        if html is None or not html.strip():
            logger.error(f"Empty response body from {url or 'unknown URL'} (status {status})")
            raise PageParseError("Cannot parse an empty HTML document")

        self._html = html
        try:
            self.soup = BeautifulSoup(html, "html.parser")
        except Exception as e:
            logger.error(f"Failed to parse HTML from {url or 'unknown URL'}: {e}")
            raise PageParseError(f"Cannot parse HTML document: {e}") from e

        if self.soup.find(True) is None:
            logger.error(f"No HTML elements found in body from {url or 'unknown URL'}")
            raise PageParseError("Document contains no HTML elements")

        self._text_nodes: Optional[List[str]] = None

    def to_html(self) -> str:
        """Return the raw HTML body (for debugging purposes)."""
        return self._html

    def select_required(self, selector: str, description: Optional[str] = None) -> Tag:
        """
        Select the first element matching a CSS selector, failing loudly if absent.

        Args:
            selector: CSS selector
            description: Human-readable name used in the error message

        Returns:
            The first matching element

        Raises:
            PageStructureError: If nothing matches the selector
        """
        element = self.soup.select_one(selector)
        if element is None:
            name = description or selector
            logger.error(f"{name} not found on page {self.url or ''} (selector: {selector})")
            raise PageStructureError(f"{name} not found (selector: {selector})")
        return element

    def text_nodes(self) -> List[str]:
        """
        Return every text node of the document, in document order.

        Whitespace-only nodes are kept, so the result mirrors the raw markup.
        Comments, doctypes and the contents of script/style tags are skipped.
        """
        if self._text_nodes is None:
            nodes = []
            for string in self.soup.find_all(string=True):
                # Comment, Doctype, CData, Declaration...
                if isinstance(string, PreformattedString):
                    continue
                if string.find_parent(NON_RENDERED_TAGS) is not None:
                    continue
                nodes.append(str(string))
            self._text_nodes = nodes
        return self._text_nodes

    def text_node_at(self, index: int, description: Optional[str] = None) -> str:
        """
        Return the text node at an absolute position in the flattened document.

        This is a positional contract against the current page layout. Any markup
        added before the target shifts the index, so callers must validate the
        returned value.

        Raises:
            PageStructureError: If the document has fewer text nodes than expected
        """
        nodes = self.text_nodes()
        if index >= len(nodes):
            name = description or f"Text node #{index}"
            logger.error(f"{name} not found: page has only {len(nodes)} text nodes")
            raise PageStructureError(f"{name} not found: page has only {len(nodes)} text nodes")
        return nodes[index]
