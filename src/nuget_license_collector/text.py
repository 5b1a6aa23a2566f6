"""Detection and plain-text normalization of downloaded license documents.

License URLs point at plain text, HTML landing pages and, for some older
packages, RTF files. These helpers classify a downloaded body and turn
HTML into readable plain text.
"""

import html
import logging
import re

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)

# Elements whose boundaries become line breaks in the plain-text output
BLOCK_ELEMENTS_XPATH = (
    "//p | //div | //br | //h1 | //h2 | //h3 | //h4 | //h5 | //h6 | //li | //tr"
)

_TAG_RE = re.compile(r"<[^>]+>")
_HORIZONTAL_WS_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n+")


def is_likely_html(content: str) -> bool:
    """Return True if the body looks like HTML markup."""
    return content.lstrip().startswith("<") and "</" in content


def is_likely_rtf(content: str) -> bool:
    """Return True if the body starts with an RTF header."""
    stripped = content.lstrip()
    return stripped.startswith("{\\rtf") or stripped.startswith("\\rtf")


def strip_tags(markup: str) -> str:
    """Remove tags with a regex and decode entities.

    Used when the markup cannot be parsed into a document tree.
    """
    return html.unescape(_TAG_RE.sub("", markup)).strip()


def html_to_text(markup: str) -> str:
    """Convert HTML to plain text, keeping block structure as line breaks.

    Block-level elements (paragraphs, divs, headings, list items, table
    rows and ``<br>``) are separated by newlines, entities are decoded
    once by the parser, runs of spaces and tabs are collapsed, and three
    or more consecutive line breaks are reduced to a single blank line.

    Args:
        markup: HTML document or fragment.

    Returns:
        Trimmed plain text.
    """
    try:
        document = lxml_html.fromstring(markup)
        for element in document.xpath(BLOCK_ELEMENTS_XPATH):
            if element.tag == "br":
                element.tail = "\n" + (element.tail or "")
            else:
                element.text = "\n" + (element.text or "")
                element.tail = "\n" + (element.tail or "")
        text = document.text_content()
    except (etree.LxmlError, ValueError) as e:
        logger.warning("Error extracting text from HTML: %s", e)
        return strip_tags(markup)

    text = _HORIZONTAL_WS_RE.sub(" ", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
