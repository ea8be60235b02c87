"""Strip active content from stored document markup before rendering it."""

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Elements removed together with everything inside them
_BLOCKED_TAGS = ("script", "iframe", "object", "embed", "frame", "frameset", "applet", "base", "meta", "link")

# Attributes that carry URLs and must not use a script scheme
_URL_ATTRIBUTES = ("href", "src", "action", "formaction", "xlink:href")

_SCRIPT_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


def sanitize_html(markup: str) -> str:
    """Return ``markup`` without scripts, event handlers or script URLs.

    Formatting markup (headings, lists, tables, code, images) is kept as is.
    """
    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")
    removed = 0

    for tag in soup.find_all(_BLOCKED_TAGS):
        tag.decompose()
        removed += 1

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            name = attr.lower()
            if name.startswith("on"):
                del tag.attrs[attr]
                removed += 1
            elif name in _URL_ATTRIBUTES:
                value = str(tag.attrs[attr]).strip().lower().replace(" ", "")
                if value.startswith(_SCRIPT_SCHEMES):
                    del tag.attrs[attr]
                    removed += 1

    if removed:
        logger.debug("Sanitizer removed %d unsafe elements/attributes", removed)
    return str(soup)
