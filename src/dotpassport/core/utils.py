"""Utility functions for DotPassport widgets."""

import html
import os
from datetime import datetime
from typing import Callable, Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from .errors import ConfigurationError

ColorSchemeProvider = Callable[[], bool]


def format_number(value: float) -> str:
    """Format a number with thousand separators.

    Example:
        >>> format_number(12345)
        "12,345"
    """
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def format_date(value: str) -> str:
    """Format an ISO timestamp as e.g. "Jan 5, 2025".

    Falls back to the first 10 characters when the string does not parse.
    """
    try:
        timestamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return (value or "")[:10]
    return f"{timestamp:%b} {timestamp.day}, {timestamp.year}"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length, adding suffix if truncated.

    Example:
        >>> truncate_text("This is a very long text", max_length=15)
        "This is a ve..."
    """
    if not text or len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def escape_html(text: Optional[str]) -> str:
    """Escape text for interpolation into markup. None becomes ""."""
    if text is None:
        return ""
    return html.escape(str(text), quote=True)


def is_valid_url(url: str) -> bool:
    """Check if a string is an absolute http(s) URL."""
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return result.scheme in ("http", "https") and bool(result.netloc)


def safe_url(url: Optional[str]) -> str:
    """Return url if it is safe to put in href/src, else "".

    Rejects javascript:, data: and any other non-http(s) scheme.
    """
    if url and is_valid_url(url.strip()):
        return url.strip()
    return ""


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def badge_icon(level: int) -> str:
    """Emoji icon for a badge level."""
    if level >= 5:
        return "🏆"
    if level >= 4:
        return "🥇"
    if level >= 3:
        return "🥈"
    if level >= 2:
        return "🥉"
    return "🎖️"


def system_prefers_dark() -> bool:
    """Host color-scheme preference.

    Reads DOTPASSPORT_COLOR_SCHEME ("dark" or "light"); anything else means light.
    """
    return os.environ.get("DOTPASSPORT_COLOR_SCHEME", "").strip().lower() == "dark"


def resolve_theme(theme: Optional[str], prefers_dark: Optional[ColorSchemeProvider] = None) -> str:
    """Resolve "auto" (or None) to "light"/"dark" using the host preference."""
    if theme in (None, "auto"):
        query = prefers_dark or system_prefers_dark
        return "dark" if query() else "light"
    return theme


def resolve_container(target: Union[str, Tag], document: Optional[BeautifulSoup] = None) -> Tag:
    """Resolve a container element from a CSS selector or a Tag."""
    if isinstance(target, Tag):
        return target
    if isinstance(target, str):
        if document is None:
            raise ConfigurationError(f"Cannot resolve selector {target!r} without a document")
        element = document.select_one(target)
        if element is None:
            raise ConfigurationError(f"Container not found: {target}")
        return element
    raise ConfigurationError(f"Unsupported container target: {target!r}")


def set_inner_html(container: Tag, markup: str):
    """Replace the container's children with the parsed markup."""
    container.clear()
    if not markup:
        return
    fragment = BeautifulSoup(markup, "html.parser")
    for node in list(fragment.contents):
        container.append(node.extract())


def inner_html(container: Tag) -> str:
    return container.decode_contents()


def _classes(container: Tag) -> list[str]:
    value = container.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def add_class(container: Tag, class_name: str):
    classes = _classes(container)
    if class_name not in classes:
        classes.append(class_name)
    container["class"] = classes


def remove_class(container: Tag, class_name: str):
    classes = [c for c in _classes(container) if c != class_name]
    if classes:
        container["class"] = classes
    elif container.has_attr("class"):
        del container["class"]
