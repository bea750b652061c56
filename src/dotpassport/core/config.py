"""Configuration: API endpoint defaults and widget config models."""

import os
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, Field

PRODUCTION_URL = "https://api.dotpassport.io"
LOCAL_URL = "http://localhost:4000"
API_PREFIX = "/api/v2"

_default_base_url: str = os.environ.get("DOTPASSPORT_API_URL") or PRODUCTION_URL


def get_default_base_url() -> str:
    """Base URL used by clients created without an explicit ``base_url``."""
    return _default_base_url


def set_default_base_url(url: str):
    """Set the default base URL for all new client instances.

    Example:
        >>> set_default_base_url(LOCAL_URL)
    """
    global _default_base_url
    _default_base_url = url


def reset_to_production_url():
    """Reset the default base URL to production."""
    global _default_base_url
    _default_base_url = PRODUCTION_URL


def is_local_mode() -> bool:
    """Check if the default base URL points at a local API."""
    return "localhost" in _default_base_url or "127.0.0.1" in _default_base_url


Theme = Literal['light', 'dark', 'auto']


class BaseWidgetConfig(BaseModel):
    """Configuration shared by every widget."""

    api_key: str = Field(min_length=1)
    address: str = Field(min_length=1)
    base_url: Optional[str] = None
    theme: Optional[Theme] = 'auto'
    class_name: Optional[str] = None  # Extra CSS class added to the container
    on_load: Optional[Callable[[], Any]] = None
    on_error: Optional[Callable[[Exception], Any]] = None

    class Config:
        extra = 'forbid'  # Reject unknown fields
        frozen = True


class ReputationWidgetConfig(BaseWidgetConfig):
    """Total score plus category breakdown."""

    type: Literal['reputation'] = 'reputation'
    show_categories: bool = True
    max_categories: int = Field(6, gt=0)
    compact: bool = False


class BadgeWidgetConfig(BaseWidgetConfig):
    """Earned badges, or a single badge when ``badge_key`` is set."""

    type: Literal['badge', 'badges'] = 'badge'
    badge_key: Optional[str] = None
    max_badges: int = Field(6, gt=0)
    show_progress: bool = False


class ProfileWidgetConfig(BaseWidgetConfig):
    """Profile card: avatar, name, bio, socials and on-chain identities."""

    type: Literal['profile'] = 'profile'
    show_identities: bool = True
    show_socials: bool = True
    show_bio: bool = True


class CategoryWidgetConfig(BaseWidgetConfig):
    """One category score with breakdown and advice."""

    type: Literal['category'] = 'category'
    category_key: str = Field(min_length=1)
    show_breakdown: bool = True
    show_advice: bool = True
