"""Core framework components."""

from .base_widget import BaseWidget, WidgetState
from .cache import CacheEntry, CacheKey, WidgetCache, clear_global_cache, get_widget_cache
from .config import (
    BadgeWidgetConfig,
    BaseWidgetConfig,
    CategoryWidgetConfig,
    ProfileWidgetConfig,
    ReputationWidgetConfig,
)
from .errors import ConfigurationError, DotPassportError, RequestCancelled, WidgetNotMountedError
from .http_client import CancellationSignal, DotPassportClient

__all__ = [
    "BaseWidget",
    "WidgetState",
    "CacheEntry",
    "CacheKey",
    "WidgetCache",
    "clear_global_cache",
    "get_widget_cache",
    "BadgeWidgetConfig",
    "BaseWidgetConfig",
    "CategoryWidgetConfig",
    "ProfileWidgetConfig",
    "ReputationWidgetConfig",
    "ConfigurationError",
    "DotPassportError",
    "RequestCancelled",
    "WidgetNotMountedError",
    "CancellationSignal",
    "DotPassportClient",
]
