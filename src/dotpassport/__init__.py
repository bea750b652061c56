"""DotPassport - reputation API client and embeddable widgets."""

__version__ = "0.1.0"

from .core import (
    BadgeWidgetConfig,
    BaseWidget,
    BaseWidgetConfig,
    CancellationSignal,
    CategoryWidgetConfig,
    ConfigurationError,
    DotPassportClient,
    DotPassportError,
    ProfileWidgetConfig,
    ReputationWidgetConfig,
    RequestCancelled,
    WidgetCache,
    WidgetNotMountedError,
    WidgetState,
    clear_global_cache,
    get_widget_cache,
)
from .core.config import (
    LOCAL_URL,
    PRODUCTION_URL,
    get_default_base_url,
    is_local_mode,
    reset_to_production_url,
    set_default_base_url,
)
from .core.loader import (
    create_badge_widget,
    create_category_widget,
    create_profile_widget,
    create_reputation_widget,
    create_widget,
    load_widget_config,
)
from .core.models import (
    BadgeData,
    BadgeDefinition,
    BadgeDefinitions,
    CategoryDefinition,
    CategoryDefinitions,
    CategoryScore,
    SpecificCategoryScore,
    SpecificUserBadge,
    UserBadge,
    UserBadges,
    UserProfile,
    UserScores,
)
from .core.retry import call_with_retry
from .widgets import BadgeWidget, CategoryWidget, ProfileWidget, ReputationWidget

__all__ = [
    "__version__",
    "DotPassportClient",
    "DotPassportError",
    "RequestCancelled",
    "ConfigurationError",
    "WidgetNotMountedError",
    "CancellationSignal",
    "WidgetCache",
    "clear_global_cache",
    "get_widget_cache",
    "BaseWidget",
    "WidgetState",
    "BaseWidgetConfig",
    "ReputationWidgetConfig",
    "BadgeWidgetConfig",
    "ProfileWidgetConfig",
    "CategoryWidgetConfig",
    "ReputationWidget",
    "BadgeWidget",
    "ProfileWidget",
    "CategoryWidget",
    "create_widget",
    "create_reputation_widget",
    "create_badge_widget",
    "create_profile_widget",
    "create_category_widget",
    "load_widget_config",
    "call_with_retry",
    "BadgeData",
    "BadgeDefinition",
    "BadgeDefinitions",
    "CategoryDefinition",
    "CategoryDefinitions",
    "CategoryScore",
    "SpecificCategoryScore",
    "SpecificUserBadge",
    "UserBadge",
    "UserBadges",
    "UserProfile",
    "UserScores",
    "PRODUCTION_URL",
    "LOCAL_URL",
    "get_default_base_url",
    "set_default_base_url",
    "reset_to_production_url",
    "is_local_mode",
]
