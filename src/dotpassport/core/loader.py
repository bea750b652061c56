"""Widget factory and config loading utilities."""

import importlib
from pathlib import Path
from typing import Any, Dict, Mapping, Type, Union

import yaml
from pydantic import ValidationError

from .base_widget import BaseWidget
from .config import (
    BadgeWidgetConfig,
    BaseWidgetConfig,
    CategoryWidgetConfig,
    ProfileWidgetConfig,
    ReputationWidgetConfig,
)
from .errors import ConfigurationError

# Widget type -> module under dotpassport.widgets
WIDGET_MODULES: Dict[str, str] = {
    "reputation": "reputation",
    "badge": "badge",
    "badges": "badge",
    "profile": "profile",
    "category": "category",
}

CONFIG_CLASSES: Dict[str, Type[BaseWidgetConfig]] = {
    "reputation": ReputationWidgetConfig,
    "badge": BadgeWidgetConfig,
    "badges": BadgeWidgetConfig,
    "profile": ProfileWidgetConfig,
    "category": CategoryWidgetConfig,
}


def load_widget_class(widget_type: str) -> Type[BaseWidget]:
    """Dynamically load widget class by type.

    Args:
        widget_type: Widget type (e.g., "reputation", "badges")

    Returns:
        Widget class

    Raises:
        ConfigurationError if the type is unknown or the class is missing
    """
    module_name = WIDGET_MODULES.get(widget_type)
    if module_name is None:
        raise ConfigurationError(f"Unknown widget type: {widget_type}")

    module = importlib.import_module(f"dotpassport.widgets.{module_name}")

    # e.g. "reputation" -> "ReputationWidget"
    class_name = module_name.capitalize() + "Widget"
    widget_class = getattr(module, class_name, None)
    if widget_class is None or not issubclass(widget_class, BaseWidget):
        raise ConfigurationError(
            f"Widget class '{class_name}' not found in module 'dotpassport.widgets.{module_name}'"
        )
    return widget_class


def load_yaml(file_path: Path) -> dict:
    """Load YAML file."""
    with open(file_path, 'r') as f:
        return yaml.safe_load(f)


def parse_widget_config(data: Mapping[str, Any]) -> BaseWidgetConfig:
    """Validate a mapping into the config model for its ``type`` (default: reputation)."""
    widget_type = data.get("type") or "reputation"
    config_class = CONFIG_CLASSES.get(widget_type)
    if config_class is None:
        raise ConfigurationError(f"Unknown widget type: {widget_type}")
    try:
        return config_class.model_validate({**data, "type": widget_type})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {widget_type} widget config: {e}") from e


def load_widget_config(config_file: Union[str, Path]) -> BaseWidgetConfig:
    """Load and validate a widget configuration file."""
    data = load_yaml(Path(config_file))
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_file} must contain a YAML mapping at top level")
    return parse_widget_config(data)


def create_widget(config: Union[BaseWidgetConfig, Mapping[str, Any]], **kwargs: Any) -> BaseWidget:
    """Create a widget instance for a config.

    Args:
        config: Config model, or a mapping with a ``type`` key
        **kwargs: Passed to the widget constructor (client, document, prefers_dark)

    Returns:
        Instantiated, unmounted widget
    """
    if not isinstance(config, BaseWidgetConfig):
        config = parse_widget_config(config)
    widget_type = getattr(config, "type", None) or "reputation"
    widget_class = load_widget_class(widget_type)
    return widget_class(config, **kwargs)


def create_reputation_widget(config: Mapping[str, Any], **kwargs: Any) -> BaseWidget:
    return create_widget({**config, "type": "reputation"}, **kwargs)


def create_badge_widget(config: Mapping[str, Any], **kwargs: Any) -> BaseWidget:
    return create_widget({**config, "type": "badge"}, **kwargs)


def create_profile_widget(config: Mapping[str, Any], **kwargs: Any) -> BaseWidget:
    return create_widget({**config, "type": "profile"}, **kwargs)


def create_category_widget(config: Mapping[str, Any], **kwargs: Any) -> BaseWidget:
    return create_widget({**config, "type": "category"}, **kwargs)
