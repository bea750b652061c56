"""Embeddable reputation widgets."""

from .badge import BadgeWidget
from .category import CategoryWidget
from .profile import ProfileWidget
from .reputation import ReputationWidget

__all__ = ["BadgeWidget", "CategoryWidget", "ProfileWidget", "ReputationWidget"]
