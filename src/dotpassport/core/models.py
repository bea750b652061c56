"""Response models for the DotPassport API.

Models accept the API's camelCase field names as well as the Python
attribute names, and are frozen so cached instances are never mutated.
"""

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class PolkadotIdentity(ApiModel):
    address: str
    display: Optional[str] = None
    web: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    judgements: List[Dict[str, Union[int, str]]] = Field(default_factory=list)


class UserProfile(ApiModel):
    address: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    social_links: Dict[str, str] = Field(default_factory=dict)
    polkadot_identities: List[PolkadotIdentity] = Field(default_factory=list)


class CategoryScore(ApiModel):
    score: float
    reason: str = ""
    title: str


class UserScores(ApiModel):
    address: str
    total_score: float
    calculated_at: Optional[str] = None
    categories: Dict[str, CategoryScore] = Field(default_factory=dict)


class ThresholdDetail(ApiModel):
    label: str
    description: str


class ReasonDetail(ApiModel):
    key: str
    points: float = 0
    title: str
    description: str = ""
    thresholds: List[ThresholdDetail] = Field(default_factory=list)
    advices: List[str] = Field(default_factory=list)


class CategoryDefinition(ApiModel):
    # The API sends short_description/long_description in snake_case
    key: str
    display_name: str
    short_description: str = ""
    long_description: str = ""
    order: int = 0
    reasons: List[ReasonDetail] = Field(default_factory=list)


class CategoryDefinitions(ApiModel):
    categories: List[CategoryDefinition] = Field(default_factory=list)


class ScoredCategory(ApiModel):
    key: str
    score: CategoryScore


class SpecificCategoryScore(ApiModel):
    address: str
    category: ScoredCategory
    definition: Optional[CategoryDefinition] = None
    calculated_at: Optional[str] = None


class BadgeLevel(ApiModel):
    level: int
    key: str
    value: float
    title: str
    short_description: str = ""
    long_description: str = ""


class BadgeDefinition(ApiModel):
    key: str
    title: str
    short_description: str = ""
    long_description: str = ""
    metric: str = ""
    image_url: Optional[str] = None
    levels: List[BadgeLevel] = Field(default_factory=list)


class BadgeDefinitions(ApiModel):
    badges: List[BadgeDefinition] = Field(default_factory=list)


class UserBadge(ApiModel):
    badge_key: str
    achieved_level: int
    achieved_level_key: str = ""
    achieved_level_title: str
    earned_at: Optional[str] = None


class UserBadges(ApiModel):
    kind: Literal['collection'] = 'collection'
    address: str
    badges: List[UserBadge] = Field(default_factory=list)
    count: int = 0


class SpecificUserBadge(ApiModel):
    kind: Literal['single'] = 'single'
    address: str
    badge: Optional[UserBadge] = None
    definition: Optional[BadgeDefinition] = None
    earned: Optional[bool] = None

    @property
    def is_earned(self) -> bool:
        return self.badge is not None and self.earned is not False


BadgeData = Union[UserBadges, SpecificUserBadge]
