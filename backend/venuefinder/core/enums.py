# backend/venuefinder/core/enums.py
"""
Core enums for the venue discovery platform.

Values mirror the CHECK constraints on the venues/events tables.
"""

from enum import Enum


class SubscriptionTier(str, Enum):
    """Paid tier of a venue. Only PRO gets ranking priority."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class EventCategory(str, Enum):
    """What an event offers. BOTH means music and a meal."""

    MUSIC = "music"
    MEALS = "meals"
    BOTH = "both"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"


class VerificationStatus(str, Enum):
    UNVERIFIED = "UNVERIFIED"
    COMMUNITY_VERIFIED = "COMMUNITY_VERIFIED"
    OWNER_VERIFIED = "OWNER_VERIFIED"
    FLAGGED = "FLAGGED"


class FoodServiceType(str, Enum):
    NONE = "none"
    BAR_BITES = "bar_bites"
    FULL_MENU = "full_menu"


class BarServiceType(str, Enum):
    NONE = "none"
    NON_ALCOHOLIC = "non_alcoholic"
    ALCOHOLIC_ONLY = "alcoholic_only"
    FULL_BAR = "full_bar"
