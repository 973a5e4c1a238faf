# backend/venuefinder/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import events, venues

__all__ = [
    "events",
    "venues",
]
