"""
VidHub API Routers.
"""

from vidhub.routers.user import router as user_router

__all__ = [
    "user_router",
]
