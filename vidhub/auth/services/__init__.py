"""
Auth System Services
"""

from vidhub.auth.services.session_manager import LoginResult, SessionManager, TokenPair

__all__ = [
    "LoginResult",
    "SessionManager",
    "TokenPair",
]
