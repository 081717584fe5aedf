from vidhub.user.services.user_store import DuplicateUserError, UserStore

__all__ = ["DuplicateUserError", "UserStore"]
