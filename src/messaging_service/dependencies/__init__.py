from .user_deps import can_access, get_current_user, get_participant, require_adopter

__all__ = [
    "can_access",
    "get_current_user",
    "get_participant",
    "require_adopter",
]
