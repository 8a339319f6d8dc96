from .user_schemas import UserRole, UserTokenData

__all__ = ["UserRole", "UserTokenData"]
