from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    ADOPTER = "adopter"
    SHELTER = "shelter"
    ADMIN = "admin"


class UserTokenData(BaseModel):
    """
    Defines the structure of the JWT payload after validation.
    This schema is the contract between the platform's auth service, which
    signs the tokens, and the messaging service, which only verifies them.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="sub")
    role: UserRole = UserRole.ADOPTER
