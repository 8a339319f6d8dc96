from sqlalchemy import Column, Enum as SQLAEnum, String

from shared.models.base import Base, TimestampMixin, UUIDMixin
from shared.schemas.user_schemas import UserRole


def enum_values(enum_cls):
    """Persist enum values ('adopter') rather than member names ('ADOPTER')."""
    return [member.value for member in enum_cls]


class User(UUIDMixin, TimestampMixin, Base):
    """
    Platform account. Owned by the auth service; the messaging service only
    reads it to attach sender and adopter profiles.
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    role = Column(
        SQLAEnum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
        default=UserRole.ADOPTER,
    )
