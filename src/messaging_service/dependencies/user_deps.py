from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.schemas.user_schemas import UserRole, UserTokenData
from shared.security.jwt import AuthError, parse_bearer

from .. import crud
from ..db import get_db
from ..logging_config import logger
from ..schemas.conversation import ConversationWithDetails, Participant, ParticipantRole
from ..security import decode_user_jwt


def get_current_user(request: Request) -> UserTokenData:
    """
    A dependency that decodes and validates the caller's JWT locally.
    Token issuance lives in the platform's auth service; this service only
    verifies signature, expiry, issuer and audience.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = parse_bearer(request.headers)
    if not token:
        raise credentials_exception
    try:
        payload = decode_user_jwt(token)
        return UserTokenData.model_validate(payload)
    except AuthError as e:
        logger.warning(f"JWT validation error: {e}")
        raise credentials_exception
    except ValidationError as e:
        logger.warning(f"JWT payload rejected: {e}")
        raise credentials_exception


def require_adopter(user: UserTokenData = Depends(get_current_user)) -> UserTokenData:
    """Only adopters open conversations."""
    if user.role != UserRole.ADOPTER:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


async def get_participant(
    user: UserTokenData = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Participant:
    """
    Resolve the caller to the conversation side it acts for.

    Shelter accounts are addressed by the id of the shelter they operate.
    """
    if user.role == UserRole.SHELTER:
        shelter = await crud.get_shelter_by_user(db, user.user_id)
        if shelter is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shelter not found")
        return Participant(
            participant_id=shelter.id, role=ParticipantRole.SHELTER, user_id=user.user_id
        )
    return Participant(
        participant_id=user.user_id, role=ParticipantRole.ADOPTER, user_id=user.user_id
    )


def can_access(conversation: ConversationWithDetails, user: UserTokenData) -> bool:
    """The adopter, or the account operating the shelter, may use a conversation."""
    if conversation.adopter_id == user.user_id:
        return True
    return user.role == UserRole.SHELTER and conversation.shelter.user_id == user.user_id
