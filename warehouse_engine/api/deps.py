from typing import Annotated, Optional
import uuid
import logging

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_engine.database import get_db


logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> Optional[uuid.UUID]:
    """
    Acting user taken from the ``X-User-ID`` header.

    There is no authentication; the id only feeds the audit trail and
    the ``*_by`` columns. A missing header means an anonymous actor.
    """
    if x_user_id is None:
        return None
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        logger.warning(f"Invalid X-User-ID header: {x_user_id}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-ID must be a UUID",
        )


# Type aliases for cleaner dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
CurrentUserId = Annotated[Optional[uuid.UUID], Depends(get_current_user_id)]
