from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ..crud import ensure_user
from ..db import get_session

_ABSENT = {"", "null", "undefined"}


def normalize_user_id(raw: str | None) -> str | None:
    """Browser-supplied id, or None when missing or a serialized JS null."""
    if raw is None:
        return None
    v = raw.strip()
    if v.lower() in _ABSENT:
        return None
    return v


async def current_user_id(
    x_user_id: str | None = Header(None),
    db: AsyncSession = Depends(get_session),
) -> str | None:
    user_id = normalize_user_id(x_user_id)
    if user_id:
        await ensure_user(db, user_id)
    return user_id
