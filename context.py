"""
Request-scoped society context.

The acting user and the society they act in are resolved once per request
and handed to services explicitly as a ``SocietyContext``.
"""
import logging
from dataclasses import dataclass

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from database import get_session
from errors import NotAuthorizedError, NotFoundError
from models import MANAGER_ROLES, MEMBER_ACTIVE, SOCIETY_ACTIVE, Society, SocietyMember

logger = logging.getLogger("society_app")


@dataclass(frozen=True)
class SocietyContext:
    society_id: str
    user_id: str
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES


async def get_current_user_id(x_user_id: str = Header(...)) -> str:
    # Authentication happens upstream; the identity provider forwards the user id
    user_id = x_user_id.strip()
    if not user_id:
        raise NotAuthorizedError("Missing user identity")
    return user_id


async def load_society_context(session: AsyncSession, society_id: str, user_id: str) -> SocietyContext:
    society = await session.get(Society, society_id)
    if society is None:
        raise NotFoundError("Society not found")
    if society.status != SOCIETY_ACTIVE:
        raise NotAuthorizedError("Society is not active")

    result = await session.execute(
        select(SocietyMember).where(
            SocietyMember.society_id == society_id,
            SocietyMember.user_id == user_id,
            SocietyMember.status == MEMBER_ACTIVE,
        )
    )
    member = result.scalars().first()
    if member is None:
        logger.warning("User %s is not an active member of society %s", user_id, society_id)
        raise NotAuthorizedError("You are not a member of this society")

    return SocietyContext(society_id=society_id, user_id=user_id, role=member.role)


async def get_society_context(
    society_id: str,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> SocietyContext:
    return await load_society_context(session, society_id, user_id)
