from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import commit_or_rollback, get_session
from models import UserPreference, utcnow

SELECTED_SOCIETY_KEY = "selected_society_id"


class PreferenceStore:
    """Per-user key-value preferences kept in the ``user_preferences`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str, key: str) -> Optional[str]:
        pref = await self.session.get(UserPreference, (user_id, key))
        return pref.value if pref else None

    async def set(self, user_id: str, key: str, value: str):
        pref = await self.session.get(UserPreference, (user_id, key))
        if pref is None:
            pref = UserPreference(user_id=user_id, key=key, value=value)
        else:
            pref.value = value
            pref.updated_at = utcnow()
        self.session.add(pref)
        await commit_or_rollback(self.session, "saving preference")

    async def delete(self, user_id: str, key: str):
        pref = await self.session.get(UserPreference, (user_id, key))
        if pref is None:
            return
        await self.session.delete(pref)
        await commit_or_rollback(self.session, "clearing preference")


def get_preference_store(session: AsyncSession = Depends(get_session)) -> PreferenceStore:
    return PreferenceStore(session)
