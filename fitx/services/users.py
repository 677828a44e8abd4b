from __future__ import annotations

import logging
from typing import Any, Optional

from sqlmodel import col, select

from .. import codec
from ..db import Store
from ..errors import NotFoundError
from ..models import User, UserProfile, UserRead

logger = logging.getLogger(__name__)


class UserRepository:
    """The single local user.

    Nothing in the table stops a second row, so "current" always means the
    lowest id, and :meth:`save_profile` updates that row instead of adding one.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    @staticmethod
    async def _current(session) -> Optional[User]:
        result = await session.exec(select(User).order_by(col(User.id)).limit(1))
        return result.first()

    async def get_current(self) -> Optional[UserRead]:
        async with self.store.session() as session:
            row = await self._current(session)
            return UserRead.model_validate(row) if row else None

    async def has_user(self) -> bool:
        return await self.get_current() is not None

    async def save_profile(self, profile: UserProfile) -> UserRead:
        """Create the user at onboarding, or overwrite the existing profile."""
        async with self.store.session() as session:
            row = await self._current(session)
            if row is None:
                row = User(**profile.model_dump(), created_at=codec.stamp())
                logger.info("[fitx] users: creating local user")
            else:
                for key, value in profile.model_dump().items():
                    setattr(row, key, value)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return UserRead.model_validate(row)

    async def update(self, **fields: Any) -> UserRead:
        unknown = set(fields) - set(UserProfile.model_fields)
        if unknown:
            raise ValueError(f"unknown user fields: {', '.join(sorted(unknown))}")
        async with self.store.session() as session:
            row = await self._current(session)
            if row is None:
                raise NotFoundError("no local user has been created")
            for key, value in fields.items():
                setattr(row, key, value)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return UserRead.model_validate(row)
