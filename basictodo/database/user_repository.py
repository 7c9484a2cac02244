"""Repository for User database operations.

Users are written when the identity provider reports a sign-in; the assistant
and task endpoints only ever read them to resolve the bearer identity.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from basictodo.models.user import User
from basictodo.database.models import UserDB, to_db_datetime, utc_now
from basictodo.database.repository import StoreError

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, **criteria) -> Optional[UserDB]:
        try:
            return self.db.query(UserDB).filter_by(**criteria).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to get user: {e}") from e

    def get(self, user_id: str) -> Optional[User]:
        """Get user by identity-provider subject."""
        user_db = self._find(id=user_id)
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[User]:
        user_db = self._find(email=email)
        return user_db.to_pydantic() if user_db else None

    def create_or_update(self, user: User) -> User:
        """Upsert a user by id.

        Inserting a new user also inserts its default preferences row
        (see ``create_default_preferences``).

        Raises:
            StoreError: If the write fails (e.g. the email belongs to another user)
        """
        user_db = self._find(id=user.id)
        created = user_db is None
        if created:
            user_db = UserDB.from_pydantic(user)
            self.db.add(user_db)
        else:
            user_db.email = user.email
            user_db.name = user.name
            user_db.updated_at = to_db_datetime(user.updated_at) or utc_now()

        try:
            self.db.commit()
            self.db.refresh(user_db)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save user {user.id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to save user: {e}") from e

        logger.debug(f"{'Created' if created else 'Updated'} user {user.id}")
        return user_db.to_pydantic()
