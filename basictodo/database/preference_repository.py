"""Repository for reminder preference database operations."""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from basictodo.models.preference import Preference, PreferenceUpdate
from basictodo.database.models import PreferenceDB, utc_now
from basictodo.database.repository import StoreError

logger = logging.getLogger(__name__)

# Columns that may be cleared by sending null.
_NULLABLE_FIELDS = {"email_template"}


class PreferenceRepository:
    """Repository for the preferences row of a single user."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _get_row(self) -> Optional[PreferenceDB]:
        try:
            return self.db.query(PreferenceDB).filter(PreferenceDB.user_id == self.user_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load preferences for user {self.user_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to get preferences: {e}") from e

    def get(self) -> Optional[Preference]:
        """Get the user's preferences (None if the signup trigger never ran)."""
        pref_db = self._get_row()
        return pref_db.to_pydantic() if pref_db else None

    def update(self, changes: PreferenceUpdate) -> Optional[Preference]:
        """Apply a partial update. Returns None if the user has no preferences row."""
        pref_db = self._get_row()
        if not pref_db:
            return None

        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field not in _NULLABLE_FIELDS:
                continue
            setattr(pref_db, field, value)
        pref_db.updated_at = utc_now()

        try:
            self.db.commit()
            self.db.refresh(pref_db)
            logger.debug(f"Updated preferences for user {self.user_id}")
            return pref_db.to_pydantic()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update preferences for user {self.user_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to update preferences: {e}") from e
