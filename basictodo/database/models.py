"""SQLAlchemy database models for BasicTodo."""

from datetime import datetime, timezone
from typing import Optional
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, event

from typing import Union, TypeVar, Type
from basictodo.database.database import Base
from basictodo.models.task import TaskStatus, TaskPriority, TaskCategory
from basictodo.models.constants import DEFAULT_LEAD_TIME_MIN, DEFAULT_TEMPLATE_ID

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T, None]) -> Optional[str]:
    """Convert enum to string value (handles enum, string and None).

    Args:
        enum_obj: Enum instance, string value or None

    Returns:
        String value of the enum, the string itself, or None
    """
    if enum_obj is None:
        return None
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: Optional[str], enum_class: Type[T], default: Optional[T]) -> Optional[T]:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def utc_now() -> datetime:
    """Naive UTC timestamp as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime -> naive UTC for storage (naive values are assumed UTC)."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Stored naive UTC datetime -> aware UTC datetime."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    status = Column(String, nullable=False, default=TaskStatus.PENDING.value, index=True)

    # Scheduling
    due_at = Column(DateTime, nullable=True, index=True)
    estimated_duration_minutes = Column(Integer, nullable=True)
    last_reminder_sent = Column(DateTime, nullable=True)

    # Classification
    priority = Column(String, nullable=True, index=True)
    category = Column(String, nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from basictodo.models.task import Task

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            notes=self.notes,
            due_at=from_db_datetime(self.due_at),
            status=value_to_enum(self.status, TaskStatus, TaskStatus.PENDING),
            priority=value_to_enum(self.priority, TaskPriority, None),
            category=value_to_enum(self.category, TaskCategory, None),
            tags=list(self.tags or []),
            estimated_duration_minutes=self.estimated_duration_minutes,
            created_at=from_db_datetime(self.created_at),
            updated_at=from_db_datetime(self.updated_at),
            last_reminder_sent=from_db_datetime(self.last_reminder_sent),
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            notes=task.notes,
            due_at=to_db_datetime(task.due_at),
            status=enum_to_value(task.status),
            priority=enum_to_value(task.priority),
            category=enum_to_value(task.category),
            tags=list(task.tags or []),
            estimated_duration_minutes=task.estimated_duration_minutes,
            created_at=to_db_datetime(task.created_at),
            updated_at=to_db_datetime(task.updated_at),
            last_reminder_sent=to_db_datetime(task.last_reminder_sent),
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (identity provider subject)
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from basictodo.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=from_db_datetime(self.created_at),
            updated_at=from_db_datetime(self.updated_at),
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=to_db_datetime(user.created_at),
            updated_at=to_db_datetime(user.updated_at),
        )


class PreferenceDB(Base):
    """Database model for per-user reminder preferences."""

    __tablename__ = "preferences"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    lead_time_minutes = Column(Integer, nullable=False, default=DEFAULT_LEAD_TIME_MIN)
    reminder_enabled = Column(Boolean, nullable=False, default=True)
    template_id = Column(String, nullable=True, default=DEFAULT_TEMPLATE_ID)
    email_template = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from basictodo.models.preference import Preference
        return Preference(
            id=self.id,
            user_id=self.user_id,
            lead_time_minutes=self.lead_time_minutes,
            reminder_enabled=self.reminder_enabled,
            template_id=self.template_id or DEFAULT_TEMPLATE_ID,
            email_template=self.email_template,
            created_at=from_db_datetime(self.created_at),
            updated_at=from_db_datetime(self.updated_at),
        )


@event.listens_for(UserDB, "after_insert")
def create_default_preferences(mapper, connection, target):
    """Give every new user a default preferences row (mirrors a DB signup trigger)."""
    now = utc_now()
    connection.execute(
        PreferenceDB.__table__.insert().values(
            id=str(uuid.uuid4()),
            user_id=target.id,
            lead_time_minutes=DEFAULT_LEAD_TIME_MIN,
            reminder_enabled=True,
            template_id=DEFAULT_TEMPLATE_ID,
            created_at=now,
            updated_at=now,
        )
    )
