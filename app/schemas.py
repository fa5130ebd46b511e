from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .models import TaskPriority, TaskStatus

TITLE_MAX_LEN = 280


def _as_utc(dt: datetime | None) -> datetime | None:
    # Stored datetimes are naive UTC
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class TaskBase(BaseModel):
    # Serialize enums as their values (e.g., "PENDING")
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1)
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None


class TaskCreate(TaskBase):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LEN)


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX_LEN)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None

    @field_validator("title", "status", "priority")
    @classmethod
    def reject_null(cls, v):
        # Omit the field to leave it unchanged; these columns are NOT NULL
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class TaskOut(TaskBase):
    # Titles derived from voice notes can be longer than TaskCreate allows
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
    id: int
    user_id: str | None = None
    voice_note_id: int | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def stored_as_utc(cls, v):
        return _as_utc(v)


class VoiceNoteCreate(BaseModel):
    transcript: str = Field(..., min_length=1)
    audio_url: HttpUrl | None = None


class VoiceNoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    transcript: str
    audio_url: str | None = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def stored_as_utc(cls, v):
        return _as_utc(v)


class ParsedDraft(BaseModel):
    """Structured, unsaved result of parsing one voice transcript."""

    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(..., min_length=1)
    description: str
    priority: TaskPriority
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None
    raw_transcript: str


class VoiceTaskOut(BaseModel):
    voice_note: VoiceNoteOut
    task: TaskOut
