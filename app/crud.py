import logging
from datetime import UTC

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Task, TaskStatus, User, VoiceNote
from .schemas import ParsedDraft, TaskCreate, TaskUpdate, VoiceNoteCreate

logger = logging.getLogger(__name__)


def _normalize_due(dt):
    if dt is None:
        return None
    # If tz-aware, convert to UTC and drop tzinfo (store naive UTC)
    if getattr(dt, "tzinfo", None) is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


async def ensure_user(db: AsyncSession, user_id: str | None) -> User | None:
    """Create a lightweight placeholder user for a per-browser id. Never raises."""
    if not user_id:
        return None
    try:
        user = await db.get(User, user_id)
        if user:
            return user
        user = User(id=user_id, email=f"{user_id}@local")
        db.add(user)
        await db.commit()
        return user
    except SQLAlchemyError:
        await db.rollback()
        logger.warning("ensure_user failed for %s", user_id, exc_info=True)
        return None


async def create_task(db: AsyncSession, payload: TaskCreate, user_id: str | None = None) -> Task:
    data = payload.model_dump()
    data["due_date"] = _normalize_due(data.get("due_date"))
    task = Task(**data, user_id=user_id)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Created task %s", task.id)
    return task


async def get_task(db: AsyncSession, task_id: int, user_id: str | None = None) -> Task | None:
    stmt = select(Task).where(Task.id == task_id)
    if user_id:
        stmt = stmt.where(Task.user_id == user_id)
    res = await db.execute(stmt)
    return res.scalar_one_or_none()


async def list_tasks(
    db: AsyncSession,
    user_id: str | None = None,
    status: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[Task]:
    stmt = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
    if user_id:
        stmt = stmt.where(Task.user_id == user_id)
    if status:
        stmt = stmt.where(Task.status == TaskStatus(status))
    stmt = stmt.limit(limit).offset(offset)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def update_task(db: AsyncSession, task_id: int, payload: TaskUpdate, user_id: str | None = None):
    task = await get_task(db, task_id, user_id=user_id)
    if not task:
        return None
    updates = payload.model_dump(exclude_unset=True)
    if "due_date" in updates:
        updates["due_date"] = _normalize_due(updates["due_date"])
    for k, v in updates.items():
        setattr(task, k, v)
    await db.commit()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, task_id: int, user_id: str | None = None) -> None:
    # Deleting a missing task is a no-op
    stmt = delete(Task).where(Task.id == task_id)
    if user_id:
        stmt = stmt.where(Task.user_id == user_id)
    await db.execute(stmt)
    await db.commit()


async def create_task_from_voice_note(
    db: AsyncSession,
    payload: VoiceNoteCreate,
    draft: ParsedDraft,
    user_id: str | None = None,
) -> tuple[VoiceNote, Task]:
    """Store the voice note and the task built from its draft in one transaction."""
    voice_note = VoiceNote(
        transcript=payload.transcript,
        audio_url=str(payload.audio_url) if payload.audio_url else None,
    )
    db.add(voice_note)
    await db.flush()

    task = Task(
        title=draft.title,
        description=draft.description,
        status=draft.status,
        priority=draft.priority,
        due_date=_normalize_due(draft.due_date),
        user_id=user_id,
        voice_note_id=voice_note.id,
    )
    db.add(task)
    await db.commit()
    await db.refresh(voice_note)
    await db.refresh(task)
    logger.info("Created task %s from voice note %s", task.id, voice_note.id)
    return voice_note, task
