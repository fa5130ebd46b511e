from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..crud import create_task_from_voice_note
from ..db import get_session
from ..nlp.parser import parse_voice_input
from ..schemas import ParsedDraft, TaskOut, VoiceNoteCreate, VoiceNoteOut, VoiceTaskOut
from ..utils.users import current_user_id

router = APIRouter()


def _now() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


@router.post("/parse", response_model=ParsedDraft)
async def parse_voice_note(payload: VoiceNoteCreate):
    # preview only, nothing is stored
    return parse_voice_input(payload.transcript, _now())


@router.post("", response_model=VoiceTaskOut, status_code=201)
async def create_voice_note(
    payload: VoiceNoteCreate,
    user_id: str | None = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
):
    # Same draft as the preview, so what the user reviewed is what gets stored
    draft = parse_voice_input(payload.transcript, _now())
    voice_note, task = await create_task_from_voice_note(db, payload, draft, user_id=user_id)
    return VoiceTaskOut(voice_note=VoiceNoteOut.model_validate(voice_note), task=TaskOut.model_validate(task))
