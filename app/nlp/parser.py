from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime

from dateparser.search import search_dates

from ..models import TaskPriority, TaskStatus
from ..schemas import ParsedDraft

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New task from voice note"
MAX_TITLE_LEN = 80
ELLIPSIS = "..."

SENTENCE_END_PAT = re.compile(r"[.!?]")

# Ordered tiers: most urgent first, first match wins
PRIORITY_RULES: list[tuple[re.Pattern[str], TaskPriority]] = [
    (
        re.compile(r"\b(critical|severe|blocker|production issue|prod issue)\b", re.IGNORECASE),
        TaskPriority.CRITICAL,
    ),
    (
        re.compile(r"\b(urgent|high priority|top priority|very important|asap|immediately)\b", re.IGNORECASE),
        TaskPriority.HIGH,
    ),
    (re.compile(r"\b(low priority|low|nice to have|whenever)\b", re.IGNORECASE), TaskPriority.LOW),
    (re.compile(r"\b(medium priority|normal|standard)\b", re.IGNORECASE), TaskPriority.MEDIUM),
]

# Completion before progress: "was finished" must not read as "working"
STATUS_RULES: list[tuple[re.Pattern[str], TaskStatus]] = [
    (re.compile(r"\b(done|completed|finish(?:ed)?|closed|resolved)\b", re.IGNORECASE), TaskStatus.DONE),
    (
        re.compile(r"\b(in progress|doing|working|started|ongoing|currently working)\b", re.IGNORECASE),
        TaskStatus.IN_PROGRESS,
    ),
]

DateResolver = Callable[[str, datetime], datetime | None]


def _first_match(text: str, rules, default):
    for pattern, value in rules:
        if pattern.search(text):
            return value
    return default


def resolve_priority(text: str) -> TaskPriority:
    return _first_match(text, PRIORITY_RULES, TaskPriority.MEDIUM)


def resolve_status(text: str) -> TaskStatus:
    return _first_match(text, STATUS_RULES, TaskStatus.PENDING)


def derive_title(transcript: str) -> str:
    """
    Short label for a transcript:
    - empty/whitespace -> fixed fallback
    - first sentence, including its terminator
    - otherwise the text, cut to 77 chars + '...' when longer than 80
    """
    trimmed = transcript.strip()
    if not trimmed:
        return DEFAULT_TITLE

    m = SENTENCE_END_PAT.search(trimmed)
    if m and m.start() > 0:
        return trimmed[: m.start() + 1]

    if len(trimmed) > MAX_TITLE_LEN:
        return trimmed[: MAX_TITLE_LEN - len(ELLIPSIS)] + ELLIPSIS
    return trimmed


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def resolve_date_phrase(text: str, now: datetime) -> datetime | None:
    """
    Find the first date/time phrase in the text (e.g. 'by Friday', 'tomorrow evening')
    and resolve it relative to `now`, in `now`'s timezone.
    """
    tz_name = getattr(now.tzinfo, "key", None)
    if tz_name is None:
        # naive or fixed-offset: resolve in UTC
        now = _as_utc(now)
        tz_name = "UTC"

    date_settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": now.replace(tzinfo=None),
        "RETURN_AS_TIMEZONE_AWARE": True,
        "TIMEZONE": tz_name,
        "DATE_ORDER": "MDY",
    }
    matches = search_dates(text, settings=date_settings, languages=["en"])
    if not matches:
        return None

    _, dt = matches[0]
    return dt


def parse_voice_input(
    transcript: str,
    now: datetime,
    resolver: DateResolver = resolve_date_phrase,
) -> ParsedDraft:
    """
    Turn a spoken sentence into a task draft.

    Priority and status come from the ordered rule tables and always resolve.
    The due date is whatever `resolver` finds first, normalized to UTC; a
    resolver that fails or finds nothing leaves `due_date` unset.
    """
    priority = resolve_priority(transcript)
    status = resolve_status(transcript)

    due = None
    if transcript.strip():
        try:
            found = resolver(transcript, now)
        except Exception:
            logger.warning("Date resolution failed for transcript of length %d", len(transcript), exc_info=True)
            found = None
        if found is not None:
            due = _as_utc(found)

    return ParsedDraft(
        title=derive_title(transcript),
        description=transcript,
        priority=priority,
        status=status,
        due_date=due,
        raw_transcript=transcript,
    )
