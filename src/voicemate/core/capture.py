"""Pure capture classification - no I/O dependencies.

Decides whether a captured utterance is a task or a diary entry and derives
a title, description and priority for tasks.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

MAX_TITLE_LENGTH = 50
ELLIPSIS = "…"

_SENTENCE_END = re.compile(r"[.!?]")


class EntryKind(Enum):
    """What a captured utterance should be filed as."""

    TASK = "task"
    DIARY_ENTRY = "diary_entry"


class Priority(Enum):
    """Task priority, using the task board's wire values."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_TASK_KEYWORDS = (
    "task",
    "todo",
    "remind",
    "remember",
    "need to",
    "should",
    "must",
    "have to",
    "appointment",
    "meeting",
    "call",
    "email",
    "buy",
    "get",
    "pick up",
    "finish",
    "complete",
    "work on",
    "schedule",
    "plan",
    "deadline",
    "due",
    "urgent",
    "important",
)
DEFAULT_HIGH_PRIORITY_KEYWORDS = ("urgent", "asap", "immediately")
DEFAULT_LOW_PRIORITY_KEYWORDS = ("when possible", "sometime", "eventually")


@dataclass(frozen=True)
class KeywordRules:
    """Keyword lists driving classification. Matching is case-insensitive substring."""

    task_keywords: tuple[str, ...] = DEFAULT_TASK_KEYWORDS
    high_priority_keywords: tuple[str, ...] = DEFAULT_HIGH_PRIORITY_KEYWORDS
    low_priority_keywords: tuple[str, ...] = DEFAULT_LOW_PRIORITY_KEYWORDS

    @classmethod
    def from_lists(
        cls,
        task_keywords: list[str] | None = None,
        high_priority_keywords: list[str] | None = None,
        low_priority_keywords: list[str] | None = None,
    ) -> "KeywordRules":
        """Build rules, keeping the defaults for any list that is empty or missing."""
        return cls(
            task_keywords=_normalize(task_keywords) or DEFAULT_TASK_KEYWORDS,
            high_priority_keywords=_normalize(high_priority_keywords) or DEFAULT_HIGH_PRIORITY_KEYWORDS,
            low_priority_keywords=_normalize(low_priority_keywords) or DEFAULT_LOW_PRIORITY_KEYWORDS,
        )


DEFAULT_RULES = KeywordRules()


def _normalize(keywords: list[str] | None) -> tuple[str, ...]:
    if not keywords:
        return ()
    return tuple(k.strip().lower() for k in keywords if k.strip())


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one utterance."""

    kind: EntryKind
    title: str
    text: str
    description: str | None = None
    priority: Priority | None = None

    @property
    def is_task(self) -> bool:
        return self.kind == EntryKind.TASK

    def to_task_payload(self, due_date: date | None = None) -> dict:
        """Request body for creating a task on the board."""
        return {
            "title": self.title,
            "description": self.description,
            "status": "not_started",
            "priority": (self.priority or Priority.MEDIUM).value,
            "dueDate": due_date.isoformat() if due_date else None,
        }

    def to_diary_payload(self, on_date: date) -> dict:
        """Request body for creating a diary entry."""
        return {"content": self.text, "date": on_date.isoformat()}

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value if self.priority else None,
        }


def truncate_title(title: str, limit: int = MAX_TITLE_LENGTH) -> str:
    """Cut titles longer than `limit` to limit-3 characters plus an ellipsis."""
    if len(title) <= limit:
        return title
    return title[: limit - 3] + ELLIPSIS


def split_title(text: str) -> tuple[str, str | None]:
    """
    Split text into (title, description) on sentence punctuation.

    The first non-empty sentence is the title, the rest joined by ". " is the
    description. Text with no usable sentence falls back to itself as title.
    """
    segments = [s.strip() for s in _SENTENCE_END.split(text)]
    segments = [s for s in segments if s]
    if not segments:
        return truncate_title(text.strip()), None

    title = truncate_title(segments[0])
    description = ". ".join(segments[1:]) or None
    return title, description


def is_task(text: str, rules: KeywordRules = DEFAULT_RULES) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in rules.task_keywords)


def derive_priority(text: str, rules: KeywordRules = DEFAULT_RULES) -> Priority:
    """High keywords win over low ones; anything else is medium."""
    lowered = text.lower()
    if any(keyword in lowered for keyword in rules.high_priority_keywords):
        return Priority.HIGH
    if any(keyword in lowered for keyword in rules.low_priority_keywords):
        return Priority.LOW
    return Priority.MEDIUM


def classify(text: str, rules: KeywordRules = DEFAULT_RULES) -> ClassificationResult:
    """
    Classify an utterance as a task or a diary entry.

    Pure function - no I/O, no state kept between calls, never raises.
    Callers filter out empty input.
    """
    title, description = split_title(text)

    if not is_task(text, rules):
        return ClassificationResult(kind=EntryKind.DIARY_ENTRY, title=title, text=text)

    return ClassificationResult(
        kind=EntryKind.TASK,
        title=title,
        text=text,
        description=description,
        priority=derive_priority(text, rules),
    )
