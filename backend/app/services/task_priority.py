"""Task type to priority lookup."""
from __future__ import annotations

from typing import Mapping

DEFAULT_PRIORITY = 3

PRIORITY_BY_TYPE: Mapping[str, int] = {
    "study": 5,
    "practice": 4,
    "exercise": 3,
    "review": 2,
}


def classify_priority(task_type: str | None) -> int:
    return PRIORITY_BY_TYPE.get((task_type or "").strip().lower(), DEFAULT_PRIORITY)
