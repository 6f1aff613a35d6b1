"""Match a free-text goal title against the template catalog."""
from __future__ import annotations

import logging
from typing import FrozenSet, Optional, Tuple

from app.services.template_catalog import TEMPLATE_CATALOG, Template

logger = logging.getLogger(__name__)

# Token groups checked in order once no catalog key is a substring of the title.
KEYWORD_GROUPS: Tuple[Tuple[FrozenSet[str], str], ...] = (
    (frozenset({"spanish", "french", "german", "italian", "chinese", "japanese"}), "learn spanish"),
    (frozenset({"programming", "coding", "javascript", "react", "web", "python"}), "learn python"),
    (frozenset({"fitness", "exercise", "workout", "gym", "healthy", "weight"}), "get fit"),
    (frozenset({"guitar", "piano", "violin", "drums", "singing", "music"}), "learn guitar"),
    (frozenset({"speaking", "presentation", "communication", "confidence"}), "public speaking"),
)


def normalize_title(title: str | None) -> str:
    return (title or "").strip().lower()


def match_template(title: str | None) -> Optional[Template]:
    """Return the template for ``title`` or ``None``.

    An exact substring hit on a catalog key wins; otherwise the title's
    whitespace tokens are checked against fixed keyword groups. No scoring
    happens beyond group membership.
    """
    normalized = normalize_title(title)
    if not normalized:
        return None

    for key, template in TEMPLATE_CATALOG.items():
        if key in normalized:
            logger.debug("Template %s matched title by key %r", template.id, key)
            return template

    tokens = set(normalized.split())
    for keywords, key in KEYWORD_GROUPS:
        if tokens & keywords:
            template = TEMPLATE_CATALOG[key]
            logger.debug("Template %s matched title by keyword group", template.id)
            return template
    return None
