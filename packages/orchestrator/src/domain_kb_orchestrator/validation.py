"""Question validation and parameter clamping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from domain_kb_common import InvalidQuestionError

# Letters and digits only; punctuation and whitespace do not count
MIN_QUESTION_LENGTH = 5

MIN_KB_RESULTS = 1
MAX_KB_RESULTS = 3
DEFAULT_KB_RESULTS = 2


def validate_question(question: Optional[str]) -> str:
    """Return the trimmed question.

    Raises:
        InvalidQuestionError: Empty, without a single letter or digit, or
            with fewer than MIN_QUESTION_LENGTH letters and digits
    """
    text = (question or "").strip()
    if not text:
        raise InvalidQuestionError("Question is required")
    significant = sum(1 for ch in text if ch.isalnum())
    if significant == 0:
        raise InvalidQuestionError("Question must contain letters or digits")
    if significant < MIN_QUESTION_LENGTH:
        raise InvalidQuestionError(
            f"Question is too short (minimum {MIN_QUESTION_LENGTH} letters or digits)"
        )
    return text


@dataclass(frozen=True)
class ClampedLimit:
    requested: int
    effective: int

    @property
    def clamped(self) -> bool:
        return self.requested != self.effective


def clamp_kb_results(requested: Optional[int]) -> ClampedLimit:
    """Clamp ``max_kb_results`` into MIN_KB_RESULTS..MAX_KB_RESULTS."""
    value = DEFAULT_KB_RESULTS if requested is None else requested
    return ClampedLimit(
        requested=value,
        effective=max(MIN_KB_RESULTS, min(MAX_KB_RESULTS, value)),
    )
