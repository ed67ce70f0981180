"""Multi-Sentence Helpers - split free text into questions and format per-question answers.

Invariants:
    - Pure functions, no IO
    - split_into_sentences never returns blank entries
    - extract_answer always returns a string
"""

import re
from dataclasses import dataclass
from typing import Any

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")

NO_ANSWER = "No answer found"


@dataclass
class SentenceSearchResult:
    sentence: str
    search_result: Any
    answer: str

    @property
    def succeeded(self) -> bool:
        return self.search_result is not None


def split_into_sentences(text: str) -> list[str]:
    """Split on whitespace that follows ., ! or ?"""
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def extract_answer(search_result: Any) -> str:
    """First non-empty of content / answer / response."""
    if not isinstance(search_result, dict):
        return NO_ANSWER
    for key in ("content", "answer", "response"):
        if search_result.get(key):
            return search_result[key]
    return NO_ANSWER


def format_final_answer(results: list[SentenceSearchResult]) -> str:
    blocks = [
        f"**Question:** {r.sentence}\n\n**Answer:** {r.answer}\n\n---\n\n"
        for r in results
    ]
    return "".join(blocks).strip()
