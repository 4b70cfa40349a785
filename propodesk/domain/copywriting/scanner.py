"""
Copy scanner: flags passive voice, weak words, cliches and long sentences.

A pure text -> issues transform. Matching is ASCII word-boundary based and
case-insensitive; results are ordered by position in the text.
"""

import re
from typing import Literal

from pydantic import BaseModel

IssueType = Literal["passive", "weak", "complex", "cliché", "long-sentence"]

PASSIVE_VOICE = re.compile(
    r"\b(am|are|is|was|were|be|been|being)\b\s+"
    r"(\w+ed|done|seen|written|eaten|taken|gone|paid|made|built|sent)\b",
    re.IGNORECASE | re.ASCII,
)
WEAK_WORDS = (
    "very",
    "really",
    "things",
    "stuff",
    "just",
    "literally",
    "virtually",
    "basically",
    "quite",
    "rather",
    "somewhat",
    "perhaps",
    "maybe",
)
CLICHES = (
    "cutting edge",
    "thinking outside the box",
    "game changer",
    "move the needle",
    "paradigm shift",
    "synergy",
    "leverage",
    "best of breed",
    "core competency",
    "deep dive",
    "drill down",
    "ecosystem",
    "low hanging fruit",
    "mission critical",
)
SENTENCE = re.compile(r"[^.!?]+[.!?]+")
MAX_SENTENCE_WORDS = 25

SUGGESTIONS = {
    "passive": "Use active voice for more impact",
    "weak": "Remove or replace with a stronger alternative",
    "cliché": "Avoid jargon, be specific",
    "long-sentence": f"Consider splitting this long sentence (>{MAX_SENTENCE_WORDS} words)",
}

_WEAK_PATTERNS = [re.compile(rf"\b{re.escape(w)}\b", re.IGNORECASE | re.ASCII) for w in WEAK_WORDS]
_CLICHE_PATTERNS = [re.compile(rf"\b{re.escape(c)}\b", re.IGNORECASE | re.ASCII) for c in CLICHES]


class Issue(BaseModel):
    text: str
    type: IssueType
    suggestion: str
    index: int
    length: int


def _matches(pattern: re.Pattern, text: str, issue_type: IssueType) -> list[Issue]:
    return [
        Issue(
            text=m.group(0),
            type=issue_type,
            suggestion=SUGGESTIONS[issue_type],
            index=m.start(),
            length=len(m.group(0)),
        )
        for m in pattern.finditer(text)
    ]


def scan_text(text: str) -> list[Issue]:
    """Scan copy and return issues sorted by index (ties keep detection order)"""
    issues = _matches(PASSIVE_VOICE, text, "passive")
    for pattern in _WEAK_PATTERNS:
        issues.extend(_matches(pattern, text, "weak"))
    for pattern in _CLICHE_PATTERNS:
        issues.extend(_matches(pattern, text, "cliché"))

    # Index is the first occurrence of the trimmed sentence at or after the
    # running cursor, so repeated sentences can report an earlier position.
    cursor = 0
    for sentence in SENTENCE.findall(text):
        if len(re.split(r"\s+", sentence)) > MAX_SENTENCE_WORDS:
            trimmed = sentence.strip()
            issues.append(
                Issue(
                    text=trimmed,
                    type="long-sentence",
                    suggestion=SUGGESTIONS["long-sentence"],
                    index=text.find(trimmed, cursor),
                    length=len(trimmed),
                )
            )
        cursor += len(sentence)

    return sorted(issues, key=lambda issue: issue.index)
