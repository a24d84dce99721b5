"""
Scoring rules for quizzes and practice tests.

All rounding is half-up (2.5 -> 3), matching how scores were always shown
to students; Python's round() would give banker's rounding instead.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from server.catalog import SECTION_ORDER

MIN_SCALED = 1
MAX_SCALED = 36


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def word_count(text: Optional[str]) -> int:
    if not text:
        return 0
    return len([w for w in re.split(r"\s+", text.strip()) if w])


def grade_quiz(
    questions: List[Dict[str, Any]], answers: Mapping[str, Any]
) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """Mark every question correct/incorrect/skipped; return (graded, score)."""
    correct = incorrect = skipped = 0
    graded = []
    for q in questions:
        given = answers.get(q.get("id"))
        if not given:
            status = "skipped"
            skipped += 1
        elif given == q.get("correctAnswer"):
            status = "correct"
            correct += 1
        else:
            status = "incorrect"
            incorrect += 1
        graded.append({**q, "userAnswer": given or None, "status": status})
    total = len(questions)
    score = {
        "correct": correct,
        "incorrect": incorrect,
        "skipped": skipped,
        "total": total,
        "percentage": round_half_up(correct / total * 100) if total else 0,
    }
    return graded, score


def quiz_xp(percentage: int) -> int:
    """25 XP per quiz plus 5 for every full 10 %."""
    return 25 + (percentage // 10) * 5


def iter_section_questions(section: Mapping[str, Any]) -> Iterable[Dict[str, Any]]:
    for passage in section.get("passages") or []:
        for q in passage.get("questions") or []:
            yield q


def score_section(section: Mapping[str, Any], answers: Mapping[str, Any]) -> Dict[str, int]:
    """Raw and scaled (1-36) score for one test section; answers keyed by question id."""
    correct = total = 0
    for q in iter_section_questions(section):
        total += 1
        if answers.get(q.get("id")) == q.get("correctAnswer"):
            correct += 1
    raw = correct / total if total else 0.0
    return {
        "correct": correct,
        "total": total,
        "rawPercentage": round_half_up(raw * 100),
        "scaledScore": round_half_up(raw * 35) + 1,
    }


def composite_score(section_order: List[str], sections: Mapping[str, Any]) -> Tuple[Dict[str, int], int]:
    """Per-section scaled scores and their rounded mean. Unscored sections count as 1."""
    scores: Dict[str, int] = {}
    for name in section_order:
        section_score = (sections.get(name) or {}).get("score")
        scores[name] = section_score["scaledScore"] if section_score else MIN_SCALED
    if not scores:
        return scores, MIN_SCALED
    return scores, round_half_up(sum(scores.values()) / len(scores))


def percentile(composite: int) -> int:
    return min(99, max(1, round_half_up((composite - 1) * 3)))


def estimated_score(tests: List[Dict[str, Any]], subjects: Optional[Mapping[str, Any]]) -> int:
    """
    Rough ACT estimate: mean composite of the last three tests, else the mean of
    subject accuracies mapped onto 1-36, else 18.
    """
    if tests:
        recent = tests[-3:]
        return round_half_up(sum(t.get("compositeScore") or 0 for t in recent) / len(recent))
    scaled = [
        round_half_up(s["score"] * 0.36)
        for s in (subjects or {}).values()
        if isinstance(s, dict) and (s.get("score") or 0) > 0
    ]
    if scaled:
        return round_half_up(sum(scaled) / len(scaled))
    return 18


def ordered_sections(requested: Iterable[str]) -> List[str]:
    """Known sections from ``requested`` in request order, without duplicates."""
    seen: List[str] = []
    for s in requested:
        key = str(s).lower()
        if key in SECTION_ORDER and key not in seen:
            seen.append(key)
    return seen
