"""Attempt scoring against a point-in-time question snapshot.

Every judgement made while an attempt is running uses the questions copied
onto the attempt when it started, so editing the quiz afterwards cannot
change a result.  An answer of ``SKIPPED`` (-1) is what the client sends when
a per-question timer runs out; it is never correct and earns nothing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

SKIPPED = -1

# (minimum percentage, label), checked top-down
_FEEDBACK_BANDS: list[tuple[int, str]] = [
    (90, "excellent"),
    (80, "good"),
    (70, "average"),
    (60, "below_average"),
]


@dataclass(frozen=True)
class AttemptSummary:
    score: int
    percentage: int
    time_taken: int
    feedback: str


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (``round`` would bank it)."""
    return int(math.floor(value + 0.5))


def feedback_for(percentage: float) -> str:
    for threshold, label in _FEEDBACK_BANDS:
        if percentage >= threshold:
            return label
    return "poor"


def percentage_of(score: int, total_possible: int) -> int:
    if total_possible <= 0:
        return 0
    return round_half_up(score / total_possible * 100)


def summarise_answers(answers: Iterable[dict[str, Any]], total_possible: int) -> AttemptSummary:
    """Fold stored answers into the derived attempt fields."""
    answers = list(answers)
    score = sum(int(a.get("points_earned", 0)) for a in answers)
    time_taken = sum(int(a.get("time_spent", 0)) for a in answers)
    percentage = percentage_of(score, total_possible)
    return AttemptSummary(
        score=score,
        percentage=percentage,
        time_taken=time_taken,
        feedback=feedback_for(percentage),
    )


# ── Snapshot helpers ──────────────────────────────────────────────────────────


def snapshot_questions(questions: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Freeze the scoring-relevant fields of each question."""
    return [
        {
            "question_text": q.get("question_text"),
            "options": list(q.get("options") or []),
            "correct_answer": q.get("correct_answer"),
            "explanation": q.get("explanation"),
            "points": int(q.get("points") or 0),
            "time_limit": q.get("time_limit"),
        }
        for q in questions
    ]


def total_points(questions: Iterable[dict[str, Any]]) -> int:
    return sum(int(q.get("points") or 0) for q in questions)


# ── Grading ───────────────────────────────────────────────────────────────────


def grade_answer(
    question: dict[str, Any],
    question_index: int,
    selected_option: int,
    time_spent: int,
) -> dict[str, Any]:
    """Judge one answer against its snapshot question.

    The caller has already checked that *selected_option* is ``SKIPPED`` or a
    valid option index.
    """
    is_correct = selected_option != SKIPPED and selected_option == int(
        question["correct_answer"]
    )
    return {
        "question_index": question_index,
        "selected_option": selected_option,
        "is_correct": is_correct,
        "points_earned": int(question.get("points") or 0) if is_correct else 0,
        "time_spent": time_spent,
        "explanation": question.get("explanation"),
    }


def upsert_answer(answers: list[dict[str, Any]], answer: dict[str, Any]) -> list[dict[str, Any]]:
    """Return a new answer list where *answer* replaces any earlier one for its question."""
    updated = list(answers)
    for pos, existing in enumerate(updated):
        if existing["question_index"] == answer["question_index"]:
            updated[pos] = answer
            return updated
    updated.append(answer)
    return updated


def build_breakdown(
    answers: Iterable[dict[str, Any]], snapshot: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Per-answer report built from the snapshot, in answer order."""
    rows = []
    for ans in answers:
        idx = ans["question_index"]
        q = snapshot[idx] if 0 <= idx < len(snapshot) else {}
        rows.append(
            {
                "question_index": idx,
                "question_text": q.get("question_text"),
                "options": q.get("options") or [],
                "selected_option": ans["selected_option"],
                "correct_answer": q.get("correct_answer"),
                "is_correct": ans["is_correct"],
                "points_earned": ans["points_earned"],
                "points_available": q.get("points") or 0,
                "explanation": q.get("explanation") or "",
                "time_spent": ans.get("time_spent") or 0,
            }
        )
    return rows


def running_mean(current_mean: float, current_count: int, value: float) -> float:
    """Mean after folding *value* into *current_count* earlier samples."""
    return round((current_mean * current_count + value) / (current_count + 1), 2)
