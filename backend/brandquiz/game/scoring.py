"""Per-question scoring.

Single-select: a correct answer earns ``BASE_POINTS`` plus ``STREAK_BONUS``
for every consecutive correct answer before it. Multi-select: one point per
correct selection minus one per wrong selection, floored at zero. The streak
only survives a fully correct round.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import Player, Question


BASE_POINTS = 10
STREAK_BONUS = 5


@dataclass(frozen=True)
class RoundResult:
    points: int
    correct: bool
    streak: int
    # Multi-select only: net hits (hits - misses, may be negative) and key size.
    correct_count: int = 0
    total_correct: int = 0


def normalize_single(answer: Any) -> int | None:
    if isinstance(answer, bool) or not isinstance(answer, int):
        return None
    return answer


def normalize_multi(answer: Any) -> list[int]:
    if not isinstance(answer, (list, tuple)):
        return []
    picked: list[int] = []
    for a in answer:
        if isinstance(a, bool) or not isinstance(a, int):
            continue
        if a not in picked:
            picked.append(a)
    return picked


def score_single(answer: Any, correct_answer: int | None, streak: int) -> RoundResult:
    choice = normalize_single(answer)
    if choice is not None and choice == correct_answer:
        return RoundResult(points=BASE_POINTS + streak * STREAK_BONUS, correct=True, streak=streak + 1)
    return RoundResult(points=0, correct=False, streak=0)


def score_multi(answer: Any, correct_answers, streak: int) -> RoundResult:
    key = set(correct_answers)
    selected = normalize_multi(answer)
    hits = sum(1 for s in selected if s in key)
    misses = len(selected) - hits
    exact = set(selected) == key
    return RoundResult(
        points=max(0, hits - misses),
        correct=exact,
        streak=streak + 1 if exact else 0,
        correct_count=hits - misses,
        total_correct=len(key),
    )


def score_answer(question: Question, answer: Any, streak: int) -> RoundResult:
    """Score one player's answer. ``answer`` is None when the player did not respond."""
    if question.is_multi:
        return score_multi(answer, question.correct_answers, streak)
    return score_single(answer, question.correct_answer, streak)


def apply_result(player: Player, result: RoundResult) -> None:
    player.score += result.points
    player.streak = result.streak
    player.last_round_points = result.points
