from __future__ import annotations

import re
from dataclasses import dataclass

from ..game.models import Question
from .brands import HOTEL_GROUPS, find_brand_group
from .highlight import strip_emphasis


_NEGATION_RE = re.compile(r"\bnot\b", re.IGNORECASE)


@dataclass(frozen=True)
class Verdict:
    valid: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.valid


def accept(reason: str = "") -> Verdict:
    return Verdict(True, reason)


def reject(reason: str) -> Verdict:
    return Verdict(False, reason)


def _is_yes_no(options) -> bool:
    lowered = {o.strip().lower() for o in options}
    return "yes" in lowered and "no" in lowered


def infer_target_group(text: str, selected_group_ids: list[str]) -> str | None:
    """Find which selected group the question is about.

    Matches the full group name or its first word ("Marriott" for
    "Marriott International"). Falls back to the only selected group.
    """
    for gid in selected_group_ids:
        group = HOTEL_GROUPS.get(gid)
        if group is None:
            continue
        if group.name in text or group.name.split(" ")[0] in text:
            return gid
    if len(selected_group_ids) == 1:
        return selected_group_ids[0]
    return None


def validate_question(question: Question, selected_group_ids: list[str]) -> Verdict:
    options = question.options

    if question.is_multi:
        if not question.correct_answers:
            return reject("Multi-select question missing correctAnswers")
        if any(i < 0 or i >= len(options) for i in question.correct_answers):
            return reject("Multi-select question has invalid correctAnswers indices")
        return accept("Multi-select structure ok")

    idx = question.correct_answer
    if idx is None or not 0 <= idx < len(options):
        return reject("Invalid correct answer index")

    text = strip_emphasis(question.text)
    correct_option = options[idx]
    target = infer_target_group(text, selected_group_ids)
    distractors = [o for i, o in enumerate(options) if i != idx]

    if _NEGATION_RE.search(text):
        if target is None:
            return accept("Skipped validation (multi-group)")
        if find_brand_group(correct_option) == target:
            return reject(f"Logic error: asks for NOT {target}, but {correct_option} is {target}")
        outside = [o for o in distractors if find_brand_group(o) != target]
        if len(outside) > 1:
            return reject(f"Ambiguous: several options are NOT {target}: {', '.join(outside)}")
        return accept()

    if _is_yes_no(options):
        return accept("Skipped validation (Yes/No)")
    if target is None:
        return accept("Skipped validation (multi-group)")

    correct_group = find_brand_group(correct_option)
    if correct_group != target:
        return reject(f"Logic error: asks for {target}, but {correct_option} is {correct_group or 'unknown'}")

    inside = [o for o in distractors if find_brand_group(o) == target]
    if inside:
        return reject(f"Ambiguous: several options ARE {target}: {', '.join(inside)}")
    return accept()
