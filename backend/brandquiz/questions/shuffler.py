from __future__ import annotations

import random
from dataclasses import replace

from ..game.models import Question


def shuffle_options(question: Question, rng: random.Random | None = None) -> Question:
    """Return a copy of ``question`` with its options in random order.

    Correct-answer indices are remapped so they still point at the same
    option text.
    """
    rng = rng or random
    order = rng.sample(range(len(question.options)), len(question.options))
    new_position = {old: new for new, old in enumerate(order)}
    options = tuple(question.options[old] for old in order)

    if question.is_multi:
        return replace(
            question,
            options=options,
            correct_answers=tuple(new_position[i] for i in question.correct_answers),
        )
    return replace(question, options=options, correct_answer=new_position[question.correct_answer])
