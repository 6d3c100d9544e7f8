from __future__ import annotations

import random
from dataclasses import replace

from ..game.models import MULTI_TIME_LIMIT, Question
from .brands import HOTEL_GROUPS, find_brand_group, known_group_ids
from .highlight import highlight_brands
from .shuffler import shuffle_options


def _single(text: str, options: list[str], correct: int) -> Question:
    return Question(text=text, options=tuple(options), correct_answer=correct)


def _multi(text: str, options: list[str], correct: list[int]) -> Question:
    return Question(
        text=text,
        options=tuple(options),
        type="multi-select",
        correct_answers=tuple(correct),
        time_limit=MULTI_TIME_LIMIT,
    )


CURATED_MARRIOTT = (
    _single("Which brand is Marriott's flagship luxury brand?", ["JW Marriott", "Ritz-Carlton", "St. Regis", "W Hotels"], 1),
    _single("Is Bulgari part of the Marriott portfolio?", ["Yes", "No"], 0),
    _single("Which brand offers yacht experiences?", ["W Hotels", "Ritz-Carlton", "EDITION", "St. Regis"], 1),
    _single("Which brand is known for its wellness focus?", ["Sheraton", "Westin", "Renaissance", "Le Méridien"], 1),
    _single("Is Autograph Collection a soft brand?", ["Yes", "No"], 0),
    _single("Which brand targets creative travelers?", ["Renaissance", "Le Méridien", "Sheraton", "Delta Hotels"], 0),
    _single("Which brand is designed for extended stays?", ["Courtyard", "Residence Inn", "Fairfield Inn", "SpringHill Suites"], 1),
    _single("Is Moxy a budget-friendly brand?", ["Yes", "No"], 0),
    _single("Which brand focuses on eco-conscious travelers?", ["Element", "Aloft", "AC Hotels", "Four Points"], 0),
    _single("Which brand offers vacation ownership?", ["Residence Inn", "Marriott Vacation Club", "TownePlace Suites", "Element"], 1),
    _single("Does Homes & Villas offer private home rentals?", ["Yes", "No"], 0),
    _single("Is Hilton part of Marriott?", ["Yes", "No"], 1),
    _single("Which of these is NOT a Marriott brand?", ["Westin", "Sofitel", "Sheraton", "Courtyard"], 1),
    _single("Is Crowne Plaza a Marriott brand?", ["Yes", "No"], 1),
    _single("Which is a competitor brand?", ["Aloft", "Best Western", "Moxy", "AC Hotels"], 1),
    _multi(
        "Select all **Luxury** brands from Marriott:",
        ["Ritz-Carlton", "Courtyard", "St. Regis", "Moxy", "JW Marriott", "Aloft"],
        [0, 2, 4],
    ),
    _multi(
        "Select all brands that are **NOT** part of Marriott:",
        ["Westin", "Hilton", "Sheraton", "Hyatt", "Renaissance", "InterContinental"],
        [1, 3, 5],
    ),
)


def _own_brands(group_id: str) -> list[str]:
    # Only brands the lookup resolves back to this group, so generated
    # questions agree with the validator.
    return [b for b in HOTEL_GROUPS[group_id].brands if find_brand_group(b) == group_id]


def _foreign_brands(group_id: str) -> list[str]:
    return [
        b
        for gid in HOTEL_GROUPS
        if gid != group_id
        for b in _own_brands(gid)
    ]


def _which_is(group_id: str, rng: random.Random) -> Question:
    name = HOTEL_GROUPS[group_id].name
    options = [rng.choice(_own_brands(group_id))] + rng.sample(_foreign_brands(group_id), 3)
    return _single(f"Which of these is a {name} brand?", options, 0)


def _which_is_not(group_id: str, rng: random.Random) -> Question:
    name = HOTEL_GROUPS[group_id].name
    options = [rng.choice(_foreign_brands(group_id))] + rng.sample(_own_brands(group_id), 3)
    return _single(f"Which of these is NOT a {name} brand?", options, 0)


def _select_all(group_id: str, rng: random.Random) -> Question:
    name = HOTEL_GROUPS[group_id].name
    options = rng.sample(_own_brands(group_id), 3) + rng.sample(_foreign_brands(group_id), 3)
    return _multi(f"Select all brands belonging to {name}", options, [0, 1, 2])


def generate_group_question(group_id: str, rng: random.Random) -> Question:
    maker = rng.choices((_which_is, _which_is_not, _select_all), weights=(5, 4, 1))[0]
    return maker(group_id, rng)


def generate_questions(count: int, group_ids=None, rng: random.Random | None = None) -> list[Question]:
    """Build ``count`` fallback questions for the selected groups.

    Curated questions are used when Marriott is selected; the rest are
    generated from the brand dataset. Every question comes back highlighted
    and shuffled.
    """
    rng = rng or random.Random()
    groups = known_group_ids(group_ids) or ["MARRIOTT"]

    pool: list[Question] = list(CURATED_MARRIOTT) if "MARRIOTT" in groups else []
    while len(pool) < count * 2:
        pool.append(generate_group_question(rng.choice(groups), rng))

    picked = rng.sample(pool, count)
    return [shuffle_options(replace(q, text=highlight_brands(q.text)), rng) for q in picked]
