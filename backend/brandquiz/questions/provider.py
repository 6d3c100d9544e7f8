from __future__ import annotations

import json
import logging
import math
import random
import re
from typing import Any, Protocol

import requests

from ..game.models import MULTI_TIME_LIMIT, SINGLE_TIME_LIMIT, Question
from .brands import HOTEL_GROUPS, dataset_as_dict, known_group_ids
from .highlight import highlight_brands
from .shuffler import shuffle_options
from .static_bank import generate_questions
from .validator import validate_question


logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OPTION_PREFIX_RE = re.compile(r"^[A-D][.)]\s*", re.IGNORECASE)
_LETTERS = "ABCD"


class ProviderError(Exception):
    pass


class QuestionProvider(Protocol):
    def generate(self, count: int, group_ids: list[str]) -> str:
        """Return the raw model output for ``count`` questions."""


def build_prompt(count: int, group_ids: list[str]) -> str:
    selected_name = HOTEL_GROUPS[group_ids[0]].name
    if len(group_ids) == 1:
        instructions = f"""
**MODE: SINGLE GROUP TRAINING ({selected_name})**
Generate questions that test knowledge of **{selected_name}** against its competitors.

**FORBIDDEN QUESTION TYPES:**
- DO NOT ask "Which hotel group owns [Brand]?" if the answer is {selected_name}.

**REQUIRED QUESTION TYPES:**
1. "Which of these is a {selected_name} brand?" (1 correct brand, 3 competitor brands).
2. "Which of these is NOT a {selected_name} brand?" (3 correct brands, 1 competitor brand).
3. "Is [Competitor Brand] part of {selected_name}?" (Correct answer: No).
4. "Is [Correct Brand] part of {selected_name}?" (Correct answer: Yes).

**SMART DISTRACTORS:** match the tier of the correct answer (luxury against luxury).
"""
    else:
        instructions = """
**MODE: MULTI-GROUP COMPARISON**
1. "Which hotel group owns [Brand]?"
2. "Which of these brands belongs to [Group]?"
3. "Is [Brand] part of [Group]?"
Use distractors from the other selected groups first.
"""

    return f"""You are an expert Hotel Consultant.

**FULL DATA CONTEXT (Reference Source):**
{json.dumps(dataset_as_dict(), indent=2, ensure_ascii=False)}

**INSTRUCTIONS:**
The user is training on: **{', '.join(group_ids)}**.
{instructions}
**CRITICAL RULES:**
1. Generate {math.ceil(count * 1.5)} unique questions.
2. Include 1-2 MULTI-SELECT questions.
3. Use the FULL DATA CONTEXT to verify facts.
4. Standard questions have exactly 4 options.
5. Multi-select questions have 6-8 options with several correct answers,
   "type": "multi-select", "correctAnswers": [indices] and "timeLimit": {MULTI_TIME_LIMIT}.

**OUTPUT FORMAT:**
Strict JSON array. No Markdown.
[{{"id": 1, "text": "Question?", "options": ["A", "B", "C", "D"], "correctAnswer": 0, "explanation": "Short fact."}}]
"""


class GeminiProvider:
    """Calls the Gemini ``generateContent`` REST endpoint."""

    def __init__(self, api_key: str, model: str, timeout: float = 30.0, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate(self, count: int, group_ids: list[str]) -> str:
        if not self.api_key:
            raise ProviderError("GEMINI_API_KEY is not configured")

        body = {"contents": [{"parts": [{"text": build_prompt(count, group_ids)}]}]}
        try:
            resp = self.session.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ProviderError(f"API error ({resp.status_code}): {resp.text[:200]}")

        try:
            return resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"unexpected response envelope: {exc}") from exc


def parse_candidates(content: str) -> list[dict]:
    """Extract the JSON array of question candidates from model output."""
    if not isinstance(content, str) or not content.strip():
        raise ProviderError("empty response")

    match = _FENCE_RE.search(content)
    if match:
        content = match.group(1)
    content = content.strip()

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        start, end = content.find("["), content.rfind("]")
        if start == -1 or end <= start:
            raise ProviderError("no JSON array in response")
        try:
            data = json.loads(content[start:end + 1])
        except json.JSONDecodeError as exc:
            raise ProviderError(f"malformed JSON: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise ProviderError("response is not a list of questions")
    return [q for q in data if isinstance(q, dict)]


def _clean_option(opt: Any) -> str:
    return _OPTION_PREFIX_RE.sub("", str(opt)).strip()


def _resolve_correct_index(raw: Any, options: list[str]) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        return None

    letter = raw.strip().upper()
    if len(letter) == 1 and letter in _LETTERS:
        return _LETTERS.index(letter)
    if raw in options:
        return options.index(raw)
    wanted = _clean_option(raw).lower()
    for i, opt in enumerate(options):
        if opt.strip().lower() == wanted:
            return i
    return None


def normalize_candidate(raw: dict) -> Question | None:
    """Turn one raw model question into a ``Question``, or None if unusable."""
    text = raw.get("text") or raw.get("question")
    options = raw.get("options")
    if not isinstance(text, str) or not isinstance(options, list) or len(options) < 2:
        return None
    raw_options = [str(o) for o in options]
    cleaned = [_clean_option(o) for o in raw_options]
    time_limit = raw.get("timeLimit")
    if isinstance(time_limit, bool) or not isinstance(time_limit, int) or time_limit <= 0:
        time_limit = None

    if raw.get("type") == "multi-select":
        correct = raw.get("correctAnswers")
        if not isinstance(correct, list) or not correct:
            return None
        if any(isinstance(i, bool) or not isinstance(i, int) for i in correct):
            return None
        return Question(
            text=highlight_brands(text),
            options=tuple(cleaned),
            type="multi-select",
            correct_answers=tuple(dict.fromkeys(correct)),
            time_limit=time_limit or MULTI_TIME_LIMIT,
            explanation=str(raw.get("explanation") or ""),
        )

    correct_raw = raw.get("correctAnswer", raw.get("correct"))
    idx = _resolve_correct_index(correct_raw, raw_options)
    if idx is None:
        idx = _resolve_correct_index(correct_raw, cleaned)
    if idx is None:
        logger.warning("Skipping question: correct answer %r not in options %r", correct_raw, raw_options)
        return None
    return Question(
        text=highlight_brands(text),
        options=tuple(cleaned),
        correct_answer=idx,
        time_limit=time_limit or SINGLE_TIME_LIMIT,
        explanation=str(raw.get("explanation") or ""),
    )


class QuestionSource:
    """Builds the question set for a game: AI first, static bank on any failure."""

    def __init__(self, provider: QuestionProvider | None, rng: random.Random | None = None) -> None:
        self.provider = provider
        self.rng = rng or random.Random()

    def fetch_ai(self, count: int, group_ids: list[str]) -> list[Question]:
        if self.provider is None:
            raise ProviderError("no question provider configured")

        candidates = parse_candidates(self.provider.generate(count, group_ids))
        logger.info("Parsed %d candidate questions", len(candidates))

        valid: list[Question] = []
        for raw in candidates:
            question = normalize_candidate(raw)
            if question is None:
                continue
            verdict = validate_question(question, group_ids)
            if not verdict:
                logger.warning("Validation failed: %s | %s", verdict.reason, question.text)
                continue
            valid.append(question)

        if not valid:
            raise ProviderError("all AI questions failed validation")
        logger.info("%d valid questions (from %d candidates)", len(valid), len(candidates))
        return [shuffle_options(q, self.rng) for q in valid[:count]]

    def build(self, count: int, group_ids) -> tuple[list[Question], str]:
        groups = known_group_ids(group_ids) or ["MARRIOTT"]
        try:
            questions = self.fetch_ai(count, groups)
        except Exception as exc:
            logger.warning("AI question generation failed, using fallback: %s", exc)
            return generate_questions(count, groups, self.rng), "fallback"

        if len(questions) < count:
            logger.info("Topping up %d AI questions with %d fallback questions", len(questions), count - len(questions))
            questions += generate_questions(count - len(questions), groups, self.rng)
            return questions, "ai+fallback"
        return questions, "ai"
