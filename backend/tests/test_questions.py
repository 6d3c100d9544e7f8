import json
import random

import pytest
import requests

from brandquiz.game.models import Question
from brandquiz.questions.highlight import highlight_brands, strip_emphasis
from brandquiz.questions.provider import (
    GeminiProvider,
    ProviderError,
    QuestionSource,
    build_prompt,
    normalize_candidate,
    parse_candidates,
)
from brandquiz.questions.shuffler import shuffle_options
from brandquiz.questions.static_bank import generate_questions
from brandquiz.questions.validator import validate_question


GOOD = {
    'text': 'Which of these is a Marriott International brand?',
    'options': ['Westin', 'Hilton Garden Inn', 'Kimpton', 'Novotel'],
    'correctAnswer': 0,
}
WRONG_KEY = {
    'text': 'Which of these is a Marriott International brand?',
    'options': ['Westin', 'Hilton Garden Inn', 'Kimpton', 'Novotel'],
    'correctAnswer': 2,
}
MULTI = {
    'text': 'Select all Marriott brands',
    'type': 'multi-select',
    'options': ['Westin', 'Hyatt Place', 'Courtyard', 'Kimpton', 'Moxy Hotels', 'Novotel'],
    'correctAnswers': [0, 2, 4],
}


class FakeProvider:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def generate(self, count, group_ids):
        self.calls.append((count, group_ids))
        if self.error:
            raise self.error
        return self.content


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = json.dumps(body)

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


# ---- highlighting & shuffling ----

def test_highlight_wraps_longest_brand_name():
    assert highlight_brands('Is JW Marriott part of Hilton?') == 'Is **JW Marriott** part of **Hilton**?'


def test_highlight_leaves_marked_text_and_partial_words():
    assert highlight_brands('Is **Moxy** cheap?') == 'Is **Moxy** cheap?'
    assert highlight_brands('Hiltonia is not a brand') == 'Hiltonia is not a brand'
    assert strip_emphasis('**Westin** spa') == 'Westin spa'


def test_shuffle_keeps_correct_option_text():
    q = Question(text='q', options=('A', 'B', 'C', 'D'), correct_answer=2)
    for seed in range(10):
        shuffled = shuffle_options(q, random.Random(seed))
        assert sorted(shuffled.options) == ['A', 'B', 'C', 'D']
        assert shuffled.options[shuffled.correct_answer] == 'C'


def test_shuffle_remaps_multi_select_key():
    q = Question(text='m', options=('A', 'B', 'C', 'D', 'E', 'F'), type='multi-select', correct_answers=(0, 2, 4))
    shuffled = shuffle_options(q, random.Random(3))
    assert {shuffled.options[i] for i in shuffled.correct_answers} == {'A', 'C', 'E'}


# ---- static bank ----

def test_static_bank_fills_requested_count():
    questions = generate_questions(25, ['MARRIOTT'], random.Random(1))
    assert len(questions) == 25
    for q in questions:
        assert all(0 <= i < len(q.options) for i in q.correct_indices())
        assert q.correct_indices()


def test_generated_questions_pass_validation():
    for group in ('HILTON', 'IHG', 'ACCOR'):
        for q in generate_questions(12, [group], random.Random(5)):
            assert validate_question(q, [group]), q.text


def test_static_bank_defaults_to_marriott():
    questions = generate_questions(5, ['NOPE'], random.Random(2))
    assert len(questions) == 5


# ---- AI output parsing ----

def test_parse_candidates_strips_code_fence():
    content = '```json\n' + json.dumps([GOOD]) + '\n```'
    assert parse_candidates(content) == [GOOD]


def test_parse_candidates_finds_array_in_prose():
    content = 'Here are your questions: ' + json.dumps([GOOD, MULTI]) + ' Enjoy!'
    assert len(parse_candidates(content)) == 2


def test_parse_candidates_accepts_wrapper_object():
    assert parse_candidates(json.dumps({'questions': [GOOD]})) == [GOOD]


@pytest.mark.parametrize('content', ['', 'no json here', '{"foo": 1}', '[1, 2'])
def test_parse_candidates_rejects_garbage(content):
    with pytest.raises(ProviderError):
        parse_candidates(content)


def test_normalize_candidate_resolves_letters_and_prefixes():
    raw = {'question': 'Which is a Hilton brand?', 'options': ['A. Westin', 'B. Tru by Hilton', 'C. Kimpton', 'D. ibis'], 'correctAnswer': 'B'}
    q = normalize_candidate(raw)
    assert q.options == ('Westin', 'Tru by Hilton', 'Kimpton', 'ibis')
    assert q.correct_answer == 1
    assert q.text == 'Which is a **Hilton** brand?'


def test_normalize_candidate_resolves_answer_text():
    raw = dict(GOOD, correctAnswer='westin')
    assert normalize_candidate(raw).correct_answer == 0


def test_normalize_candidate_drops_unusable():
    assert normalize_candidate(dict(GOOD, correctAnswer='Four Seasons')) is None
    assert normalize_candidate({'text': 'x', 'options': ['only one']}) is None
    assert normalize_candidate(dict(MULTI, correctAnswers='0,2')) is None


def test_normalize_candidate_multi_defaults():
    q = normalize_candidate(MULTI)
    assert q.is_multi
    assert q.correct_answers == (0, 2, 4)
    assert q.time_limit == 20


# ---- question source ----

def test_source_uses_ai_questions_when_enough():
    provider = FakeProvider(json.dumps([GOOD] * 6))
    questions, origin = QuestionSource(provider, random.Random(0)).build(5, ['MARRIOTT'])
    assert origin == 'ai'
    assert len(questions) == 5
    assert all(q.options[q.correct_answer] == 'Westin' for q in questions)


def test_source_drops_invalid_and_tops_up():
    provider = FakeProvider(json.dumps([GOOD, WRONG_KEY, MULTI]))
    questions, origin = QuestionSource(provider, random.Random(0)).build(5, ['MARRIOTT'])
    assert origin == 'ai+fallback'
    assert len(questions) == 5


def test_source_falls_back_on_provider_error():
    provider = FakeProvider(error=ProviderError('boom'))
    questions, origin = QuestionSource(provider, random.Random(0)).build(7, ['IHG'])
    assert origin == 'fallback'
    assert len(questions) == 7


def test_source_falls_back_when_everything_is_invalid():
    provider = FakeProvider(json.dumps([WRONG_KEY]))
    _, origin = QuestionSource(provider, random.Random(0)).build(5, ['MARRIOTT'])
    assert origin == 'fallback'


def test_source_without_provider_uses_fallback():
    questions, origin = QuestionSource(None, random.Random(0)).build(5, [])
    assert origin == 'fallback'
    assert len(questions) == 5


# ---- Gemini client ----

def test_build_prompt_mentions_group_and_count():
    prompt = build_prompt(10, ['HILTON'])
    assert 'Hilton Worldwide' in prompt
    assert 'Generate 15 unique questions' in prompt


def test_gemini_provider_extracts_text():
    body = {'candidates': [{'content': {'parts': [{'text': '[]'}]}}]}
    session = FakeSession(FakeResponse(200, body))
    provider = GeminiProvider('key', 'gemini-test', session=session)
    assert provider.generate(5, ['MARRIOTT']) == '[]'
    url, kwargs = session.requests[0]
    assert 'gemini-test' in url
    assert kwargs['params'] == {'key': 'key'}


def test_gemini_provider_errors():
    with pytest.raises(ProviderError):
        GeminiProvider('', 'm', session=FakeSession()).generate(5, ['MARRIOTT'])
    with pytest.raises(ProviderError):
        GeminiProvider('k', 'm', session=FakeSession(FakeResponse(500, {'error': 'x'}))).generate(5, ['MARRIOTT'])
    with pytest.raises(ProviderError):
        GeminiProvider('k', 'm', session=FakeSession(FakeResponse(200, {'candidates': []}))).generate(5, ['MARRIOTT'])
    with pytest.raises(ProviderError):
        GeminiProvider('k', 'm', session=FakeSession(error=requests.ConnectionError('down'))).generate(5, ['MARRIOTT'])
