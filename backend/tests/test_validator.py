from brandquiz.game.models import Question
from brandquiz.questions.brands import find_brand_group, known_group_ids
from brandquiz.questions.validator import infer_target_group, validate_question


def single(text, options, correct):
    return Question(text=text, options=tuple(options), correct_answer=correct)


def test_find_brand_group_exact_and_partial():
    assert find_brand_group('Westin') == 'MARRIOTT'
    assert find_brand_group('**Kimpton**') == 'IHG'
    assert find_brand_group('ritz-carlton') == 'MARRIOTT'
    assert find_brand_group('No') is None
    assert find_brand_group('') is None


def test_known_group_ids_filters_and_dedupes():
    assert known_group_ids(['IHG', 'NOPE', 'IHG', 'HILTON']) == ['IHG', 'HILTON']
    assert known_group_ids(None) == []


def test_infer_target_group():
    assert infer_target_group('Which is a Hilton brand?', ['MARRIOTT', 'HILTON']) == 'HILTON'
    assert infer_target_group('Which is a luxury brand?', ['MARRIOTT']) == 'MARRIOTT'
    assert infer_target_group('Which is a luxury brand?', ['MARRIOTT', 'HILTON']) is None


def test_affirmative_question_valid():
    q = single(
        'Which of these is a **Marriott International** brand?',
        ['Westin', 'Hilton Garden Inn', 'Kimpton', 'Novotel'],
        0,
    )
    assert validate_question(q, ['MARRIOTT'])


def test_affirmative_question_wrong_key_rejected():
    q = single('Which of these is a Marriott brand?', ['Westin', 'Hilton Garden Inn', 'Kimpton', 'Novotel'], 1)
    verdict = validate_question(q, ['MARRIOTT'])
    assert not verdict
    assert 'Logic error' in verdict.reason


def test_affirmative_question_with_second_target_brand_rejected():
    q = single('Which of these is a Marriott brand?', ['Westin', 'Sheraton', 'Kimpton', 'Novotel'], 0)
    verdict = validate_question(q, ['MARRIOTT'])
    assert not verdict
    assert 'Ambiguous' in verdict.reason


def test_negated_question_valid():
    q = single('Which of these is NOT a Marriott brand?', ['Westin', 'Sofitel', 'Sheraton', 'Courtyard'], 1)
    assert validate_question(q, ['MARRIOTT'])


def test_negated_question_with_target_brand_as_key_rejected():
    q = single('Which of these is NOT a Marriott brand?', ['Westin', 'Sofitel', 'Sheraton', 'Courtyard'], 0)
    assert not validate_question(q, ['MARRIOTT'])


def test_negated_question_with_several_outsiders_rejected():
    q = single('Which of these is NOT a Marriott brand?', ['Westin', 'Sofitel', 'Kimpton', 'Novotel'], 1)
    verdict = validate_question(q, ['MARRIOTT'])
    assert not verdict
    assert 'Kimpton' in verdict.reason


def test_another_is_not_a_negation():
    q = single('Which is another Marriott brand?', ['Westin', 'Hilton Garden Inn', 'Kimpton', 'Novotel'], 0)
    assert validate_question(q, ['MARRIOTT'])


def test_yes_no_and_multi_group_are_skipped():
    yes_no = single('Is Hilton part of Marriott?', ['Yes', 'No'], 1)
    assert validate_question(yes_no, ['MARRIOTT'])

    unknown_target = single('Which is a budget brand?', ['Westin', 'Hampton by Hilton', 'ibis', 'Kimpton'], 1)
    assert validate_question(unknown_target, ['HILTON', 'IHG'])


def test_structural_checks():
    assert not validate_question(single('Which?', ['a', 'b'], 5), ['MARRIOTT'])
    bad_multi = Question(text='Select all', options=('a', 'b'), type='multi-select', correct_answers=(0, 3))
    assert not validate_question(bad_multi, ['MARRIOTT'])
    empty_multi = Question(text='Select all', options=('a', 'b'), type='multi-select')
    assert not validate_question(empty_multi, ['MARRIOTT'])
