import uuid

import pytest

from wentu_tally.marks import BallotMarks


def test_update_marks():

    marks = ['A', 'B', 'B', 'C']
    unique_candidates = {'A', 'B', 'C'}

    b = BallotMarks()
    b.update_marks(marks)

    assert b.marks == marks
    assert b.unique_candidates == unique_candidates


def test_empty_constructor():

    b = BallotMarks()

    assert b.marks == []
    assert len(b) == 0


def test_copy():

    b = BallotMarks(['A', 'B'])
    b_copy = b.copy()
    b_copy.update_marks(['C'])

    assert b.marks == ['A', 'B']
    assert b_copy.marks == ['C']


param_dicts = [
    ({
        'input': ['A', 'B', 'A', 'C', 'B'],
        'expected': {
            'marks': ['A', 'B', 'C'],
            'unique_candidates': {'A', 'B', 'C'}
        }
    }),
    ({
        'input': ['C', 'C', 'C'],
        'expected': {
            'marks': ['C'],
            'unique_candidates': {'C'}
        }
    }),
    ({
        'input': [],
        'expected': {
            'marks': [],
            'unique_candidates': set()
        }
    })
]


@pytest.mark.parametrize("param_dict", param_dicts)
def test_remove_duplicate_candidate_marks(param_dict):

    b = BallotMarks(param_dict['input'])
    computed = BallotMarks.remove_duplicate_candidate_marks(b)

    assert computed.marks == param_dict['expected']['marks']
    assert computed.unique_candidates == param_dict['expected']['unique_candidates']

    # input left as is
    assert b.marks == param_dict['input']


param_dicts = [
    ({
        'input': {'marks': ['A', 'B', 'C'], 'eliminated': set()},
        'expected': 'A'
    }),
    ({
        'input': {'marks': ['A', 'B', 'C'], 'eliminated': {'A'}},
        'expected': 'B'
    }),
    ({
        'input': {'marks': ['A', 'B', 'C'], 'eliminated': frozenset({'A', 'B'})},
        'expected': 'C'
    }),
    ({
        'input': {'marks': ['A', 'B'], 'eliminated': {'A', 'B'}},
        'expected': None
    }),
    ({
        'input': {'marks': [], 'eliminated': set()},
        'expected': None
    })
]


@pytest.mark.parametrize("param_dict", param_dicts)
def test_first_active(param_dict):

    b = BallotMarks(param_dict['input']['marks'])
    assert b.first_active(param_dict['input']['eliminated']) == param_dict['expected']


def test_uuid_marks():

    x, y = uuid.uuid4(), uuid.uuid4()
    b = BallotMarks([x, y, x])

    assert BallotMarks.remove_duplicate_candidate_marks(b).marks == [x, y]
    assert b.first_active({x}) == y


def test_equality():

    assert BallotMarks(['A', 'B']) == BallotMarks(['A', 'B'])
    assert BallotMarks(['A', 'B']) != BallotMarks(['B', 'A'])
    assert repr(BallotMarks(['A'])) == "BallotMarks(['A'])"
