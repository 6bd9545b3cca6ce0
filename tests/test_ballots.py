import logging

import pytest

from wentu_tally.ballots import ballots_from_rankings, candidates_from_options, check_rankings


def _rows(*rows):
    return [
        {"participant_id": p, "date_option_id": d, "preference_order": o}
        for p, d, o in rows
    ]


params = [
    (
        {
            "input": [{"id": "b", "sort_order": 1}, {"id": "a", "sort_order": 0}, {"id": "c", "sort_order": 2}],
            "expected": ["a", "b", "c"],
        }
    ),
    (
        # equal sort orders keep input order
        {
            "input": [{"id": "b", "sort_order": 0}, {"id": "a", "sort_order": 0}, {"id": "c", "sort_order": -1}],
            "expected": ["c", "b", "a"],
        }
    ),
    ({"input": [], "expected": []}),
]


@pytest.mark.parametrize("param", params)
def test_candidates_from_options(param):
    assert candidates_from_options(param["input"]) == param["expected"]


params = [
    (
        {
            "input": _rows(("p1", "b", 2), ("p2", "c", 1), ("p1", "a", 1), ("p2", "a", 3), ("p2", "b", 2)),
            "expected": [["a", "b"], ["c", "b", "a"]],
        }
    ),
    (
        # preference orders need not be contiguous
        {
            "input": _rows(("p1", "x", 10), ("p1", "y", 3)),
            "expected": [["y", "x"]],
        }
    ),
    ({"input": [], "expected": []}),
]


@pytest.mark.parametrize("param", params)
def test_ballots_from_rankings(param):
    assert ballots_from_rankings(param["input"]) == param["expected"]


def test_check_rankings_valid():
    rows = _rows(("p1", "a", 1), ("p1", "b", 2), ("p2", "a", 1))
    check_rankings(rows, ["a", "b"])
    check_rankings(rows)


params = [
    (
        # unknown date option
        {"rows": _rows(("p1", "a", 1), ("p1", "z", 2)), "candidates": ["a", "b"]}
    ),
    (
        # date option ranked twice
        {"rows": _rows(("p1", "a", 1), ("p1", "a", 2)), "candidates": None}
    ),
    (
        # preference order used twice
        {"rows": _rows(("p1", "a", 1), ("p1", "b", 1)), "candidates": ["a", "b"]}
    ),
]


@pytest.mark.parametrize("param", params)
def test_check_rankings_errors(param, caplog):
    with caplog.at_level(logging.WARNING, logger="wentu_tally.ballots"):
        with pytest.raises(RuntimeError):
            check_rankings(param["rows"], param["candidates"])

    assert "p1" in caplog.text


def test_check_rankings_per_participant():
    # the same option and order may be used by different participants
    rows = _rows(("p1", "a", 1), ("p2", "a", 1), ("p3", "a", 1))
    check_rankings(rows, ["a"])
