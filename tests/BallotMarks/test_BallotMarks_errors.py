
import pytest

from wentu_tally.marks import BallotMarks

params = [
    (TypeError, 1),
    (TypeError, 1.5),
    (TypeError, 'a'),
    (TypeError, True)
]


@pytest.mark.parametrize("error_type, input", params)
def test_constructor_errors(error_type, input):

    with pytest.raises(error_type):
        BallotMarks(input)


@pytest.mark.parametrize("error_type, input", params)
def test_remove_duplicate_marks_errors(error_type, input):

    with pytest.raises(error_type):
        BallotMarks.remove_duplicate_candidate_marks(input)

