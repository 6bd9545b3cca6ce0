"""
Contains BallotMarks class
"""

from __future__ import annotations
from typing import AbstractSet, Optional, Sequence

from wentu_tally.package_types import Candidate


class BallotMarks:
    """Wrap up ranking list of a ballot with useful methods."""

    @staticmethod
    def remove_duplicate_candidate_marks(ballot_marks: BallotMarks) -> BallotMarks:
        """Return copied BallotMarks object with repeated date options removed. Only the first (most preferred)
        occurrence of a date option is kept.

        :param ballot_marks: Object to copy and from which to remove duplicates.
        :type ballot_marks: BallotMarks
        :return: Copied object with duplicate date options removed.
        :rtype: BallotMarks
        """
        if not isinstance(ballot_marks, BallotMarks):
            raise TypeError(f"expected BallotMarks, got {type(ballot_marks).__name__}")

        copy_ballot_marks = ballot_marks.copy()
        new_marks_list = []
        new_marks_set = set()
        for mark in copy_ballot_marks.marks:
            if mark not in new_marks_set:
                new_marks_list.append(mark)
                new_marks_set.add(mark)
        copy_ballot_marks.update_marks(new_marks_list)
        return copy_ballot_marks

    def __init__(self, marks: Optional[Sequence[Candidate]] = None) -> None:
        """Constructor

        :param marks: List of date option ids in ranked order, most preferred first. Defaults to empty list.
        :type marks: List, optional
        """
        if marks is None:
            marks = []

        if not isinstance(marks, (list, tuple)):
            raise TypeError(f"ballot marks must be a list or tuple, got {type(marks).__name__}")

        self.marks = []
        self.unique_candidates = frozenset()

        if marks:
            self.update_marks(marks)

    def __repr__(self) -> str:
        return f"BallotMarks({self.marks!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, BallotMarks):
            return NotImplemented
        return self.marks == other.marks

    def __len__(self) -> int:
        return len(self.marks)

    def copy(self) -> BallotMarks:
        """Make a copy.

        :return: Returns a copy of BallotMarks object
        :rtype: BallotMarks
        """
        return BallotMarks(self.marks)

    def update_marks(self, new_marks: Sequence[Candidate]) -> None:
        """Update `marks` property along with `unique_candidates` based on a new list of marks.

        :param new_marks: List of new ordered marks to replace old ones.
        :type new_marks: List
        """
        self.marks = [mark for mark in new_marks]
        self.unique_candidates = frozenset(self.marks)

    def first_active(self, eliminated: AbstractSet[Candidate]) -> Optional[Candidate]:
        """Most preferred mark that has not been eliminated, or None once the ballot is exhausted.

        :param eliminated: Date options removed from contention so far.
        :type eliminated: AbstractSet
        :rtype: Optional[Candidate]
        """
        for mark in self.marks:
            if mark not in eliminated:
                return mark
        return None
