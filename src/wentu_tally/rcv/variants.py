from typing import Dict, Sequence

from wentu_tally.package_types import Ballot, Candidate
from wentu_tally.rcv.base import RCV, TallyResult


def get_rcv_dict():
    """
    Return dictionary of rcv classes, class_name: class_obj (constructor function)
    """
    return {
        'SingleWinner': SingleWinner,
    }


class SingleWinner(RCV):
    """
    Single winner rcv contest, used to pick the date of an event.
    - Quota is a strict majority of all ballots cast, computed once.
    - Winner is the date option that first reaches the quota, or the last option left standing.
    - Each round the date option with the fewest votes is eliminated.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def _win_threshold(self) -> int:
        return len(self._ballots) // 2 + 1

    def _set_round_winner(self, round_tally: Dict[Candidate, int]) -> None:
        """
        single winner rules:
        - winner is the date option with the most votes, if that reaches the quota
        - otherwise, once all but one date option is eliminated, the remaining one (by display order) wins
        """
        leader = self._round_leader(round_tally)
        if leader is not None and round_tally[leader] >= self._quota:
            self._round_winner = leader
            self._final_round = True
            return

        if len(self._eliminated) >= len(self._candidates) - 1:
            self._round_winner = next((cand for cand in self._candidates if cand not in self._eliminated), None)
            self._final_round = True


def tally(ballots: Sequence[Ballot], candidates: Sequence[Candidate]) -> TallyResult:
    """Run a single winner tabulation and return its result.

    :param ballots: One ranked list of date option ids per participant, most preferred first. May be empty.
    :type ballots: Sequence[Ballot]
    :param candidates: All date options of the event, in display order.
    :type candidates: Sequence[Candidate]
    :return: Winner (None when no ballots were cast), quota and the round trace.
    :rtype: TallyResult
    """
    return SingleWinner(ballots=ballots, candidates=candidates).get_result()
