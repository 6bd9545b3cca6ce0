from typing import Callable, List, Optional, Tuple

import pandas as pd

import wentu_tally.util as util


class RCV_stats:
    """
    Mixin containing all reporting stats. Can be overriden by any rcv variant.
    """

    def _stat_list(self) -> List[Tuple[str, Callable]]:
        """
        Stats reported by `get_stats`, in column order.
        """
        return [
            ("winner", self._winner_stat),
            ("quota", self.get_win_threshold),
            ("number_of_rounds", self.n_rounds),
            ("n_candidates", self._n_candidates),
            ("n_ballots", self._n_ballots),
            ("n_empty_ballots", self._n_empty_ballots),
            ("first_round_active_votes", self._first_round_active_votes),
            ("final_round_active_votes", self._final_round_active_votes),
            ("first_round_winner_vote", self._first_round_winner_vote),
            ("final_round_winner_vote", self._final_round_winner_vote),
            ("first_round_winner_place", self._first_round_winner_place),
            ("final_round_winner_percent", self._final_round_winner_percent),
            ("come_from_behind", self._come_from_behind),
            ("ranked_winner", self._ranked_winner),
            ("total_exhausted", self._total_exhausted),
        ]

    def get_stats(self) -> pd.DataFrame:
        """Obtain the default statistics of the tabulation as a single row dataframe.

        :return: A single row dataframe with event info columns followed by statistics columns.
        :rtype: pd.DataFrame
        """
        row = {"event": self.event, "notes": self.notes}
        row.update({name: f() for name, f in self._stat_list()})
        return pd.DataFrame([row])

    ####################
    # OUTCOME STATS

    def _winner_stat(self) -> Optional[str]:
        return util.candidate_str(self.winner())

    def _n_candidates(self) -> int:
        return len(self.get_candidates())

    def _n_ballots(self) -> int:
        return len(self._ballots)

    def _n_empty_ballots(self) -> int:
        '''
        Ballots that ranked no date option at all.
        '''
        return sum(1 for b in self._ballots if not b.marks)

    def _first_round_active_votes(self) -> int:
        if not self.n_rounds():
            return 0
        return sum(self.get_round_tally_dict(1).values())

    def _final_round_active_votes(self) -> int:
        if not self.n_rounds():
            return 0
        return sum(self.get_round_tally_dict(self.n_rounds()).values())

    def _first_round_winner_vote(self) -> Optional[int]:
        if self.winner() is None:
            return None
        return self.get_round_tally_dict(1).get(self.winner(), 0)

    def _final_round_winner_vote(self) -> Optional[int]:
        if self.winner() is None:
            return None
        return self.get_round_tally_dict(self.n_rounds()).get(self.winner(), 0)

    def _first_round_winner_place(self) -> Optional[int]:
        '''
        Place of the winner in the first round count. None if the winner held no first round votes.
        '''
        if self.winner() is None:
            return None
        first_round_candidates = self.get_round_tally_tuple(1)[0]
        if self.winner() not in first_round_candidates:
            return None
        return first_round_candidates.index(self.winner()) + 1

    def _final_round_winner_percent(self) -> Optional[float]:
        final_round_winner_vote = self._final_round_winner_vote()
        final_round_active_votes = self._final_round_active_votes()
        if final_round_winner_vote is None or not final_round_active_votes:
            return None
        return round(100 * final_round_winner_vote / final_round_active_votes, 3)

    def _come_from_behind(self) -> Optional[bool]:
        '''
        True if the winner was not in first place in the first round.
        '''
        if self.winner() is None:
            return None
        return self._first_round_winner_place() != 1

    def _ranked_winner(self) -> Optional[int]:
        '''
        Number of ballots ranking the winner at any position.
        '''
        if self.winner() is None:
            return None
        return sum(1 for b in self._ballots if self.winner() in b.unique_candidates)

    def _total_exhausted(self) -> int:
        '''
        Ballots ranking at least one date option that count for no one once tabulation ends.
        A stalled count ends with every ranked ballot exhausted.
        '''
        if not self.n_rounds():
            return 0
        return sum(1 for b in self._ballots if b.marks and b.first_active(self._eliminated) is None)
