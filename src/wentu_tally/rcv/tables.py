"""Contains RCV_tables class which is added into RCV.
"""

from typing import Dict

import numpy as np
import pandas as pd

import wentu_tally.util as util


class RCV_tables:
    """Extra methods added into RCV class"""

    def get_round_by_round_table(self) -> pd.DataFrame:
        """Create a table containing round by round details for the tabulation. One row per date option,
        in tie order, followed by an 'exhaust' row (ballots counting for no one that round, including empty
        ballots) and a 'colsum' row. A 'label' column follows the ids when date option labels are known.

        :return: round by round table
        :rtype: pd.DataFrame
        """
        candidates = self.get_candidates()
        n_rounds = self.n_rounds()
        n_ballots = len(self._ballots)

        row_names = [util.candidate_str(cand) for cand in candidates] + ["exhaust"]
        rcv_df = pd.DataFrame({"candidate": row_names + ["colsum"]})
        if self._labels:
            rcv_df["label"] = [self._labels.get(cand) for cand in candidates] + [None, None]

        round_counts = []
        for rnd in range(1, n_rounds + 1):
            rnd_info = self.get_round_tally_dict(rnd)
            counts = [rnd_info.get(cand, 0) for cand in candidates]
            counts.append(n_ballots - sum(counts))
            round_counts.append(counts)

        # loop through rounds
        for rnd in range(1, n_rounds + 1):

            rnd_percent_col = "r" + str(rnd) + "_active_percent"
            rnd_count_col = "r" + str(rnd) + "_count"
            rnd_transfer_col = "r" + str(rnd) + "_transfer"

            counts = round_counts[rnd - 1]
            active = sum(counts[:-1])

            percents = [100 * count / active if active else np.nan for count in counts[:-1]] + [np.nan]

            # no transfer out of the final round
            if rnd < n_rounds:
                transfers = [nxt - cur for cur, nxt in zip(counts, round_counts[rnd])]
            else:
                transfers = [np.nan] * len(counts)

            rcv_df[rnd_count_col] = counts + [sum(counts)]
            rcv_df[rnd_percent_col] = percents + [np.nansum(percents) if active else np.nan]
            rcv_df[rnd_transfer_col] = transfers + [np.nan if rnd == n_rounds else sum(transfers)]

        percent_cols = [col for col in rcv_df.columns if col.endswith("_percent")]
        if percent_cols:
            rcv_df[percent_cols] = rcv_df[percent_cols].astype(float).round(3)

        return rcv_df

    def get_round_by_round_dict(self) -> Dict:
        """Create a dictionary containing the tabulation outcome and round by round counts, in the shape returned by
        the results endpoint. Date option ids are rendered as strings, missing values as None.

        :return: Dictionary with keys winner, quota, rounds_count and rounds.
        :rtype: Dict
        """
        result = self.get_result()

        return {
            "winner": util.candidate_str(result.winner),
            "quota": result.quota,
            "rounds_count": len(result.rounds),
            "rounds": [
                {
                    "round_number": rnd.round_number,
                    "vote_counts": {util.candidate_str(cand): count for cand, count in rnd.vote_counts.items()},
                    "eliminated": util.candidate_str(rnd.eliminated),
                }
                for rnd in result.rounds
            ],
        }

    def get_candidate_outcome_table(self) -> pd.DataFrame:
        """Create a table with one row per date option, giving the round it was elected or eliminated in
        (missing if neither) and its first round vote count. Includes a label column when date option labels are known.

        :rtype: pd.DataFrame
        """
        first_round = self.get_round_tally_dict(1) if self.n_rounds() else {}

        rows = [
            {
                "candidate": util.candidate_str(d["name"]),
                "label": self._labels.get(d["name"]),
                "round_elected": d["round_elected"],
                "round_eliminated": d["round_eliminated"],
                "first_round_votes": first_round.get(d["name"], 0),
            }
            for d in self.get_candidate_outcomes()
        ]

        df = pd.DataFrame(rows, columns=["candidate", "label", "round_elected", "round_eliminated", "first_round_votes"])
        if not self._labels:
            df = df.drop(columns=["label"])
        df = df.astype({"round_elected": "Int64", "round_eliminated": "Int64", "first_round_votes": int})
        return df
