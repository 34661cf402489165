# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# note: pandas is used in place of etable.Table for recording the epoch
# log -- a row is never changed once it is written.

import pandas as pd

from goal_guy import netif

# LogPrec is precision for saving float values in logs
LogPrec = 4

EpcLogCols = [
    "Epoch",
    "MotSSE",
    "OutSSE",
    "MotAvgSSE",
    "OutAvgSSE",
    "OutGoalPctErr",
    "OutPredPctErr",
    "OutGoalPctCor",
    "OutPredPctCor",
    "MotCosDiff",
    "OutCosDiff",
    "ContextActAvg",
    "GoalActAvg",
    "MotorActAvg",
    "OutActAvg",
    "OutPredCntErr",
    "OutGoalCntErr",
]

# log column holding the average activity of each role layer
ActAvgCols = {
    netif.Context: "ContextActAvg",
    netif.Goal: "GoalActAvg",
    netif.Motor: "MotorActAvg",
    netif.Outcome: "OutActAvg",
}


class EpcLog(object):
    """
    EpcLog is the training epoch log: one row per completed epoch of
    normalized statistics
    """

    def __init__(self):
        self.Rows = []
        self.PlotVals = ["OutCosDiff", "MotCosDiff", "OutGoalPctErr"]

    def Reset(self):
        self.Rows = []

    def NumRows(self):
        return len(self.Rows)

    def AppendEpoch(self, epc, accums, actAvgs, ntrials):
        """
        AppendEpoch computes epoch averages from accums (sums over ntrials
        trials), adds them as a new row for epoch epc, and resets accums.
        actAvgs maps role name to that layer's average activity.
        Returns the new row as a dict.
        """
        nt = float(ntrials)
        if nt == 0:
            nt = 1  # no trials: all sums are zero

        row = {}
        row["Epoch"] = int(epc)
        row["MotSSE"] = accums.MotSumSSE / nt
        row["OutSSE"] = accums.OutSumSSE / nt
        row["MotAvgSSE"] = accums.MotSumAvgSSE / nt
        row["OutAvgSSE"] = accums.OutSumAvgSSE / nt
        row["OutGoalPctErr"] = float(accums.OutGoalCntErr) / nt
        row["OutPredPctErr"] = float(accums.OutPredCntErr) / nt
        row["OutGoalPctCor"] = 1 - row["OutGoalPctErr"]
        row["OutPredPctCor"] = 1 - row["OutPredPctErr"]
        row["MotCosDiff"] = accums.MotSumCosDiff / nt
        row["OutCosDiff"] = accums.OutSumCosDiff / nt
        for role, col in ActAvgCols.items():
            row[col] = float(actAvgs.get(role, 0))
        row["OutPredCntErr"] = float(accums.OutPredCntErr)
        row["OutGoalCntErr"] = float(accums.OutGoalCntErr)

        accums.Reset()
        self.Rows.append(tuple(row[c] for c in EpcLogCols))
        return row

    def Row(self, epc):
        """
        Row returns the logged values for epoch row epc as a dict
        """
        return dict(zip(EpcLogCols, self.Rows[epc]))

    def Table(self):
        """
        Table returns a copy of the log as a pandas DataFrame
        """
        dt = pd.DataFrame(list(self.Rows), columns=EpcLogCols)
        return dt.astype({"Epoch": "int64"})

    def SaveCSV(self, fname, delim=","):
        self.Table().to_csv(fname, sep=delim, index=False, float_format="%%.%dg" % LogPrec)
