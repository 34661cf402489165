# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# stats has the trial-level statistics record and the epoch accumulators.
# Note that we're accumulating stats here on the Sim side so the core
# algorithm side remains as simple as possible, and doesn't need to worry
# about different time-scales over which stats could be accumulated etc.


class TrialStats(object):
    """
    TrialStats are the statistics of one alpha cycle.  Outcome values are
    only set for alpha cycle 0, Motor values only for alpha cycle 1.
    """

    def __init__(self, alphaCyc=0):
        self.AlphaCycle = alphaCyc
        self.OutSSE = float(0)
        self.OutAvgSSE = float(0)
        self.OutCosDiff = float(0)
        self.OutGoalErr = int(0)  # 1 if Goal and Outcome ActM differ beyond tolerance
        self.OutPredErr = int(0)  # 1 if Outcome SSE > 0
        self.MotSSE = float(0)
        self.MotAvgSSE = float(0)
        self.MotCosDiff = float(0)


class EpcAccums(object):
    """
    EpcAccums are the sums to increment as we go through an epoch.  Only
    EpcLog.AppendEpoch resets them once an epoch is consumed (and Sim.Init
    at the start of a run).
    """

    def __init__(self):
        self.Reset()

    def Reset(self):
        self.MotSumSSE = float(0)
        self.MotSumAvgSSE = float(0)
        self.MotSumCosDiff = float(0)
        self.OutSumSSE = float(0)
        self.OutSumAvgSSE = float(0)
        self.OutSumCosDiff = float(0)
        self.OutGoalCntErr = int(0)
        self.OutPredCntErr = int(0)

    def Accum(self, ts):
        """
        Accum adds the given TrialStats into the sums for its alpha cycle
        """
        if ts.AlphaCycle == 0:
            self.OutSumSSE += ts.OutSSE
            self.OutSumAvgSSE += ts.OutAvgSSE
            self.OutSumCosDiff += ts.OutCosDiff
            self.OutGoalCntErr += ts.OutGoalErr
            self.OutPredCntErr += ts.OutPredErr
        elif ts.AlphaCycle == 1:
            self.MotSumSSE += ts.MotSSE
            self.MotSumAvgSSE += ts.MotAvgSSE
            self.MotSumCosDiff += ts.MotCosDiff


def TolSSE(avals, bvals, tol):
    """
    TolSSE returns the sum over units of the squared difference between
    avals and bvals, skipping units whose difference is less than tol
    """
    sse = float(0)
    for a, b in zip(avals, bvals):
        d = float(a) - float(b)
        if abs(d) < tol:
            continue
        sse += d * d
    return sse
