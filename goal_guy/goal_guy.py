# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# goal_guy is a simple Phase 0 begin-with-success model to serve as a basis
# for learning motor and then instrumental actions, based on the key idea of
# striving toward desired arbitrary outcome states.  Each trial is two alpha
# cycles: in the first the network sees the Context and is taught the
# Outcome; in the second the Outcome it just produced is clamped as the Goal
# and the Motor activity it produced is taught as the target.

import threading
from datetime import datetime, timezone

import numpy as np

from goal_guy import netif
from goal_guy.epc_log import EpcLog
from goal_guy.errors import LayerError, UnitValsError
from goal_guy.ext_reps import ExtReps, Relay
from goal_guy.netif import LayerType, TimeScales
from goal_guy.stats import EpcAccums, TrialStats, TolSSE


class Sim(object):
    """
    Sim encapsulates the entire simulation model, and we define all the
    functionality as methods on this struct.  This structure keeps all relevant
    state information organized and available without having to pass everything around
    as arguments to methods.
    """

    def __init__(self, net):
        self.Net = net  # the network engine -- a netif.Network
        self.ExtReps = ExtReps()  # authored external patterns, one row per trial
        self.Relay = Relay()  # Motor / Outcome activity carried from alpha cycle 0 to 1
        self.EpcLog = EpcLog()  # training epoch-level log data
        self.Accums = EpcAccums()  # sums to increment as we go through epoch
        self.Lays = {}  # role name -> resolved layer handle
        self.PatsFile = ""  # patterns file to open in Config -- uses existing ExtReps if empty
        self.MaxEpcs = int(0)  # maximum number of epochs to run
        self.Epoch = int(0)
        self.Trial = int(0)
        self.AlphaCycle = int(0)  # 0, 1: 0 == 1st, 1 == 2nd alpha-trial of each two-trial sequence
        self.CycPerQtr = int(25)  # cycles per quarter of the alpha cycle
        self.Cycle = int(0)  # cycle counter within the alpha cycle
        self.Quarter = int(0)  # quarter counter within the alpha cycle
        self.Tol = float(0.5)  # unit-wise tolerance for SSE -- right side of .5
        self.ViewOn = True  # whether to update the network view while running
        self.TrainUpdt = TimeScales.AlphaCycle  # at what time scale to update the display during training
        self.TestUpdt = TimeScales.Cycle  # at what time scale to update the display when not learning
        self.ViewFn = None  # called with the Counters string to update the display
        self.Sequential = False  # set to true to present items in sequential order
        self.Test = False  # set to true to not call learning methods

        # statistics
        self.TrlStats = TrialStats()  # last alpha cycle's statistics
        self.EpcMotSSE = float(0)  # last epoch's total sum squared error - motor layer
        self.EpcOutSSE = float(0)  # last epoch's total sum squared error - outcome layer
        self.EpcMotAvgSSE = float(0)  # last epoch's average sum squared error (average over trials, and over units within motor layer)
        self.EpcOutAvgSSE = float(0)  # last epoch's average sum squared error (average over trials, and over units within outcome layer)
        self.EpcOutGoalPctErr = float(0)  # last epoch's percent of trials where Outcome differed from Goal (subject to .5 unit-wise tolerance)
        self.EpcOutPredPctErr = float(0)  # last epoch's percent of trials that had Outcome SSE > 0 (subject to .5 unit-wise tolerance)
        self.EpcOutGoalPctCor = float(0)
        self.EpcOutPredPctCor = float(0)
        self.EpcMotCosDiff = float(0)  # last epoch's average cosine difference for motor layer
        self.EpcOutCosDiff = float(0)  # last epoch's average cosine difference for outcome layer

        # internal state
        self.Porder = np.zeros(0, dtype=int)  # permuted pattern order
        self.Rng = np.random.default_rng(1)
        self.StopNow = False  # flag to stop running -- checked between trials
        self.IsRunning = False
        self.Thread = None  # background training thread, see TrainAsync
        self.ThreadErr = None  # exception that ended the last TrainAsync run, re-raised by Wait
        self.RndSeed = int(1)  # the current random seed
        self.LastRunSecs = float(0)  # wall-clock duration of the last Train

    def Config(ss):
        """
        Config configures all the elements using the standard functions.
        Raises LayerError if any role layer is missing from the network.
        """
        ss.OpenPats()
        ss.ConfigLays()
        ss.ConfigRelay()

    def OpenPats(ss):
        if ss.PatsFile != "":
            ss.ExtReps.OpenCSV(ss.PatsFile)

    def ConfigLays(ss):
        """
        ConfigLays resolves the role layers once -- everything afterward uses
        the handles in ss.Lays
        """
        ss.Lays = {}
        for role in netif.Roles:
            ly = ss.Net.LayerByName(role)
            if ly is None:
                raise LayerError(role)
            ss.Lays[role] = ly
        ng = ss.Net.NumUnits(ss.Lays[netif.Goal])
        no = ss.Net.NumUnits(ss.Lays[netif.Outcome])
        if ng != no:
            print("Number of neuron-units does not match between Goal and Outcome layers: %d vs %d" % (ng, no))

    def ConfigRelay(ss):
        ss.Relay.Config(ss.ExtReps.NumRows(), ss.ExtReps.CellSize())

    def Init(ss):
        """
        Init restarts the run, and initializes everything, including network weights
        and resets the epoch log table
        """
        ss.Rng = np.random.default_rng(ss.RndSeed)
        if ss.MaxEpcs == 0:  # allow user override
            ss.MaxEpcs = 500
        ss.Epoch = 0
        ss.Trial = 0
        ss.AlphaCycle = 0
        ss.StopNow = False
        ss.Porder = ss.Rng.permutation(ss.ExtReps.NumRows())  # always start with new one so random order is identical
        if ss.Relay.NumRows() != ss.ExtReps.NumRows():
            ss.ConfigRelay()
        ss.Net.InitWts()
        ss.Accums.Reset()
        ss.EpcLog.Reset()
        ss.UpdateView(True)

    def NewRndSeed(ss):
        """
        NewRndSeed gets a new random seed based on current time -- otherwise uses
        the same random seed for every run
        """
        ss.RndSeed = int(datetime.now(timezone.utc).timestamp() * 1e6)

    def Counters(ss, train):
        """
        Counters returns a string of the current counter state
        use tabs to achieve a reasonable formatting overall
        and add a few tabs at the end to allow for expansion..
        """
        mode = "Train" if train else "Test"
        return "%s\tEpoch:\t%d\tTrial:\t%d\tAlphaCycle:\t%d\tQuarter:\t%d\tCycle:\t%d\t\t\t" % (mode, ss.Epoch, ss.Trial, ss.AlphaCycle, ss.Quarter, ss.Cycle)

    def UpdateView(ss, train):
        if ss.ViewFn is not None:
            ss.ViewFn(ss.Counters(train))

    def PresentOrder(ss):
        """
        PresentOrder returns the order in which rows are presented this epoch
        """
        if ss.Sequential:
            return list(range(ss.ExtReps.NumRows()))
        return [int(r) for r in ss.Porder]

    ###############################################################
    #      Running the Network, starting bottom-up...

    def AlphaCyc(ss, train):
        """
        AlphaCyc runs one alpha-cycle (100 msec, 4 quarters) of processing.
        External inputs must have already been applied prior to calling,
        using ApplyInputs.
        If train is true, then learning DWt and WtFmDWt calls are made.
        Handles netview updating within scope of AlphaCycle
        """
        viewUpdt = ss.TrainUpdt.value
        if not train:
            viewUpdt = ss.TestUpdt.value

        ss.Net.AlphaCycInit()
        ss.Cycle = 0
        for qtr in range(4):
            ss.Quarter = qtr
            for cyc in range(ss.CycPerQtr):
                ss.Net.Cycle()
                ss.Cycle += 1
                if ss.ViewOn:
                    if viewUpdt == TimeScales.Cycle.value:
                        ss.UpdateView(train)
                    if viewUpdt == TimeScales.FastSpike.value:
                        if (cyc+1) % 10 == 0:
                            ss.UpdateView(train)
            ss.Net.QuarterFinal()
            if ss.ViewOn:
                if viewUpdt == TimeScales.Quarter.value:
                    ss.UpdateView(train)
                if viewUpdt == TimeScales.Phase.value:
                    if qtr >= 2:
                        ss.UpdateView(train)

        if train:
            ss.Net.DWt()
            ss.Net.WtFmDWt()
        if ss.ViewOn and viewUpdt == TimeScales.AlphaCycle.value:
            ss.UpdateView(train)

    def ApplyInputs(ss, row):
        """
        ApplyInputs sets the layer types for the current AlphaCycle and applies
        the clamped patterns for the given ExtReps row.
        In AlphaCycle 0, Context is the input and Outcome the target.
        In AlphaCycle 1, the Outcome produced in AlphaCycle 0 is the Goal input,
        and the Motor produced in AlphaCycle 0 is the target.
        Returns False if AlphaCycle is out of range.
        """
        ss.Net.InitExt()  # clear any existing inputs

        contextLay = ss.Lays[netif.Context]
        goalLay = ss.Lays[netif.Goal]
        motorLay = ss.Lays[netif.Motor]
        outcomeLay = ss.Lays[netif.Outcome]

        if ss.AlphaCycle == 0:
            ss.Net.SetType(contextLay, LayerType.Input)
            ss.Net.SetType(goalLay, LayerType.Hidden)
            ss.Net.SetType(motorLay, LayerType.Hidden)
            ss.Net.SetType(outcomeLay, LayerType.Target)

            ss.Net.ApplyExt(contextLay, ss.ExtReps.Pat(netif.Context, row))
            ss.Net.ApplyExt(outcomeLay, ss.ExtReps.Pat(netif.Outcome, row))
        elif ss.AlphaCycle == 1:
            ss.Net.SetType(contextLay, LayerType.Input)
            ss.Net.SetType(goalLay, LayerType.Input)
            ss.Net.SetType(motorLay, LayerType.Target)
            ss.Net.SetType(outcomeLay, LayerType.Hidden)

            # the Goal is the Outcome, not the authored Goal pattern
            ss.Net.ApplyExt(goalLay, ss.RelayPat(netif.Outcome, row))
            ss.Net.ApplyExt(motorLay, ss.RelayPat(netif.Motor, row))
        else:
            print("AlphaCycle appears to be out-of-range: %d" % ss.AlphaCycle)
            return False
        return True

    def RelayPat(ss, role, row):
        """
        RelayPat returns the pattern captured for role at row in this trial,
        or the authored ExtReps pattern if nothing was captured
        """
        if not ss.Relay.IsCaptured(role, row):
            return ss.ExtReps.Pat(role, row)
        return ss.Relay.Row(role, row).reshape(ss.ExtReps.Shape)

    def RunSubPhase(ss, row, alphaCyc, learn):
        """
        RunSubPhase runs one alpha cycle of the trial on ExtReps row: applies
        the inputs for alphaCyc and settles the network, learning if learn.
        Returns False (without running) if alphaCyc is out of range.
        """
        ss.AlphaCycle = alphaCyc
        if not ss.ApplyInputs(row):
            return False
        ss.AlphaCyc(learn)
        return True

    def CaptureAndRelay(ss, row):
        """
        CaptureAndRelay copies the Motor and Outcome activity produced in
        AlphaCycle 0 (minus phase, not the clamped target) into the Relay at
        row, to be clamped in AlphaCycle 1.
        Returns the number of Motor and Outcome values captured -- 0 for a
        layer whose values could not be read.
        """
        msz = 0
        osz = 0
        try:
            mav = ss.Net.UnitVals(ss.Lays[netif.Motor], "ActM")
            msz = ss.Relay.Capture(netif.Motor, row, mav)
        except UnitValsError as err:
            print("CaptureAndRelay: skipping Motor for row %d: %s" % (row, err))
        try:
            oav = ss.Net.UnitVals(ss.Lays[netif.Outcome], "ActM")
            osz = ss.Relay.Capture(netif.Outcome, row, oav)
        except UnitValsError as err:
            print("CaptureAndRelay: skipping Outcome for row %d: %s" % (row, err))
        return msz, osz

    def ClearRelay(ss, row, msz, osz):
        """
        ClearRelay resets the Motor and Outcome values captured at row, using
        the sizes returned by CaptureAndRelay
        """
        ss.Relay.Clear(netif.Motor, row, msz)
        ss.Relay.Clear(netif.Outcome, row, osz)

    def TrialStats(ss, accum):
        """
        TrialStats computes the statistics of the current AlphaCycle and adds
        them to the epoch accumulators if accum is true.
        AlphaCycle 0 measures the Outcome prediction and compares the Goal with
        the Outcome, AlphaCycle 1 measures the Motor layer.
        """
        ts = TrialStats(ss.AlphaCycle)
        if ss.AlphaCycle == 0:
            outcomeLay = ss.Lays[netif.Outcome]
            ts.OutSSE, ts.OutAvgSSE = ss.Net.MSE(outcomeLay, ss.Tol)
            ts.OutCosDiff = float(ss.Net.CosDiff(outcomeLay))
            if ts.OutSSE != 0:
                ts.OutPredErr = 1
            if ss.GoalOutSSE() != 0:
                ts.OutGoalErr = 1
        elif ss.AlphaCycle == 1:
            motorLay = ss.Lays[netif.Motor]
            ts.MotSSE, ts.MotAvgSSE = ss.Net.MSE(motorLay, ss.Tol)
            ts.MotCosDiff = float(ss.Net.CosDiff(motorLay))
        else:
            print("TrialStats says AlphaCycle appears to be out-of-range: %d" % ss.AlphaCycle)

        if accum:
            ss.Accums.Accum(ts)
        ss.TrlStats = ts
        return ts

    def GoalOutSSE(ss):
        """
        GoalOutSSE returns the tolerance-based sum squared difference between
        the Goal and Outcome minus phase activations
        """
        try:
            gav = ss.Net.UnitVals(ss.Lays[netif.Goal], "ActM")
            oav = ss.Net.UnitVals(ss.Lays[netif.Outcome], "ActM")
        except UnitValsError as err:
            print("TrialStats: cannot compare Goal and Outcome: %s" % err)
            return 0
        if len(gav) != len(oav):
            print("Number of neuron-units does not match between Goal and Outcome layers: %d vs %d" % (len(gav), len(oav)))
        return TolSSE(gav, oav, ss.Tol)

    def TrainTrial(ss):
        """
        TrainTrial runs one trial of training: both alpha cycles on the next
        row in presentation order.  The epoch is logged and the order
        re-permuted when the last row has been presented.
        """
        nr = ss.ExtReps.NumRows()
        learn = not ss.Test
        if ss.Trial < nr:
            row = ss.Trial  # REMEMBER: two alpha cycles per trial
            if not ss.Sequential:
                row = int(ss.Porder[ss.Trial])

            ss.RunSubPhase(row, 0, learn)
            msz, osz = ss.CaptureAndRelay(row)
            ss.TrialStats(True)  # accumulate

            ss.RunSubPhase(row, 1, learn)
            ss.ClearRelay(row, msz, osz)
            ss.TrialStats(True)  # accumulate

            ss.Trial += 1
            if ss.ViewOn and ss.TrainUpdt == TimeScales.Trial:
                ss.UpdateView(True)

        if ss.Trial >= nr:
            ss.LogEpoch()
            if ss.ViewOn and ss.TrainUpdt.value > TimeScales.Trial.value:
                ss.UpdateView(True)
            ss.EpochInc()

    def EpochInc(ss):
        """
        EpochInc increments counters after one epoch of processing and updates a new random
        order of permuted inputs for the next epoch
        """
        ss.Trial = 0
        ss.Epoch += 1
        ss.Rng.shuffle(ss.Porder)

    def LogEpoch(ss):
        """
        LogEpoch adds data from current epoch to the EpcLog table
        -- computes epoch averages prior to logging.
        Epoch counter is assumed to not have yet been incremented.
        """
        actAvgs = {}
        for role in netif.Roles:
            actAvgs[role] = ss.Net.ActAvg(ss.Lays[role])
        row = ss.EpcLog.AppendEpoch(ss.Epoch, ss.Accums, actAvgs, ss.ExtReps.NumRows())

        ss.EpcMotSSE = row["MotSSE"]
        ss.EpcOutSSE = row["OutSSE"]
        ss.EpcMotAvgSSE = row["MotAvgSSE"]
        ss.EpcOutAvgSSE = row["OutAvgSSE"]
        ss.EpcOutGoalPctErr = row["OutGoalPctErr"]
        ss.EpcOutPredPctErr = row["OutPredPctErr"]
        ss.EpcOutGoalPctCor = row["OutGoalPctCor"]
        ss.EpcOutPredPctCor = row["OutPredPctCor"]
        ss.EpcMotCosDiff = row["MotCosDiff"]
        ss.EpcOutCosDiff = row["OutCosDiff"]

    def TrainEpoch(ss):
        """
        TrainEpoch runs training trials for remainder of this epoch
        """
        if ss.IsRunning:
            print("TrainEpoch: already running -- Stop first")
            return
        ss.StopNow = False
        ss.IsRunning = True
        curEpc = ss.Epoch
        try:
            while True:
                ss.TrainTrial()
                if ss.StopNow or ss.Epoch > curEpc:
                    break
        finally:
            ss.Stopped()

    def Train(ss):
        """
        Train runs the full training from this point onward
        """
        if ss.IsRunning:
            print("Train: already running -- Stop first")
            return
        ss.StopNow = False
        ss.IsRunning = True
        ss.TrainLoop()

    def TrainLoop(ss):
        """
        TrainLoop trains until Stop or MaxEpcs -- IsRunning is always
        cleared on the way out, even if the network raises
        """
        stEpc = ss.Epoch
        st = datetime.now(timezone.utc)
        try:
            while True:
                if ss.StopNow or ss.Epoch >= ss.MaxEpcs:
                    break
                ss.TrainTrial()
        finally:
            ss.LastRunSecs = (datetime.now(timezone.utc) - st).total_seconds()
            epcs = ss.Epoch - stEpc
            avg = float(0)
            if epcs > 0:
                avg = ss.LastRunSecs / epcs
            print("Took %6g secs for %d epochs, avg per epc: %6g" % (ss.LastRunSecs, epcs, avg))
            ss.Stopped()

    def TrainAsync(ss):
        """
        TrainAsync runs Train in a background thread -- use Stop to stop it
        at the next trial boundary and Wait to wait for it to finish.
        Returns False if the sim is already running.
        """
        if ss.IsRunning:
            return False
        ss.StopNow = False
        ss.IsRunning = True
        ss.ThreadErr = None
        ss.Thread = threading.Thread(target=ss.AsyncLoop, name="goal-guy-train", daemon=True)
        ss.Thread.start()
        return True

    def AsyncLoop(ss):
        try:
            ss.TrainLoop()
        except Exception as err:  # handed to the thread calling Wait
            print("TrainAsync: training stopped by error: %s" % err)
            ss.ThreadErr = err

    def Wait(ss, timeout=None):
        """
        Wait waits for a TrainAsync run to finish, returning True if it has.
        An exception that ended the run is re-raised here.
        """
        if ss.Thread is None:
            return True
        ss.Thread.join(timeout)
        if ss.Thread.is_alive():
            return False
        ss.Thread = None
        if ss.ThreadErr is not None:
            err = ss.ThreadErr
            ss.ThreadErr = None
            raise err
        return True

    def Stop(ss):
        """
        Stop tells the sim to stop running
        """
        ss.StopNow = True

    def Stopped(ss):
        """
        Stopped is called when a run method stops running -- updates the IsRunning flag
        """
        ss.IsRunning = False
        ss.UpdateView(True)

    def SaveEpcLog(ss, fname):
        ss.EpcLog.SaveCSV(fname)
