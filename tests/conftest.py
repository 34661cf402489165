"""Shared test fixtures: a scripted network engine and configured sims."""

import numpy as np
import pytest

from goal_guy import netif
from goal_guy.errors import UnitValsError
from goal_guy.goal_guy import Sim
from goal_guy.netif import LayerType
from goal_guy.stats import TolSSE


class FakeNet(netif.Network):
    """Network engine stand-in with Leabra-like minus / plus phase semantics.

    At the end of each alpha cycle every layer settles as follows:
    - Input: ActM = ActP = the applied pattern
    - Target: ActM = Response(layer), ActP = the applied pattern
    - Hidden: ActM = ActP = Response(layer)

    Response maps a layer name to a function of the FakeNet returning the
    produced activity; layers without one produce zeros.
    """

    def __init__(self, shape=(5, 5), names=None, sizes=None):
        if names is None:
            names = list(netif.Roles)
        n = int(np.prod(shape))
        self.Sizes = {nm: n for nm in names}
        if sizes is not None:
            self.Sizes.update(sizes)
        self.Types = {nm: LayerType.Hidden for nm in names}
        self.Ext = {}
        self.ActMs = {nm: np.zeros(self.Sizes[nm], dtype=np.float32) for nm in names}
        self.ActPs = {nm: np.zeros(self.Sizes[nm], dtype=np.float32) for nm in names}
        self.Response = {}
        self.FailVals = set()
        self.History = []  # per alpha cycle: (types, applied patterns)
        self.OnAlphaCycInit = None
        self.NAlphaCyc = 0
        self.NCycles = 0
        self.NQuarters = 0
        self.NDWt = 0
        self.NWtFmDWt = 0
        self.NInitWts = 0
        self.Events = []
        self._qtr = 0

    def LayerByName(self, name):
        if name in self.Sizes:
            return name
        return None

    def NumUnits(self, lay):
        return self.Sizes[lay]

    def InitWts(self):
        self.NInitWts += 1

    def InitExt(self):
        self.Ext = {}

    def ApplyExt(self, lay, pat):
        self.Ext[lay] = np.array(pat, dtype=np.float32).ravel()

    def SetType(self, lay, typ):
        self.Types[lay] = typ

    def AlphaCycInit(self):
        self.NAlphaCyc += 1
        self._qtr = 0
        self.Events.append("AlphaCycInit")
        self.History.append((dict(self.Types), {k: v.copy() for k, v in self.Ext.items()}))
        if self.OnAlphaCycInit is not None:
            self.OnAlphaCycInit(self)

    def Cycle(self):
        self.NCycles += 1

    def QuarterFinal(self):
        self.NQuarters += 1
        self._qtr += 1
        if self._qtr == 4:
            self.Settle()

    def Settle(self):
        for nm, typ in self.Types.items():
            n = self.Sizes[nm]
            ext = self.Ext.get(nm, np.zeros(n, dtype=np.float32))
            if nm in self.Response:
                rsp = np.asarray(self.Response[nm](self), dtype=np.float32).ravel()
            else:
                rsp = np.zeros(n, dtype=np.float32)
            if typ == LayerType.Input:
                self.ActMs[nm] = ext.copy()
                self.ActPs[nm] = ext.copy()
            elif typ == LayerType.Target:
                self.ActMs[nm] = rsp
                self.ActPs[nm] = ext.copy()
            else:
                self.ActMs[nm] = rsp
                self.ActPs[nm] = rsp.copy()

    def DWt(self):
        self.NDWt += 1
        self.Events.append("DWt")

    def WtFmDWt(self):
        self.NWtFmDWt += 1
        self.Events.append("WtFmDWt")

    def UnitVals(self, lay, var):
        if lay in self.FailVals or (lay, var) in self.FailVals:
            raise UnitValsError(lay, var)
        if var == "ActM":
            return self.ActMs[lay].copy()
        if var == "ActP":
            return self.ActPs[lay].copy()
        raise UnitValsError(lay, var)

    def MSE(self, lay, tol):
        if self.Types[lay] != LayerType.Target:
            return 0.0, 0.0
        sse = TolSSE(self.ActPs[lay], self.ActMs[lay], tol)
        return sse, sse / self.Sizes[lay]

    def CosDiff(self, lay):
        am = self.ActMs[lay].astype(np.float64)
        ap = self.ActPs[lay].astype(np.float64)
        nm = np.sqrt(np.dot(am, am))
        npl = np.sqrt(np.dot(ap, ap))
        if nm == 0 and npl == 0:
            return 1.0
        if nm == 0 or npl == 0:
            return 0.0
        return float(np.dot(am, ap) / (nm * npl))

    def ActAvg(self, lay):
        return float(np.mean(self.ActMs[lay]))


def MakeSim(net, nrows, shape=(5, 5), seed=None):
    """Return a configured Sim over nrows all-zero patterns."""
    ss = Sim(net)
    ss.ExtReps.Shape = tuple(shape)
    ss.ExtReps.SetNumRows(nrows)
    if seed is not None:
        ss.RndSeed = seed
    ss.CycPerQtr = 2
    ss.Config()
    ss.Init()
    return ss


@pytest.fixture
def fake_net():
    return FakeNet()


@pytest.fixture
def make_sim():
    return MakeSim


@pytest.fixture
def patterned_sim():
    """Sim over 6 generated patterns, Outcome predicted from Context."""
    net = FakeNet()
    net.Response[netif.Outcome] = lambda fn: fn.Ext.get(netif.Context, np.zeros(25)) * 0.8
    net.Response[netif.Motor] = lambda fn: np.roll(fn.Ext.get(netif.Goal, np.zeros(25)), 1)
    ss = Sim(net)
    ss.ExtReps.Config(6, (5, 5), np.random.default_rng(3))
    ss.CycPerQtr = 2
    ss.Config()
    ss.Init()
    return ss
