# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# leabra_net runs the goal_guy network on the emergent leabra engine.
# It needs the leabra Python bindings, i.e., run under pyleabra:
# pyleabra -m goal_guy

import os

import numpy as np

from leabra import go, leabra, emer, relpos, prjn, params, etensor

from goal_guy import netif
from goal_guy.errors import UnitValsError
from goal_guy.netif import LayerType

# ParamsFile holds the default parameters for this simulation
ParamsFile = os.path.join(os.path.dirname(os.path.abspath(__file__)), "goal_guy.params")

LayTypes = {
    LayerType.Hidden: emer.Hidden,
    LayerType.Input: emer.Input,
    LayerType.Target: emer.Target,
}


class LeabraNet(netif.Network):
    """
    LeabraNet is the GoalGuyNet leabra.Network with its timing state,
    implementing netif.Network
    """

    def __init__(self):
        self.Net = leabra.Network()
        self.Time = leabra.Time()
        self.Params = params.Sets()
        self.ParamSet = str()  # which set of *additional* parameters to use -- always applies Base and optionaly this next if set
        self.LogSetParams = False  # if true, print message for all params that are set

    def Config(self, shape=(5, 5)):
        self.InitParams()
        self.ConfigNet(self.Net, shape)

    def InitParams(self):
        """
        Sets the default set of parameters -- Base is always applied, and others can be optionally
        selected to apply on top of that
        """
        self.Params.OpenJSON(ParamsFile)

    def ConfigNet(self, net, shape):
        net.InitName(net, "GoalGuyNet")
        ny, nx = shape
        contextLay = net.AddLayer2D(netif.Context, ny, nx, emer.Input)
        goalLay = net.AddLayer2D(netif.Goal, ny, nx, emer.Hidden)
        motorLay = net.AddLayer2D(netif.Motor, ny, nx, emer.Hidden)
        outcomeLay = net.AddLayer2D(netif.Outcome, ny, nx, emer.Target)

        contextLay.SetRelPos(relpos.Rel(Rel= relpos.Above, Other= netif.Motor, YAlign= relpos.Front, Space= 2))
        outcomeLay.SetRelPos(relpos.Rel(Rel= relpos.RightOf, Other= netif.Motor, YAlign= relpos.Front, Space= 2))
        goalLay.SetRelPos(relpos.Rel(Rel= relpos.RightOf, Other= netif.Context, YAlign= relpos.Front, Space= 2))

        full = prjn.NewFull()
        net.ConnectLayers(contextLay, goalLay, prjn.NewOneToOne(), emer.Forward)
        net.ConnectLayers(goalLay, motorLay, full, emer.Forward)
        net.ConnectLayers(motorLay, outcomeLay, full, emer.Forward)
        net.ConnectLayers(outcomeLay, motorLay, full, emer.Back)

        net.Defaults()
        self.SetParams("Network", self.LogSetParams)
        net.Build()
        net.InitWts()

    def SetParams(self, sheet, setMsg):
        """
        SetParams sets the params for "Base" and then current ParamSet.
        If sheet is empty, then it applies all avail sheets (e.g., Network, Sim)
        otherwise just the named sheet
        if setMsg = true then we output a message for each param that was set.
        """
        self.SetParamsSet("Base", sheet, setMsg)
        if self.ParamSet != "" and self.ParamSet != "Base":
            for ps in self.ParamSet.split():
                self.SetParamsSet(ps, sheet, setMsg)

    def SetParamsSet(self, setNm, sheet, setMsg):
        pset = self.Params.SetByNameTry(setNm)
        if sheet == "" or sheet == "Network":
            if "Network" in pset.Sheets:
                netp = pset.SheetByNameTry("Network")
                self.Net.ApplyParams(netp, setMsg)

    def LayerByName(self, name):
        ly = self.Net.LayerByName(name)
        if ly is None or ly == go.nil:
            return None
        return leabra.Layer(ly)

    def NumUnits(self, lay):
        return len(lay.Neurons)

    def InitWts(self):
        self.Time.Reset()
        self.Net.InitWts()

    def InitExt(self):
        self.Net.InitExt()

    def ApplyExt(self, lay, pat):
        pat = np.asarray(pat, dtype=np.float32)
        tsr = etensor.Float32()
        tsr.SetShape(go.Slice_int(list(pat.shape)), go.nil, go.nil)
        tsr.Values.copy([float(v) for v in pat.ravel()])
        lay.ApplyExt(tsr)

    def SetType(self, lay, typ):
        lay.SetType(LayTypes[typ])

    def AlphaCycInit(self):
        self.Net.AlphaCycInit()
        self.Time.AlphaCycStart()

    def Cycle(self):
        self.Net.Cycle(self.Time)
        self.Time.CycleInc()

    def QuarterFinal(self):
        self.Net.QuarterFinal(self.Time)
        self.Time.QuarterInc()

    def DWt(self):
        self.Net.DWt()

    def WtFmDWt(self):
        self.Net.WtFmDWt()

    def UnitVals(self, lay, var):
        tsr = etensor.Float32()
        try:
            lay.UnitValuesTensor(tsr, var)
        except Exception as err:  # go errors come back as plain Exceptions
            raise UnitValsError(lay.Nm, var, str(err))
        vals = np.array(list(tsr.Values), dtype=np.float32)
        if len(vals) == 0:
            raise UnitValsError(lay.Nm, var)
        return vals

    def MSE(self, lay, tol):
        sse = float(lay.SSE(tol))
        return sse, sse / len(lay.Neurons)

    def CosDiff(self, lay):
        return float(lay.CosDiff.Cos)

    def ActAvg(self, lay):
        return float(lay.Pools[0].ActAvg.ActMAvg)

    def SaveWeights(self, filename):
        """
        SaveWeights saves the network weights
        """
        self.Net.SaveWtsJSON(filename)
