# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# netif defines what the goal_guy Sim needs from a network engine.
# The Sim never touches the learning rule or the unit dynamics: it applies
# external patterns, sets layer types, steps the alpha cycle and reads back
# unit values and layer-level error measures.  See leabra_net.py for the
# emergent leabra implementation.

from abc import ABC, abstractmethod
from enum import Enum


############################################
# Enums -- note: must start at 0 for GUI

class LayerType(Enum):
    Hidden = 0
    Input = 1
    Target = 2


class TimeScales(Enum):
    """
    TimeScales are the time scales at which the network display can be
    updated while running -- mirrors leabra.TimeScales
    """
    Cycle = 0
    FastSpike = 1
    Quarter = 2
    Phase = 3
    AlphaCycle = 4
    Trial = 5
    Epoch = 6


# Role layer names -- these are also the column names in the ExtReps table
Context = "Context"
Goal = "Goal"
Motor = "Motor"
Outcome = "Outcome"

Roles = [Context, Goal, Motor, Outcome]


class Network(ABC):
    """
    Network is the interface to the network engine.  Layers are referred to
    by the opaque handle returned from LayerByName, which the Sim resolves
    once at Config time.
    """

    @abstractmethod
    def LayerByName(self, name):
        """
        LayerByName returns a handle for the named layer, or None if there is
        no such layer
        """

    @abstractmethod
    def NumUnits(self, lay):
        pass

    @abstractmethod
    def InitWts(self):
        pass

    @abstractmethod
    def InitExt(self):
        """
        InitExt clears any existing external inputs on all layers
        """

    @abstractmethod
    def ApplyExt(self, lay, pat):
        """
        ApplyExt applies the given 2D pattern as external input (or target,
        depending on the layer type) to the layer.  The pattern is copied.
        """

    @abstractmethod
    def SetType(self, lay, typ):
        """
        SetType sets the LayerType of the layer, determining how external
        patterns are used in the current alpha cycle
        """

    @abstractmethod
    def AlphaCycInit(self):
        pass

    @abstractmethod
    def Cycle(self):
        pass

    @abstractmethod
    def QuarterFinal(self):
        pass

    @abstractmethod
    def DWt(self):
        pass

    @abstractmethod
    def WtFmDWt(self):
        pass

    @abstractmethod
    def UnitVals(self, lay, var):
        """
        UnitVals returns a flat copy of the unit values of given variable
        ("ActM", "ActP", ...).  Raises errors.UnitValsError if the values
        are not available.
        """

    @abstractmethod
    def MSE(self, lay, tol):
        """
        MSE returns the sum squared error and the average (per unit) sum
        squared error of the minus vs. plus phase activations.  Unit-wise
        differences less than tol are counted as 0.
        """

    @abstractmethod
    def CosDiff(self, lay):
        """
        CosDiff returns the cosine between minus and plus phase activations
        -- 1 when the minus phase exactly matches the plus phase
        """

    @abstractmethod
    def ActAvg(self, lay):
        """
        ActAvg returns the running average minus phase activity of the layer
        """
