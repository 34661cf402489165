# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

"""
Exceptions raised by the goal_guy simulation.

Only conditions that leave no sensible way to continue are raised --
everything else (out-of-range alpha cycle, layer size mismatch, a failed
unit-values read) is printed as a diagnostic and the trial goes on.
"""


class GoalGuyError(Exception):
    """Base class for all goal_guy errors."""


class LayerError(GoalGuyError):
    """
    LayerError is raised when one of the named role layers cannot be
    resolved in the network -- there is nothing to clamp, so the run
    must not start.
    """

    def __init__(self, name, msg=""):
        self.Name = name
        if msg == "":
            msg = "layer not found in network: %s" % name
        super(LayerError, self).__init__(msg)


class UnitValsError(GoalGuyError):
    """
    UnitValsError is raised by a Network when it has no values to return
    for the given layer and variable.
    """

    def __init__(self, name, var, msg=""):
        self.Name = name
        self.Var = var
        if msg == "":
            msg = "no %s values for layer: %s" % (var, name)
        super(UnitValsError, self).__init__(msg)
