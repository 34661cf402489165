# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

from goal_guy.epc_log import EpcLog
from goal_guy.errors import GoalGuyError, LayerError, UnitValsError
from goal_guy.ext_reps import ExtReps, Relay
from goal_guy.goal_guy import Sim
from goal_guy.netif import LayerType, Network, TimeScales
from goal_guy.stats import EpcAccums, TrialStats
