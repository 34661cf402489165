# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# use:
# pyleabra -m goal_guy [options]
# runs the goal_guy model without the gui -- see usage() for options

import sys, getopt

import numpy as np

from goal_guy.goal_guy import Sim
from goal_guy.leabra_net import LeabraNet

# DefPatsFile is the conventional name for a saved patterns file
DefPatsFile = "goal-guy-0-5x5-25-gen.dat"


def usage():
    print("\ngoal_guy runs the goal guy phase 0 model\n")
    print("options:")
    print("  --epochs=<n>\t number of epochs to train (default 500)")
    print("  --seed=<n>\t random seed (default 1)")
    print("  --randomize\t use a new random seed based on the current time")
    print("  --sequential\t present patterns in sequential order")
    print("  --test\t\t do not call learning methods")
    print("  --pats=<file>\t open patterns from etable file instead of generating them")
    print("  --npats=<n>\t number of patterns to generate (default 25)")
    print("  --genpats=<file>\t save generated patterns, e.g., %s" % DefPatsFile)
    print("  --epclog=<file>\t save epoch log to csv file")
    print("  --wts=<file>\t save trained weights")
    print()


def main(argv):
    try:
        opts, args = getopt.getopt(argv, "h", ["help", "epochs=", "seed=", "randomize", "sequential", "test", "pats=", "npats=", "genpats=", "epclog=", "wts="])
    except getopt.GetoptError as err:
        print("goal_guy: %s" % err)
        usage()
        return 2

    net = LeabraNet()
    ss = Sim(net)
    ss.ViewOn = False
    pats = ""
    npats = 25
    genpats = ""
    epclog = ""
    wts = ""
    for opt, arg in opts:
        if opt in ("-h", "--help"):
            usage()
            return 0
        elif opt == "--epochs":
            ss.MaxEpcs = int(arg)
        elif opt == "--seed":
            ss.RndSeed = int(arg)
        elif opt == "--randomize":
            ss.NewRndSeed()
        elif opt == "--sequential":
            ss.Sequential = True
        elif opt == "--test":
            ss.Test = True
        elif opt == "--pats":
            pats = arg
        elif opt == "--npats":
            npats = int(arg)
        elif opt == "--genpats":
            genpats = arg
        elif opt == "--epclog":
            epclog = arg
        elif opt == "--wts":
            wts = arg

    if pats != "":
        ss.ExtReps.OpenCSV(pats)
    else:
        ss.ExtReps.Config(npats, (5, 5), np.random.default_rng(ss.RndSeed))
        if genpats != "":
            ss.ExtReps.SaveCSV(genpats)

    print("Running %d epochs of %d patterns, seed: %d" % (ss.MaxEpcs or 500, ss.ExtReps.NumRows(), ss.RndSeed))
    net.Config(ss.ExtReps.Shape)
    ss.Config()
    ss.Init()
    ss.Train()

    if epclog != "":
        print("Saving epoch log to: %s" % epclog)
        ss.SaveEpcLog(epclog)
    if wts != "":
        print("Saving Weights to: %s" % wts)
        net.SaveWeights(wts)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
