# Copyright (c) 2019, The Emergent Authors. All rights reserved.
# Use of this source code is governed by a BSD-style
# license that can be found in the LICENSE file.

# ext_reps holds the externally clamped representations for each trial:
# the authored Context, Goal, Motor and Outcome patterns (ExtReps), and the
# Relay that carries the Motor / Outcome activity produced in the first
# alpha cycle of a trial over into the second one.

import re

import numpy as np
import pandas as pd

from goal_guy import netif

# emergent etable CSV column header: type prefix, name, optional tensor
# cell index [ndim:i,j] and, on the first cell only, the shape <ndim:Y,X>
HeadRe = re.compile(r"^([$%#^]?)([^\[<]+)(?:\[(\d+):([\d,]+)\])?(?:<(\d+):([\d,]+)>)?$")


def PermutedBinaryRows(pats, nOn, onVal, offVal, rng):
    """
    PermutedBinaryRows sets each row of pats (rows x Y x X) to a random
    binary pattern with nOn units at onVal and the rest at offVal
    """
    nr = pats.shape[0]
    cells = int(np.prod(pats.shape[1:]))
    flat = pats.reshape(nr, cells)
    for row in range(nr):
        flat[row, :] = offVal
        pidx = rng.permutation(cells)
        flat[row, pidx[:nOn]] = onVal


class ExtReps(object):
    """
    ExtReps is the table of authored patterns, one row per trial.  Each of
    the four roles is a float32 array of shape (rows, Y, X).  Training never
    writes into it -- captured activity goes to the Relay.
    """

    def __init__(self):
        self.Names = []
        self.Shape = (5, 5)
        self.Pats = {}
        self.SetNumRows(0)

    def SetNumRows(self, nrows):
        """
        SetNumRows resets the table to nrows rows of all-zero patterns
        """
        self.Names = [""] * nrows
        self.Pats = {}
        for role in netif.Roles:
            self.Pats[role] = np.zeros((nrows,) + tuple(self.Shape), dtype=np.float32)

    def NumRows(self):
        return len(self.Names)

    def CellSize(self):
        """
        CellSize returns the number of units in one row of any role
        """
        return int(np.prod(self.Shape))

    def Pat(self, role, row):
        """
        Pat returns a copy of the 2D pattern for role at given row
        """
        return self.Pats[role][row].copy()

    def SetPat(self, role, row, pat):
        self.Pats[role][row] = np.asarray(pat, dtype=np.float32).reshape(self.Shape)

    def Config(self, nrows, shape, rng):
        """
        Config generates a new set of patterns: Context and Outcome get 3
        active units per row, Goal and Motor start out blank
        """
        self.Shape = tuple(shape)
        self.SetNumRows(nrows)
        self.Names = ["%d" % i for i in range(nrows)]
        PermutedBinaryRows(self.Pats[netif.Context], 3, 1, 0, rng)
        PermutedBinaryRows(self.Pats[netif.Goal], 0, 0, 0, rng)
        PermutedBinaryRows(self.Pats[netif.Motor], 0, 0, 0, rng)
        PermutedBinaryRows(self.Pats[netif.Outcome], 3, 1, 0, rng)

    def OpenCSV(self, fname, delim="\t"):
        """
        OpenCSV reads patterns from an emergent etable CSV / TSV file.
        Returns False (after printing why) if the file could not be used, in
        which case the table is left empty.
        """
        try:
            df = pd.read_csv(fname, sep=delim, dtype=str, keep_default_na=False)
        except (OSError, ValueError) as err:
            print("ExtReps: could not open patterns file %s: %s" % (fname, err))
            self.SetNumRows(0)
            return False

        if "_H:" in df.columns:
            df = df[df["_H:"] == "_D:"]

        names = None
        cells = {}
        shapes = {}
        for cnm in df.columns:
            m = HeadRe.match(cnm)
            if m is None:
                continue
            typ, nm, _, idx, _, shp = m.groups()
            if typ == "$":
                names = list(df[cnm])
                continue
            if idx is None:
                continue
            cells.setdefault(nm, []).append((tuple(int(i) for i in idx.split(",")), cnm))
            if shp is not None:
                shapes[nm] = tuple(int(i) for i in shp.split(","))

        shape = None
        for role in netif.Roles:
            if role not in cells:
                print("ExtReps: patterns file %s has no %s column" % (fname, role))
                self.SetNumRows(0)
                return False
            rshp = shapes.get(role)
            if rshp is None:
                rshp = tuple(max(ix[d] for ix, _ in cells[role]) + 1 for d in range(len(cells[role][0][0])))
            if shape is None:
                shape = rshp
            elif rshp != shape:
                print("ExtReps: patterns file %s: %s shape %s does not match %s" % (fname, role, rshp, shape))
                self.SetNumRows(0)
                return False

        self.Shape = shape
        self.SetNumRows(len(df))
        if names is not None:
            self.Names = names
        try:
            for role in netif.Roles:
                pats = self.Pats[role]
                for ix, cnm in cells[role]:
                    pats[(slice(None),) + ix] = df[cnm].astype(np.float32).to_numpy()
        except (ValueError, IndexError) as err:
            print("ExtReps: bad values in patterns file %s: %s" % (fname, err))
            self.SetNumRows(0)
            return False
        return True

    def SaveCSV(self, fname, delim="\t"):
        """
        SaveCSV writes the patterns as an emergent etable CSV / TSV file
        with headers, readable by OpenCSV
        """
        nr = self.NumRows()
        shp = ",".join("%d" % d for d in self.Shape)
        cols = {"_H:": ["_D:"] * nr, "$Name": list(self.Names)}
        for role in netif.Roles:
            pats = self.Pats[role]
            for ci, ix in enumerate(np.ndindex(*self.Shape)):
                hdr = "%%%s[%d:%s]" % (role, len(self.Shape), ",".join("%d" % i for i in ix))
                if ci == 0:
                    hdr += "<%d:%s>" % (len(self.Shape), shp)
                cols[hdr] = pats[(slice(None),) + ix]
        pd.DataFrame(cols).to_csv(fname, sep=delim, index=False, float_format="%g")


class Relay(object):
    """
    Relay holds the Motor and Outcome activity captured at the end of the
    first alpha cycle of a trial, to be clamped during the second one.
    Values are stored flat per role, at row*cells + i.  Capture and Clear
    are the only methods that write to it.
    """

    def __init__(self):
        self.Roles = [netif.Motor, netif.Outcome]
        self.Cells = 0
        self.Vals = {}
        self.Captured = {}
        self.Config(0, 0)

    def Config(self, nrows, cells):
        self.Cells = cells
        self.Vals = {}
        self.Captured = {}
        for role in self.Roles:
            self.Vals[role] = np.zeros(nrows * cells, dtype=np.float32)
            self.Captured[role] = np.zeros(nrows, dtype=bool)

    def NumRows(self):
        return len(self.Captured[self.Roles[0]])

    def Capture(self, role, row, vals):
        """
        Capture copies vals into the role's slot at row and returns the
        number of values written
        """
        vals = np.asarray(vals, dtype=np.float32).ravel()
        if len(vals) != self.Cells:
            print("Relay: %s has %d units but patterns have %d cells -- copying %d" % (role, len(vals), self.Cells, min(len(vals), self.Cells)))
        sz = min(len(vals), self.Cells)
        stidx = row * self.Cells
        tsr = self.Vals[role]
        for i in range(sz):
            tsr[stidx + i] = vals[i]
        self.Captured[role][row] = True
        return sz

    def Clear(self, role, row, sz):
        """
        Clear zeros the first sz values of the role's slot at row -- sz must
        be the size returned by Capture
        """
        stidx = row * self.Cells
        tsr = self.Vals[role]
        for j in range(sz):
            tsr[stidx + j] = 0
        self.Captured[role][row] = False

    def IsCaptured(self, role, row):
        return bool(self.Captured[role][row])

    def Row(self, role, row):
        """
        Row returns a copy of the role's values at row
        """
        stidx = row * self.Cells
        return self.Vals[role][stidx:stidx + self.Cells].copy()
