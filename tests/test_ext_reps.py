"""Tests for the ExtReps pattern table and the Relay buffer."""

import numpy as np
import pytest

from goal_guy import netif
from goal_guy.ext_reps import ExtReps, Relay, PermutedBinaryRows


class TestPatterns:
    """Pattern generation and the authored table."""

    def test_permuted_binary_rows(self):
        pats = np.zeros((10, 5, 5), dtype=np.float32)
        PermutedBinaryRows(pats, 3, 1, 0, np.random.default_rng(0))
        for row in range(10):
            assert np.count_nonzero(pats[row]) == 3
            assert set(np.unique(pats[row])) <= {0.0, 1.0}

    def test_permuted_binary_rows_none_on(self):
        pats = np.ones((4, 5, 5), dtype=np.float32)
        PermutedBinaryRows(pats, 0, 1, 0, np.random.default_rng(0))
        assert not pats.any()

    def test_config(self):
        et = ExtReps()
        et.Config(25, (5, 5), np.random.default_rng(1))
        assert et.NumRows() == 25
        assert et.CellSize() == 25
        assert et.Pats[netif.Context].shape == (25, 5, 5)
        assert (np.count_nonzero(et.Pats[netif.Context].reshape(25, -1), axis=1) == 3).all()
        assert (np.count_nonzero(et.Pats[netif.Outcome].reshape(25, -1), axis=1) == 3).all()
        assert not et.Pats[netif.Goal].any()
        assert not et.Pats[netif.Motor].any()

    def test_pat_is_copy(self):
        et = ExtReps()
        et.Config(2, (5, 5), np.random.default_rng(1))
        pat = et.Pat(netif.Context, 0)
        pat[:] = 7
        assert not (et.Pats[netif.Context][0] == 7).any()


class TestCSV:
    """etable CSV reading and writing."""

    def test_save_header(self, tmp_path):
        et = ExtReps()
        et.Config(3, (5, 5), np.random.default_rng(1))
        fname = tmp_path / "pats.tsv"
        et.SaveCSV(str(fname))
        hdr = fname.read_text().splitlines()[0].split("\t")
        assert hdr[0] == "_H:"
        assert hdr[1] == "$Name"
        assert hdr[2] == "%Context[2:0,0]<2:5,5>"
        assert hdr[3] == "%Context[2:0,1]"
        assert len(hdr) == 2 + 4 * 25

    def test_save_open(self, tmp_path):
        et = ExtReps()
        et.Config(4, (3, 2), np.random.default_rng(5))
        et.SetPat(netif.Motor, 2, np.arange(6) * 0.25)
        fname = str(tmp_path / "pats.tsv")
        et.SaveCSV(fname)

        rd = ExtReps()
        assert rd.OpenCSV(fname)
        assert rd.NumRows() == 4
        assert rd.Shape == (3, 2)
        assert rd.Names == et.Names
        for role in netif.Roles:
            np.testing.assert_allclose(rd.Pats[role], et.Pats[role])

    def test_open_missing_file(self, tmp_path, capsys):
        et = ExtReps()
        et.Config(2, (5, 5), np.random.default_rng(1))
        assert not et.OpenCSV(str(tmp_path / "nope.dat"))
        assert et.NumRows() == 0
        assert "could not open" in capsys.readouterr().out

    def test_open_missing_role(self, tmp_path, capsys):
        fname = tmp_path / "pats.tsv"
        fname.write_text("_H:\t$Name\t%Context[2:0,0]<2:1,1>\n_D:\ta\t1\n")
        et = ExtReps()
        assert not et.OpenCSV(str(fname))
        assert et.NumRows() == 0
        assert "no Goal column" in capsys.readouterr().out

    def test_open_without_shape(self, tmp_path):
        cols = ["_H:", "$Name"]
        vals = ["_D:", "x"]
        for role in netif.Roles:
            for y in range(2):
                for x in range(2):
                    cols.append("%%%s[2:%d,%d]" % (role, y, x))
                    vals.append("1" if role == netif.Outcome and y == x else "0")
        fname = tmp_path / "pats.tsv"
        fname.write_text("\t".join(cols) + "\n" + "\t".join(vals) + "\n")
        et = ExtReps()
        assert et.OpenCSV(str(fname))
        assert et.Shape == (2, 2)
        np.testing.assert_array_equal(et.Pat(netif.Outcome, 0), np.eye(2))


class TestRelay:
    """The Motor / Outcome relay buffer."""

    def test_capture_offset(self):
        rl = Relay()
        rl.Config(3, 4)
        sz = rl.Capture(netif.Motor, 2, [1, 2, 3, 4])
        assert sz == 4
        np.testing.assert_array_equal(rl.Vals[netif.Motor][8:12], [1, 2, 3, 4])
        assert not rl.Vals[netif.Motor][:8].any()
        assert rl.IsCaptured(netif.Motor, 2)
        assert not rl.IsCaptured(netif.Outcome, 2)

    def test_clear_uses_row_offset(self):
        rl = Relay()
        rl.Config(3, 4)
        rl.Capture(netif.Outcome, 0, [5, 5, 5, 5])
        sz = rl.Capture(netif.Outcome, 2, [1, 2, 3, 4])
        rl.Clear(netif.Outcome, 2, sz)
        assert not rl.Row(netif.Outcome, 2).any()
        np.testing.assert_array_equal(rl.Row(netif.Outcome, 0), [5, 5, 5, 5])
        assert not rl.IsCaptured(netif.Outcome, 2)
        assert rl.IsCaptured(netif.Outcome, 0)

    def test_clear_recorded_size(self):
        rl = Relay()
        rl.Config(1, 4)
        rl.Vals[netif.Motor][:] = 9
        rl.Clear(netif.Motor, 0, 2)
        np.testing.assert_array_equal(rl.Row(netif.Motor, 0), [0, 0, 9, 9])

    def test_capture_too_many(self, capsys):
        rl = Relay()
        rl.Config(2, 2)
        sz = rl.Capture(netif.Motor, 0, [1, 2, 3])
        assert sz == 2
        np.testing.assert_array_equal(rl.Row(netif.Motor, 1), [0, 0])
        assert "copying 2" in capsys.readouterr().out

    def test_row_is_copy(self):
        rl = Relay()
        rl.Config(1, 2)
        rl.Capture(netif.Motor, 0, [1, 1])
        r = rl.Row(netif.Motor, 0)
        r[:] = 0
        np.testing.assert_array_equal(rl.Row(netif.Motor, 0), [1, 1])
