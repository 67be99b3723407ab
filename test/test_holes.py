# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

# This file is part of strdtm.

# strdtm is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# strdtm is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with strdtm.  If not, see <https://www.gnu.org/licenses/>.

"""Tests for drill-hole decoding and geometry derivation."""

import math

import pytest

from strdtm.drill.holes import (
    DrillHole,
    angle_to_dip,
    derive_geometry,
    dip_to_angle,
    has_design_payload,
    hole_from_collar,
)
from strdtm.io.grouping import records_to_holes
from strdtm.records import StringRecord

COLLAR_FIELDS = [
    "DrillBlast1.1", "BLASTID", "00042", "13.500", "0.229", "", "Rig-1",
    "1.500", "45.0000", "-60.0000", "METHOD", "0.000", "", "0.000",
]


# ---------------------------------------------------------------------------
# Collar payload
# ---------------------------------------------------------------------------

def test_dip_angle_conversion():
    assert dip_to_angle(-90.0) == 0.0
    assert dip_to_angle(-60.0) == 30.0
    assert angle_to_dip(0.0) == -90.0


def test_has_design_payload():
    assert has_design_payload(COLLAR_FIELDS, "DrillBlast")
    assert not has_design_payload([], "DrillBlast")
    assert not has_design_payload(["survey"], "DrillBlast")


def test_hole_from_collar_fields():
    hole = hole_from_collar((10.0, 20.0, 30.0), COLLAR_FIELDS, hole_index=1)
    assert hole.hole_id == "42"
    assert hole.blast_name == "BLASTID"
    assert hole.from_hole_id == "BLASTID:::42"
    assert hole.design_id == "DrillBlast1.1"
    assert hole.length_calculated == pytest.approx(13.5)
    assert hole.diameter == pytest.approx(229.0)
    assert hole.hole_type == "Rig-1"
    assert hole.subdrill_amount == pytest.approx(1.5)
    assert hole.bearing == pytest.approx(45.0)
    assert hole.angle == pytest.approx(30.0)
    assert hole.dip == pytest.approx(-60.0)
    assert hole.method == "METHOD"
    assert hole.toe is None


def test_hole_id_falls_back_to_counter():
    fields = list(COLLAR_FIELDS)
    fields[2] = "00000"
    hole = hole_from_collar((0.0, 0.0, 0.0), fields, hole_index=7)
    assert hole.hole_id == "7"


def test_short_payload_uses_defaults():
    hole = hole_from_collar((0.0, 0.0, 0.0), ["DrillBlast1.1"], hole_index=3)
    assert hole.hole_id == "3"
    assert hole.blast_name == "BLASTID"
    assert hole.angle == 0.0
    assert hole.method == "METHOD"


# ---------------------------------------------------------------------------
# Geometry derivation
# ---------------------------------------------------------------------------

def test_vertical_hole_derivation():
    hole = DrillHole(collar=(0.0, 0.0, 100.0), hole_id="1", toe=(0.0, 0.0, 80.0), subdrill_amount=2.0)
    assert derive_geometry(hole)
    assert hole.angle == pytest.approx(0.0, abs=1e-9)
    assert hole.length_calculated == pytest.approx(20.0)
    assert hole.bench_height == pytest.approx(18.0)
    assert hole.subdrill_length == pytest.approx(2.0)
    assert hole.grade.z == pytest.approx(82.0)
    assert hole.grade.x == pytest.approx(0.0, abs=1e-9)


def test_inclined_hole_derivation():
    hole = DrillHole(collar=(0.0, 0.0, 100.0), hole_id="1", toe=(10.0, 0.0, 90.0), subdrill_amount=1.0)
    assert derive_geometry(hole)
    assert hole.bearing == pytest.approx(90.0)
    assert hole.angle == pytest.approx(45.0)
    assert hole.length_calculated == pytest.approx(math.sqrt(200.0))
    assert hole.bench_height == pytest.approx(9.0)
    assert hole.subdrill_length == pytest.approx(1.0 / math.cos(math.radians(45.0)))
    # grade lies on the hole axis, bench height below the collar
    assert hole.grade.x == pytest.approx(9.0)
    assert hole.grade.y == pytest.approx(0.0, abs=1e-9)
    assert hole.grade.z == pytest.approx(91.0)


def test_bearing_is_normalised():
    hole = DrillHole(collar=(0.0, 0.0, 0.0), hole_id="1", toe=(-5.0, -5.0, -10.0))
    derive_geometry(hole)
    assert hole.bearing == pytest.approx(225.0)


def test_horizontal_hole_grade_is_toe():
    hole = DrillHole(collar=(0.0, 0.0, 0.0), hole_id="1", toe=(0.0, 10.0, 0.0))
    assert derive_geometry(hole)
    assert hole.angle == pytest.approx(90.0)
    assert hole.subdrill_length == 0.0
    assert hole.grade == hole.toe


def test_derivation_needs_toe():
    hole = DrillHole(collar=(0.0, 0.0, 0.0), hole_id="1", angle=30.0)
    assert not derive_geometry(hole)
    assert hole.angle == 30.0
    hole.toe = hole.collar
    assert not derive_geometry(hole)


# ---------------------------------------------------------------------------
# Collar / toe pairing
# ---------------------------------------------------------------------------

def _records():
    return [
        StringRecord(1, 0.0, 0.0, 100.0, COLLAR_FIELDS),
        StringRecord(1, 0.0, 0.0, 80.0),
        StringRecord(0, 0.0, 0.0, 0.0),
        StringRecord(1, 5.0, 0.0, 100.0, ["DrillBlast1.1", "BLASTID", "00043"]),
        StringRecord(0, 0.0, 0.0, 0.0),
    ]


def test_records_to_holes_pairs_collar_and_toe(caplog):
    with caplog.at_level("WARNING"):
        holes = records_to_holes(_records())
    assert [h.hole_id for h in holes] == ["42", "43"]
    assert holes[0].toe == (0.0, 0.0, 80.0)
    assert holes[0].length_calculated == pytest.approx(20.0)
    assert holes[0].bench_height == pytest.approx(18.5)
    assert holes[1].toe is None
    assert holes[1].grade is None
    assert "BLASTID:::43" in caplog.text


def test_hole_copy_is_independent():
    hole = DrillHole(collar=(0.0, 0.0, 100.0), hole_id="1", toe=(0.0, 0.0, 80.0))
    derive_geometry(hole)
    other = hole.copy()
    other.hole_id = "2"
    assert hole.hole_id == "1"
    assert other.bench_height == hole.bench_height
    assert other.to_dict()["hole_id"] == "2"
