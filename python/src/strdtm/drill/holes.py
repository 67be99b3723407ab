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

"""Drill-hole records decoded from collar/toe string pairs.

A collar record carries the design payload (hole identity, planned depth,
diameter, rig, subdrill, bearing, dip); the next record without a payload
is the toe. Once both ends are known the hole geometry is re-derived from
the collar to toe vector rather than trusted from the payload:

- length: |toe - collar|
- bearing: atan2(dx, dy) from north, in [0, 360)
- angle: acos(|dz| / length) from vertical
- bench height: |dz| - subdrill
- grade: the point on the hole axis at bench height below the collar
"""

import logging
import math

from strdtm.records import Vertex

logger = logging.getLogger(__name__)

DEFAULT_BLAST_NAME = "BLASTID"
DEFAULT_RIG = "Undefined"
DEFAULT_METHOD = "METHOD"
DEFAULT_DIP = -90.0


def _float_or(value, default):
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(out) or out == 0:
        return default
    return out


def _field(parts, idx, default=""):
    if idx < len(parts):
        val = parts[idx].strip()
        if val:
            return val
    return default


def dip_to_angle(dip):
    """Source dip (0 horizontal, -90 down) to angle from vertical (0 down)."""
    return dip + 90.0


def angle_to_dip(angle):
    return angle - 90.0


class DrillHole:
    def __init__(self,
        collar,
        hole_id,
        blast_name=DEFAULT_BLAST_NAME,
        toe=None,
        design_id="",
        diameter=0.0,
        subdrill_amount=0.0,
        bearing=0.0,
        angle=0.0,
        length_calculated=0.0,
        hole_type=DEFAULT_RIG,
        method=DEFAULT_METHOD,
        visible=True):
        self.collar = Vertex(*collar)
        self.toe = Vertex(*toe) if toe is not None else None
        self.hole_id = str(hole_id)
        self.blast_name = blast_name
        self.design_id = design_id
        # millimetres
        self.diameter = diameter
        self.subdrill_amount = subdrill_amount
        self.bearing = bearing
        self.angle = angle
        self.length_calculated = length_calculated
        self.hole_type = hole_type
        self.method = method
        self.visible = visible
        self.grade = None
        self.bench_height = None
        self.subdrill_length = None

    @property
    def from_hole_id(self):
        return f"{self.blast_name}:::{self.hole_id}"

    @property
    def dip(self):
        return angle_to_dip(self.angle)

    def has_toe(self):
        return self.toe is not None and tuple(self.toe) != (0.0, 0.0, 0.0)

    def copy(self):
        hole = DrillHole(
            collar=self.collar,
            hole_id=self.hole_id,
            blast_name=self.blast_name,
            toe=self.toe,
            design_id=self.design_id,
            diameter=self.diameter,
            subdrill_amount=self.subdrill_amount,
            bearing=self.bearing,
            angle=self.angle,
            length_calculated=self.length_calculated,
            hole_type=self.hole_type,
            method=self.method,
            visible=self.visible,
        )
        hole.grade = self.grade
        hole.bench_height = self.bench_height
        hole.subdrill_length = self.subdrill_length
        return hole

    def to_dict(self):
        return {
            "hole_id": self.hole_id,
            "blast_name": self.blast_name,
            "collar": self.collar,
            "toe": self.toe,
            "grade": self.grade,
            "design_id": self.design_id,
            "diameter": self.diameter,
            "subdrill_amount": self.subdrill_amount,
            "subdrill_length": self.subdrill_length,
            "bench_height": self.bench_height,
            "bearing": self.bearing,
            "angle": self.angle,
            "length_calculated": self.length_calculated,
            "hole_type": self.hole_type,
            "method": self.method,
            "visible": self.visible,
        }

    def __repr__(self):
        return f"DrillHole({self.from_hole_id!r}, collar={tuple(self.collar)}, toe={self.toe and tuple(self.toe)})"


def has_design_payload(fields, design_identifier):
    """True when ``fields`` (D1.. description fields) carry a collar payload."""
    if not fields:
        return False
    return design_identifier in fields[0]


def hole_from_collar(collar, fields, hole_index):
    """Build a hole from collar coordinates and its D1..D14 payload fields.

    ``fields[0]`` is the design identifier, diameter arrives in metres and is
    stored in millimetres, dip is converted to an angle from vertical.
    """
    parts = [str(f).strip() for f in fields]
    raw_id = _field(parts, 2, str(hole_index))
    hole_id = raw_id.lstrip("0") or str(hole_index)
    dip = _float_or(_field(parts, 9), DEFAULT_DIP)
    return DrillHole(
        collar=collar,
        hole_id=hole_id,
        blast_name=_field(parts, 1, DEFAULT_BLAST_NAME),
        design_id=_field(parts, 0),
        length_calculated=_float_or(_field(parts, 3), 0.0),
        diameter=_float_or(_field(parts, 4), 0.0) * 1000.0,
        hole_type=_field(parts, 6, DEFAULT_RIG),
        subdrill_amount=_float_or(_field(parts, 7), 0.0),
        bearing=_float_or(_field(parts, 8), 0.0),
        angle=dip_to_angle(dip),
        method=_field(parts, 10, DEFAULT_METHOD),
    )


def derive_geometry(hole):
    """Recompute bearing, angle, length, bench height, subdrill length and grade.

    Returns False (hole untouched) when the toe is unknown or coincides with
    the collar.
    """
    if not hole.has_toe():
        return False

    dx = hole.toe.x - hole.collar.x
    dy = hole.toe.y - hole.collar.y
    dz = hole.toe.z - hole.collar.z
    length = math.sqrt(dx * dx + dy * dy + dz * dz)
    if length == 0:
        return False

    bearing = math.degrees(math.atan2(dx, dy))
    if bearing < 0:
        bearing += 360.0
    angle = math.degrees(math.acos(min(1.0, abs(dz) / length)))

    hole.bearing = bearing
    hole.angle = angle
    hole.length_calculated = length
    hole.bench_height = abs(dz) - hole.subdrill_amount

    cos_angle = math.cos(math.radians(angle))
    sin_angle = math.sin(math.radians(angle))
    rad_bearing = math.radians((450.0 - bearing) % 360.0)

    if abs(cos_angle) > 1e-9:
        hole.subdrill_length = hole.subdrill_amount / cos_angle
        bench_drill_length = hole.bench_height / cos_angle
        horizontal = bench_drill_length * sin_angle
        hole.grade = Vertex(
            hole.collar.x + horizontal * math.cos(rad_bearing),
            hole.collar.y + horizontal * math.sin(rad_bearing),
            hole.collar.z - hole.bench_height,
        )
    else:
        # horizontal hole
        hole.subdrill_length = 0.0
        hole.grade = hole.toe

    logger.debug(
        "Derived hole %s: bearing=%.2f angle=%.2f length=%.3f bench=%.2f",
        hole.hole_id, bearing, angle, length, hole.bench_height,
    )
    return True
