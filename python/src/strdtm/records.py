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

"""Plain in-memory records produced and consumed by the string/DTM codecs.

None of these know anything about bytes; the decoders in ``strdtm.io`` build
them and the writers walk them.
"""

import enum
import math
from collections import namedtuple

import numpy as np

from strdtm.datamodel import POINT, LINE, POLYGON
from strdtm.extent import Extent


Vertex = namedtuple("Vertex", ["x", "y", "z"])


class FileContentKind(enum.Enum):
    ANNOTATION = "annotation"
    DRILL_HOLE_SET = "drill_hole_set"


# 32 colour palette indexed by ceil(record_number / 32)
PALETTE_32 = [
    "#000000",
    "#770000",
    "#FF0000",
    "#FF9900",
    "#FFFF00",
    "#00FF00",
    "#009900",
    "#00FFFF",
    "#0099FF",
    "#0000FF",
    "#FF00FF",
    "#550000",
    "#AA0000",
    "#883300",
    "#BBBB00",
    "#33AA00",
    "#006600",
    "#007F7F",
    "#002288",
    "#000099",
    "#7F007F",
    "#010101",
    "#222222",
    "#333333",
    "#444444",
    "#555555",
    "#777777",
    "#888888",
    "#AAAAAA",
    "#CCCCCC",
    "#FEFEFE",
]

BASIC_COLOR_NUMBERS = {
    "#FF0000": 1,
    "#00FF00": 2,
    "#0000FF": 3,
    "#FFFF00": 4,
    "#FF00FF": 5,
    "#00FFFF": 6,
    "#FFFFFF": 7,
    "#000000": 8,
    "#FFA500": 9,
    "#800080": 10,
}

DEFAULT_RECORD_NUMBER = 512


def palette_index(record_number):
    if record_number <= 0:
        return 0
    return min(int(math.ceil(record_number / 32)), len(PALETTE_32) - 1)


def record_number_to_color(record_number):
    return PALETTE_32[palette_index(record_number)]


def color_to_record_number(color, default=DEFAULT_RECORD_NUMBER):
    """Map a ``#RRGGBB`` colour onto a record number.

    The ten basic colours have fixed numbers; anything else is hashed into
    1..255 so the same colour always lands on the same record number.
    """
    if not color:
        return default
    key = str(color).upper()
    if key in BASIC_COLOR_NUMBERS:
        return BASIC_COLOR_NUMBERS[key]
    if not key.startswith("#"):
        return default
    value = 0
    for ch in key[1:]:
        # 32-bit signed wrap keeps the hash stable across platforms
        value = (ord(ch) + ((value << 5) - value)) & 0xFFFFFFFF
        if value & 0x80000000:
            value -= 0x100000000
    return abs(value) % 255 + 1


class StringRecord:
    """One decoded line (text) or record (binary) of a string file."""

    def __init__(self, record_number, x, y, z, descriptions=None):
        self.record_number = record_number
        self.x = x
        self.y = y
        self.z = z
        self.descriptions = list(descriptions or [])

    @property
    def is_separator(self):
        return self.record_number == 0

    @property
    def label(self):
        return self.descriptions[0].strip() if self.descriptions else ""

    def vertex(self):
        return Vertex(self.x, self.y, self.z)

    def __repr__(self):
        return (
            f"StringRecord({self.record_number}, x={self.x!r}, y={self.y!r}, "
            f"z={self.z!r}, descriptions={self.descriptions!r})"
        )


class Entity:
    def __init__(self, name, kind, vertices, record_number=0, color=None, descriptions=None, visible=True, text=None, radius=None):
        if not vertices:
            raise ValueError(f"Entity {name!r} has no vertices")
        self.name = name
        self.kind = kind
        self.vertices = [Vertex(*v) for v in vertices]
        self.record_number = record_number
        self.color = color if color is not None else record_number_to_color(record_number)
        self.descriptions = list(descriptions or [])
        self.visible = visible
        self.text = text
        self.radius = radius

    def __len__(self):
        return len(self.vertices)

    def __repr__(self):
        return f"Entity({self.name!r}, {self.kind!r}, {len(self.vertices)} vertices)"


def is_closed(vertices, tolerance=0.001):
    if len(vertices) < 3:
        return False
    first = vertices[0]
    last = vertices[-1]
    return (
        abs(first[0] - last[0]) < tolerance
        and abs(first[1] - last[1]) < tolerance
        and abs(first[2] - last[2]) < tolerance
    )


def infer_kind(vertices, tolerance=0.001):
    if len(vertices) == 1:
        return POINT
    if len(vertices) == 2:
        return LINE
    return POLYGON if is_closed(vertices, tolerance) else LINE


class NamingContext:
    """Unique entity names for one decode session.

    A single counter is shared by every entity so names stay sequential
    in file order; the ``used`` set rejects collisions with names a caller
    has already reserved.
    """

    DEFAULT_BASES = {
        POINT: "str_pt",
        LINE: "str_line",
        POLYGON: "str_poly",
    }

    def __init__(self, reserved=None):
        self.counter = 0
        self.used = set(reserved or ())

    def unique_name(self, kind, label=None):
        base = label or self.DEFAULT_BASES.get(kind, "str_entity")
        while True:
            self.counter += 1
            name = f"{base}_{self.counter}"
            if name not in self.used:
                break
        self.used.add(name)
        return name


class Triangle:
    """Three 0-based indices into a companion vertex list."""

    def __init__(self, v1, v2, v3, triangle_id=None):
        self.indices = (int(v1), int(v2), int(v3))
        self.triangle_id = triangle_id

    def in_range(self, vertex_count):
        return all(0 <= idx < vertex_count for idx in self.indices)

    def __iter__(self):
        return iter(self.indices)

    def __eq__(self, other):
        return isinstance(other, Triangle) and self.indices == other.indices

    def __hash__(self):
        return hash(self.indices)

    def __repr__(self):
        return f"Triangle{self.indices}"


class Surface:
    """A triangulated surface with its own compact vertex array."""

    def __init__(self, vertices, triangles, name="surface", visible=True, color=None):
        self.name = name
        self.visible = visible
        self.color = color
        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        self.triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
        n_verts = self.vertices.shape[0]
        if self.triangles.size and (int(self.triangles.min()) < 0 or int(self.triangles.max()) >= n_verts):
            raise ValueError(f"Surface {name!r} triangle indices out of range [0, {n_verts})")
        self.bounds = self._compute_bounds()

    def _compute_bounds(self):
        if self.vertices.shape[0] == 0:
            return None
        lo = self.vertices.min(axis=0)
        hi = self.vertices.max(axis=0)
        return {
            "min_x": float(lo[0]),
            "max_x": float(hi[0]),
            "min_y": float(lo[1]),
            "max_y": float(hi[1]),
            "min_z": float(lo[2]),
            "max_z": float(hi[2]),
        }

    @property
    def vertex_count(self):
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self):
        return int(self.triangles.shape[0])

    def triangle_vertices(self):
        """Yield each triangle as a tuple of three ``Vertex`` values."""
        for tri in self.triangles:
            yield tuple(Vertex(*map(float, self.vertices[idx])) for idx in tri)

    def extent(self, crs=None):
        if self.bounds is None:
            return None
        b = self.bounds
        return Extent(
            xmin=b["min_x"], xmax=b["max_x"],
            ymin=b["min_y"], ymax=b["max_y"],
            zmin=b["min_z"], zmax=b["max_z"],
            name=self.name, crs=crs,
        )

    def __repr__(self):
        return f"Surface({self.name!r}, {self.vertex_count} vertices, {self.triangle_count} triangles)"
