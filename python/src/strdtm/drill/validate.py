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

"""QA/QC helpers for decoded holes and surfaces.

Each check returns a list of issue dicts rather than raising, so a caller
can show every problem in a file at once.
"""

import numpy as np


def report_missing_columns(df, required):
    missing = [col for col in required if col not in df.columns]
    return missing


def validate_holes(holes):
    """Issues: missing toe, zero length, angle or bearing out of range,
    negative bench height, duplicate ids within a blast."""
    issues = []
    seen = set()
    for idx, hole in enumerate(holes):
        key = hole.from_hole_id
        if key in seen:
            issues.append({"hole_id": key, "index": idx, "type": "duplicate_hole_id"})
        seen.add(key)

        if not hole.has_toe():
            issues.append({"hole_id": key, "index": idx, "type": "missing_toe"})
            continue
        if tuple(hole.toe) == tuple(hole.collar) or hole.length_calculated <= 0:
            issues.append({"hole_id": key, "index": idx, "type": "zero_length",
                           "value": hole.length_calculated})
        if not 0 <= hole.angle <= 90:
            issues.append({"hole_id": key, "index": idx, "type": "angle_out_of_range", "value": hole.angle})
        if not 0 <= hole.bearing < 360:
            issues.append({"hole_id": key, "index": idx, "type": "bearing_out_of_range", "value": hole.bearing})
        if hole.bench_height is not None and hole.bench_height < 0:
            issues.append({"hole_id": key, "index": idx, "type": "negative_bench_height",
                           "value": hole.bench_height})
    return issues


def validate_surface(surface, tolerance=1e-9):
    """Issues: degenerate (repeated-index or zero-area) triangles, duplicate
    triangles, and vertices no triangle uses."""
    issues = []
    seen = {}
    for idx, tri in enumerate(surface.triangles):
        a, b, c = (int(i) for i in tri)
        if len({a, b, c}) < 3:
            issues.append({"surface": surface.name, "triangle": idx, "type": "repeated_vertex",
                           "indices": (a, b, c)})
            continue
        p0, p1, p2 = surface.vertices[a], surface.vertices[b], surface.vertices[c]
        area = 0.5 * np.linalg.norm(np.cross(p1 - p0, p2 - p0))
        if area <= tolerance:
            issues.append({"surface": surface.name, "triangle": idx, "type": "zero_area",
                           "indices": (a, b, c)})
        key = frozenset((a, b, c))
        if key in seen:
            issues.append({"surface": surface.name, "triangle": idx, "type": "duplicate_triangle",
                           "first": seen[key]})
        else:
            seen[key] = idx

    used = np.zeros(surface.vertex_count, dtype=bool)
    if surface.triangle_count:
        used[surface.triangles.ravel()] = True
    for vid in np.flatnonzero(~used):
        issues.append({"surface": surface.name, "vertex": int(vid), "type": "unused_vertex"})
    return issues
