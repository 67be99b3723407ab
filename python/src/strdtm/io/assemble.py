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

"""Join a decoded vertex list with triangle groups into surfaces."""

import logging

from strdtm.records import Surface

logger = logging.getLogger(__name__)


def _compact(vertices, triangles):
    """Remap a group's triangles onto only the vertices it references.

    Vertices keep first-seen order. Returns ``(vertices, triangles, dropped)``.
    """
    remap = {}
    out_vertices = []
    out_triangles = []
    dropped = 0
    n = len(vertices)
    for tri in triangles:
        if not tri.in_range(n):
            dropped += 1
            continue
        row = []
        for idx in tri.indices:
            if idx not in remap:
                remap[idx] = len(out_vertices)
                out_vertices.append(tuple(vertices[idx]))
            row.append(remap[idx])
        out_triangles.append(row)
    return out_vertices, out_triangles, dropped


def assemble_surfaces(vertices, groups, name="surface"):
    """Build one ``Surface`` per triangle group.

    Groups that end up with no valid triangle are dropped. Returns
    ``(surfaces, dropped_triangles)``.
    """
    groups = [g for g in groups if g]
    surfaces = []
    dropped = 0
    for part, group in enumerate(groups, start=1):
        surf_vertices, surf_triangles, bad = _compact(vertices, group)
        dropped += bad
        if not surf_triangles:
            logger.debug("Triangle group %d has no valid triangles; dropped", part)
            continue
        surf_name = name if len(groups) == 1 else f"{name}_part{part}"
        surfaces.append(Surface(surf_vertices, surf_triangles, name=surf_name))
    if dropped:
        logger.warning("Dropped %d triangles referencing vertices outside the vertex list", dropped)
    logger.info("Assembled %d surface(s) from %d vertices", len(surfaces), len(vertices))
    return surfaces, dropped
