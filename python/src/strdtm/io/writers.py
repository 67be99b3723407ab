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

"""Text-encoding writers for drill holes, entities and surfaces.

Every writer returns the complete file as bytes. Coordinates are written
northing first and rounded to ``FormatConfig.decimal_places``.

Surfaces are written as a pair: a string file holding each unique vertex
once, and a triangle file whose 1-based indices point into it. Both are built
from one ``collect_vertices`` pass so the indices always agree.
"""

import datetime
import logging
import math

from strdtm.config import resolve_config
from strdtm.datamodel import CIRCLE, LINE, POINT, POLYGON, TEXT
from strdtm.drill.holes import derive_geometry
from strdtm.errors import FormatError
from strdtm.records import Vertex, color_to_record_number

logger = logging.getLogger(__name__)

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
AXIS_LINE = "0, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000"
SEPARATOR_LINE = "0, 0.000, 0.000, 0.000,"
TRISOLATION_FLAGS = "neighbours=no,validated=true,closed=no"
DEFAULT_CIRCLE_RADIUS = 10.0


def date_string(date=None):
    """``dd-Mon-yy``, independent of the process locale."""
    date = date or datetime.date.today()
    return f"{date.day:02d}-{MONTHS[date.month - 1]}-{date.year % 100:02d}"


def format_number(value, decimals=3):
    if value is None:
        value = 0.0
    value = float(value)
    if math.isnan(value):
        value = 0.0
    return f"{value:.{decimals}f}"


def header_lines(name, date=None, config=None):
    config = resolve_config(config)
    return [f"{name},{date_string(date)},,{config.styles_reference}", AXIS_LINE]


def end_line(config=None):
    config = resolve_config(config)
    return f"{SEPARATOR_LINE} {config.end_token}"


def _finish(lines):
    return ("\n".join(lines) + "\n").encode("utf-8")


def _record_line(record_number, vertex, fields, decimals):
    coords = ", ".join(format_number(v, decimals) for v in (vertex.y, vertex.x, vertex.z))
    line = f"{record_number}, {coords}, "
    if fields:
        line += ",".join(str(f) for f in fields)
    return line


# ---------------------------------------------------------------------------
# Drill holes
# ---------------------------------------------------------------------------

def hole_fields(hole, config=None):
    """D1..D14 payload for a collar line."""
    config = resolve_config(config)
    dp = config.decimal_places
    return [
        config.design_label,
        hole.blast_name or "BLASTID",
        str(hole.hole_id).zfill(5),
        format_number(hole.length_calculated, dp),
        format_number((hole.diameter or 0.0) / 1000.0, dp),
        "",
        hole.hole_type,
        format_number(hole.subdrill_amount, dp),
        format_number(hole.bearing, 4),
        format_number(hole.dip, 4),
        hole.method,
        format_number(0.0, dp),
        "",
        format_number(0.0, dp),
    ]


def write_holes(holes, name="blast", date=None, config=None):
    config = resolve_config(config)
    dp = config.decimal_places
    rn = config.hole_record_number
    lines = header_lines(name, date, config)
    written = 0
    for hole in holes:
        if not hole.visible:
            continue
        hole = hole.copy()
        derive_geometry(hole)
        lines.append(_record_line(rn, hole.collar, hole_fields(hole, config), dp))
        if hole.has_toe():
            lines.append(_record_line(rn, hole.toe, None, dp))
        else:
            logger.warning("Hole %s has no toe; writing collar only", hole.from_hole_id)
        lines.append(SEPARATOR_LINE)
        written += 1
    lines.append(end_line(config))
    logger.info("Wrote %d drill holes to %s", written, name)
    return _finish(lines)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

def circle_vertices(center, radius, segments=36):
    """Closed ring of ``segments + 1`` vertices; the last repeats the first."""
    ring = []
    for j in range(segments + 1):
        angle = 2.0 * math.pi * (j % segments) / segments
        ring.append(Vertex(
            center.x + radius * math.cos(angle),
            center.y + radius * math.sin(angle),
            center.z,
        ))
    return ring


def entity_lines(entity, config=None):
    """String-file lines for one entity, separators included."""
    config = resolve_config(config)
    dp = config.decimal_places
    rn = color_to_record_number(entity.color)
    lines = []

    if entity.kind in (POINT, TEXT):
        for i, vertex in enumerate(entity.vertices):
            d2 = (entity.text or "TEXT") if entity.kind == TEXT else i
            lines.append(_record_line(rn, vertex, [entity.name, d2], dp))
            lines.append(SEPARATOR_LINE)
    elif entity.kind in (LINE, POLYGON):
        if len(entity.vertices) < 2:
            logger.warning("Skipping %s %r with fewer than 2 vertices", entity.kind, entity.name)
            return lines
        for i, vertex in enumerate(entity.vertices):
            lines.append(_record_line(rn, vertex, [entity.name, i], dp))
        lines.append(SEPARATOR_LINE)
    elif entity.kind == CIRCLE:
        radius = entity.radius or DEFAULT_CIRCLE_RADIUS
        ring = circle_vertices(entity.vertices[0], radius, config.circle_segments)
        for j, vertex in enumerate(ring):
            lines.append(_record_line(rn, vertex, [entity.name, f"C{j}"], dp))
        lines.append(SEPARATOR_LINE)
    else:
        logger.warning("Skipping entity %r of unknown kind %r", entity.name, entity.kind)
    return lines


def write_entities(entities, name="drawing", date=None, config=None):
    config = resolve_config(config)
    lines = header_lines(name, date, config)
    written = 0
    for entity in entities:
        if not entity.visible:
            continue
        body = entity_lines(entity, config)
        if body:
            written += 1
        lines.extend(body)
    lines.append(end_line(config))
    logger.info("Wrote %d entities to %s", written, name)
    return _finish(lines)


# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------

def vertex_key(vertex, decimals=3):
    return "_".join(format_number(v, decimals) for v in vertex)


def collect_vertices(surfaces, config=None):
    """Deduplicate the vertices of every visible surface's triangles.

    Returns ``(unique_vertices, index_map)`` where ``index_map`` maps a
    rounded coordinate key to the vertex's 1-based index.
    """
    config = resolve_config(config)
    unique = []
    index_map = {}
    for surface in surfaces:
        if not surface.visible:
            continue
        for corners in surface.triangle_vertices():
            for vertex in corners:
                key = vertex_key(vertex, config.decimal_places)
                if key not in index_map:
                    index_map[key] = len(unique) + 1
                    unique.append(vertex)
    return unique, index_map


def write_surface_vertices(unique_vertices, name="surface", date=None, config=None):
    config = resolve_config(config)
    dp = config.decimal_places
    lines = header_lines(name, date, config)
    for vertex in unique_vertices:
        lines.append(_record_line(config.surface_record_number, vertex, None, dp))
    lines.append(end_line(config))
    return _finish(lines)


def write_surface_triangles(surfaces, index_map, name="surface", date=None, config=None):
    config = resolve_config(config)
    dp = config.decimal_places
    lines = header_lines(f"{name}.str", date, config)
    lines.append("OBJECT, 1,")
    trisolation = 0
    for surface in surfaces:
        if not surface.visible:
            continue
        trisolation += 1
        lines.append(f"TRISOLATION, {trisolation}, {TRISOLATION_FLAGS}")
        for tri_id, corners in enumerate(surface.triangle_vertices(), start=1):
            try:
                indices = [index_map[vertex_key(v, dp)] for v in corners]
            except KeyError as exc:
                raise FormatError(
                    f"Surface {surface.name!r} triangle {tri_id} has a vertex missing from the vertex pass"
                ) from exc
            lines.append(f"{tri_id}, {indices[0]}, {indices[1]}, {indices[2]}, 0, 0, 0,")
    lines.append(config.end_token)
    return _finish(lines)


def write_surface_pair(surfaces, name="surface", date=None, config=None):
    """Return ``(string_file_bytes, triangle_file_bytes)`` for ``surfaces``."""
    config = resolve_config(config)
    unique, index_map = collect_vertices(surfaces, config)
    str_bytes = write_surface_vertices(unique, name, date, config)
    dtm_bytes = write_surface_triangles(surfaces, index_map, name, date, config)
    logger.info("Wrote %d unique surface vertices to %s", len(unique), name)
    return str_bytes, dtm_bytes
