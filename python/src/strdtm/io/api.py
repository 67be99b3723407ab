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

"""Entry points used by the host application.

The host hands over whole buffers it has already read and gets plain
records back; it owns rendering, dialogs and map projection.
"""

import logging

from strdtm.config import resolve_config
from strdtm.errors import FormatError
from strdtm.io.assemble import assemble_surfaces
from strdtm.io.binary import decode_binary_records
from strdtm.io.classify import is_binary
from strdtm.io.grouping import records_to_entities, records_to_holes, sniff_content_kind
from strdtm.io.scan import as_bytes
from strdtm.io.text import decode_text_records, decode_text_triangles, decode_text_vertices
from strdtm.io.triangles import decode_binary_triangles
from strdtm.io import writers
from strdtm.records import FileContentKind, NamingContext

logger = logging.getLogger(__name__)


class ParseResult:
    def __init__(self, kind, entities=None, drill_holes=None, records=None, binary=False, layout=None, skipped=0, resyncs=0):
        self.kind = kind
        self.entities = entities or []
        self.drill_holes = drill_holes or []
        self.records = records or []
        self.binary = binary
        self.layout = layout
        self.skipped = skipped
        self.resyncs = resyncs

    @property
    def vertices(self):
        return [rec.vertex() for rec in self.records if not rec.is_separator]

    def __repr__(self):
        return (
            f"ParseResult({self.kind.value}, entities={len(self.entities)}, "
            f"drill_holes={len(self.drill_holes)}, binary={self.binary})"
        )


class SurfaceParseResult:
    def __init__(self, surfaces, vertices, triangle_result, warnings=None):
        self.surfaces = surfaces
        self.vertices = vertices
        self.triangle_result = triangle_result
        self.warnings = list(warnings or [])

    @property
    def degraded(self):
        return self.triangle_result.degraded

    def __repr__(self):
        return f"SurfaceParseResult({len(self.surfaces)} surface(s), degraded={self.degraded})"


def _as_buffer(content, what):
    if content is None:
        raise FormatError(f"Missing {what}")
    try:
        data = as_bytes(content)
    except TypeError as exc:
        raise FormatError(f"Unsupported {what}: {exc}") from exc
    if not data:
        raise FormatError(f"Empty {what}")
    return data


def parse(buffer, config=None):
    """Decode a string file (text or binary) into entities or drill holes."""
    config = resolve_config(config)
    data = _as_buffer(buffer, "string file content")
    binary = is_binary(data, config.sample_size)

    layout = None
    resyncs = 0
    if binary:
        decoded = decode_binary_records(data, config)
        records = decoded.records
        skipped = decoded.skipped
        layout = decoded.layout
        resyncs = decoded.resyncs
    else:
        records, skipped = decode_text_records(buffer if isinstance(buffer, str) else data, config)

    kind = sniff_content_kind(records, config)
    result = ParseResult(kind, records=records, binary=binary, layout=layout, skipped=skipped, resyncs=resyncs)
    if kind is FileContentKind.DRILL_HOLE_SET:
        result.drill_holes = records_to_holes(records, config)
        logger.info("Parsed %d drill holes (%s)", len(result.drill_holes), "binary" if binary else "text")
    else:
        result.entities = records_to_entities(records, NamingContext(), config)
        logger.info("Parsed %d entities (%s)", len(result.entities), "binary" if binary else "text")
    return result


def _surface_vertices(data, config):
    if is_binary(data, config.sample_size):
        return decode_binary_records(data, config).vertices()
    return decode_text_vertices(data, config)


def _surface_triangles(data, vertex_count, config):
    if is_binary(data, config.sample_size):
        return decode_binary_triangles(data, vertex_count=vertex_count, config=config)
    return decode_text_triangles(data, vertex_count=vertex_count, config=config)


def degraded_warning(triangle_result):
    return (
        f"Triangle file is degraded: {triangle_result.invalid_count} of "
        f"{triangle_result.total_count} triangles ({100.0 * triangle_result.corruption_ratio:.0f}%) "
        f"were invalid. {triangle_result.valid_count} valid triangles were recovered."
    )


def parse_surface(string_buffer, triangle_buffer, name="surface", config=None):
    """Decode a vertex string file and its triangle companion into surfaces."""
    config = resolve_config(config)
    str_data = _as_buffer(string_buffer, "string (vertex) file for surface import")
    tri_data = _as_buffer(triangle_buffer, "triangle file for surface import")

    vertices = _surface_vertices(str_data, config)
    if not vertices:
        raise FormatError("Surface string file contains no vertices")
    tri_result = _surface_triangles(tri_data, len(vertices), config)
    surfaces, _ = assemble_surfaces(vertices, tri_result.groups, name=name)
    if not surfaces:
        raise FormatError(f"No valid triangles decoded from triangle file ({tri_result.total_count} read)")

    warnings = []
    if tri_result.degraded:
        warnings.append(degraded_warning(tri_result))
    elif tri_result.invalid_count:
        warnings.append(
            f"{tri_result.invalid_count} triangles referencing missing vertices were skipped."
        )
    result = SurfaceParseResult(surfaces, vertices, tri_result, warnings)
    logger.info(
        "Parsed %d surface(s) with %d triangles from %d vertices",
        len(surfaces), tri_result.valid_count, len(vertices),
    )
    return result


def write(drill_holes=None, entities=None, surfaces=None, name=None, date=None, config=None):
    """Encode exactly one collection as a text string file.

    For surfaces this is the vertex file only; use ``write_surface_pair`` to
    get the triangle file as well.
    """
    config = resolve_config(config)
    given = [c for c in (drill_holes, entities, surfaces) if c is not None]
    if len(given) != 1:
        raise FormatError("write() takes exactly one of drill_holes, entities or surfaces")
    collection = list(given[0])
    if not collection:
        raise FormatError("Nothing to write")

    if drill_holes is not None:
        return writers.write_holes(collection, name or "blast", date, config)
    if entities is not None:
        return writers.write_entities(collection, name or "drawing", date, config)
    str_bytes, _ = write_surface_pair(collection, name or "surface", date, config)
    return str_bytes


def write_surface_pair(surfaces, name="surface", date=None, config=None):
    surfaces = list(surfaces)
    if not surfaces:
        raise FormatError("Nothing to write")
    return writers.write_surface_pair(surfaces, name, date, config)
