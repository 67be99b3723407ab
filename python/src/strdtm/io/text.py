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

"""Decoders for the comma-delimited text encodings.

String file layout::

    name,date,,style-reference
    0, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000
    record, Y, X, Z[, D1, D2, ... Dn]
    ...
    0, 0.000, 0.000, 0.000, END

Coordinates are northing first. A record number of 0 closes the current
group; with ``END`` in D1 it closes the file.

Triangle (DTM) file layout::

    name.str,date,,style-reference
    0, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000
    OBJECT, 1,
    TRISOLATION, 1, neighbours=no,validated=true,closed=no
    id, v1, v2, v3, n1, n2, n3,
    ...
    END
"""

import logging
import math

from strdtm.config import resolve_config
from strdtm.errors import FormatError
from strdtm.io.triangles import TriangleDecodeResult
from strdtm.records import StringRecord, Triangle

logger = logging.getLogger(__name__)

HEADER_LINES = 2


def as_text(content):
    if isinstance(content, str):
        return content
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content).decode("utf-8", errors="replace")
    raise FormatError(f"Expected text content, got {type(content).__name__}")


def _parse_record_number(token):
    try:
        return int(token)
    except ValueError:
        return int(float(token))


def parse_line(line):
    """Parse one data line into a ``StringRecord``.

    Raises ValueError when the line has fewer than four fields or a
    non-numeric record number / coordinate.
    """
    parts = [p.strip() for p in line.split(",")]
    if len(parts) < 4:
        raise ValueError(f"expected at least 4 fields, got {len(parts)}")
    record_number = _parse_record_number(parts[0])
    y = float(parts[1])
    x = float(parts[2])
    z = float(parts[3])
    if math.isnan(x) or math.isnan(y) or math.isnan(z):
        raise ValueError("coordinate is NaN")
    descriptions = parts[4:]
    while descriptions and not descriptions[-1]:
        descriptions.pop()
    return StringRecord(record_number, x, y, z, descriptions)


def decode_text_records(content, config=None):
    """Decode a text string file into records.

    Returns ``(records, skipped)`` where separators are kept as record
    number 0 entries and ``skipped`` counts malformed lines.
    """
    config = resolve_config(config)
    text = as_text(content)
    lines = text.splitlines()
    if len(lines) <= HEADER_LINES:
        raise FormatError("Invalid string file: too few lines")

    end_token = config.end_token.upper()
    records = []
    skipped = 0
    for line_no, raw in enumerate(lines[HEADER_LINES:], start=HEADER_LINES + 1):
        line = raw.strip()
        if not line:
            continue
        try:
            rec = parse_line(line)
        except ValueError as exc:
            logger.warning("Skipping line %d (%s): %r", line_no, exc, line)
            skipped += 1
            continue
        if rec.is_separator and rec.descriptions and rec.descriptions[0].upper() == end_token:
            break
        records.append(rec)

    logger.info("Decoded %d text records (%d skipped)", len(records), skipped)
    return records, skipped


def decode_text_vertices(content, config=None):
    """Vertex list of a surface string file, in file order (1-based on disk)."""
    records, _ = decode_text_records(content, config=config)
    return [rec.vertex() for rec in records if not rec.is_separator]


def decode_text_triangles(content, vertex_count=None, config=None):
    """Decode a text triangle file into groups of 0-based triangles.

    Each ``TRISOLATION`` line opens a group; a ``0,`` line while in triangle
    mode closes the current group. When ``vertex_count`` is given, triangles
    referencing a missing vertex are dropped and counted.
    """
    config = resolve_config(config)
    text = as_text(content)
    end_token = config.end_token.upper()

    groups = []
    current = []
    in_triangles = False
    total = 0
    invalid = 0

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        upper = line.upper()
        if "TRISOLATION" in upper:
            if current:
                groups.append(current)
                current = []
            in_triangles = True
            continue
        if line.startswith("0,"):
            if in_triangles and current:
                groups.append(current)
                current = []
            continue
        if upper.startswith("OBJECT") or not in_triangles:
            continue
        if upper.rstrip(",").strip() == end_token:
            break

        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 4:
            continue
        total += 1
        try:
            tri_id = int(parts[0])
            v1, v2, v3 = (int(parts[k]) - 1 for k in (1, 2, 3))
        except ValueError:
            logger.warning("Skipping triangle line %d: %r", line_no, line)
            invalid += 1
            continue
        tri = Triangle(v1, v2, v3, triangle_id=tri_id)
        if min(tri.indices) < 0 or (vertex_count is not None and not tri.in_range(vertex_count)):
            logger.warning("Triangle %d references a missing vertex: %s", tri_id, [i + 1 for i in tri.indices])
            invalid += 1
            continue
        current.append(tri)

    if current:
        groups.append(current)

    result = TriangleDecodeResult(groups, total_count=total, invalid_count=invalid, config=config)
    logger.info(
        "Decoded %d triangles across %d group(s) from text triangle file",
        result.valid_count, len(groups),
    )
    return result
