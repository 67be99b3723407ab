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

"""Binary triangle-index (DTM) decoder.

Triangle records are big-endian int32 fields at a fixed stride::

    [record type: 4 bytes, optional][id][v1][v2][v3][n1][n2][n3][padding]

Vertex indices are 1-based into the companion string file. Two header shapes
are known: a short text header followed directly by triangle records, and a
header followed by an embedded vertex block closed by an ``END`` marker and a
metadata line. In both cases the start of triangle data is found by scanning
for triangle 1 with plausible indices, confirmed by triangle 2 one stride on.

The schema is inferred from sample files, so decoding is best effort: bad
triangles are dropped and counted, and an import with too many of them is
flagged as degraded rather than rejected.
"""

import logging

from strdtm.config import resolve_config
from strdtm.errors import FormatError
from strdtm.io.scan import as_bytes, find_line_end, is_printable, read_int32s, skip_zeros
from strdtm.records import Triangle

logger = logging.getLogger(__name__)

END_MARKER = b"END"
SCAN_WINDOW = 512
RECORD_FIELDS = 7


class TriangleDecodeResult:
    def __init__(self, groups, total_count=0, invalid_count=0, config=None, data_offset=None, tagged=False):
        self.config = resolve_config(config)
        self.groups = [list(group) for group in groups if group]
        self.total_count = total_count
        self.invalid_count = invalid_count
        self.data_offset = data_offset
        self.tagged = tagged

    @property
    def triangles(self):
        return [tri for group in self.groups for tri in group]

    @property
    def valid_count(self):
        return sum(len(group) for group in self.groups)

    @property
    def corruption_ratio(self):
        if self.total_count == 0:
            return 0.0
        return self.invalid_count / self.total_count

    @property
    def degraded(self):
        return self.corruption_ratio > self.config.corruption_threshold

    def __repr__(self):
        return (
            f"TriangleDecodeResult({self.valid_count} valid of {self.total_count}, "
            f"{len(self.groups)} group(s), ratio={self.corruption_ratio:.3f})"
        )


def _plausible_first(fields, triangle_id, config):
    if fields is None or fields[0] != triangle_id:
        return False
    return all(0 < v < config.max_triangle_index for v in fields[1:4])


def find_triangle_start(data, start, stop=None, config=None):
    """Offset of triangle 1's id field in ``data[start:stop]``, or None.

    Returns ``(offset, tagged)``; ``tagged`` reports whether a record-type
    word precedes the id. Decoding is the same either way since the stride
    is fixed.
    """
    config = resolve_config(config)
    stride = config.triangle_stride
    stop = min(len(data) - 16, start + SCAN_WINDOW if stop is None else stop)
    for pos in range(start, max(start, stop)):
        first = read_int32s(data, pos, 4)
        if not _plausible_first(first, 1, config):
            continue
        second = read_int32s(data, pos + stride, 4)
        if second is not None and not _plausible_first(second, 2, config):
            continue
        tag_word = read_int32s(data, pos - 4, 1) if pos - 4 >= start else None
        tagged = tag_word is not None and 0 <= tag_word[0] < 256
        return pos, tagged
    return None


def _after_end_marker(data):
    idx = data.find(END_MARKER)
    if idx < 0:
        return None
    pos, _ = skip_zeros(data, idx + len(END_MARKER))
    while pos < len(data) and (is_printable(data[pos]) or data[pos] in (0x0A, 0x0D)):
        pos += 1
    return pos


def locate_triangle_data(data, config=None):
    """Find where triangle records begin under either known header shape."""
    config = resolve_config(config)
    header_end = find_line_end(data, 1)
    found = find_triangle_start(data, header_end, config=config)
    if found is not None:
        logger.debug("Triangle data at offset %d (no embedded vertex block)", found[0])
        return found
    after_end = _after_end_marker(data)
    if after_end is not None:
        found = find_triangle_start(data, max(0, after_end - 4), config=config)
        if found is not None:
            logger.debug("Triangle data at offset %d (after END marker)", found[0])
            return found
    return None


def decode_binary_triangles(content, vertex_count=None, config=None):
    """Decode binary triangle records into 0-based ``Triangle`` groups.

    A record with id 0 closes the current group. When ``vertex_count`` is
    given, triangles with an index outside ``[0, vertex_count)`` are dropped
    and counted as invalid.

    Ids run on by one within a group. Decoding stops at an ``END`` marker or
    at an id that breaks the run, unless the next record picks the run up
    again, in which case the odd record is counted as invalid.
    """
    config = resolve_config(config)
    data = as_bytes(content)
    if not data:
        raise FormatError("Invalid binary triangle file: no content")

    located = locate_triangle_data(data, config)
    if located is None:
        logger.warning("Could not locate triangle records in binary triangle file")
        return TriangleDecodeResult([], config=config)
    offset, tagged = located

    groups = []
    current = []
    total = 0
    invalid = 0
    expected = None
    pos = offset
    while True:
        if data.startswith(END_MARKER, pos - 4 if tagged else pos):
            logger.debug("End marker after triangle records at offset %d", pos)
            break
        fields = read_int32s(data, pos, RECORD_FIELDS)
        if fields is None:
            break
        pos += config.triangle_stride
        tri_id = fields[0]
        if tri_id == 0:
            if current:
                groups.append(current)
                current = []
            expected = None
            continue
        if expected is not None and tri_id not in (expected, 1):
            ahead = read_int32s(data, pos, 1)
            if ahead is None or ahead[0] != expected + 1:
                logger.debug(
                    "Triangle records end at offset %d (id %d, expected %d)",
                    pos - config.triangle_stride, tri_id, expected,
                )
                break
            # damaged id inside the sequence
            total += 1
            invalid += 1
            expected += 1
            continue
        expected = tri_id + 1
        total += 1
        tri = Triangle(fields[1] - 1, fields[2] - 1, fields[3] - 1, triangle_id=tri_id)
        if min(tri.indices) < 0 or (vertex_count is not None and not tri.in_range(vertex_count)):
            invalid += 1
            logger.debug(
                "Binary triangle %d has invalid vertex index: %s (vertices=%s)",
                tri_id, [i + 1 for i in tri.indices], vertex_count,
            )
            continue
        current.append(tri)
    if current:
        groups.append(current)

    result = TriangleDecodeResult(
        groups, total_count=total, invalid_count=invalid, config=config, data_offset=offset, tagged=tagged,
    )
    if invalid:
        logger.warning("Dropped %d of %d binary triangles with invalid vertex indices", invalid, total)
    if result.degraded:
        logger.warning(
            "Binary triangle file is degraded: %.0f%% invalid, %d valid triangles recovered",
            100.0 * result.corruption_ratio, result.valid_count,
        )
    logger.info("Decoded %d triangles from binary triangle file", result.valid_count)
    return result
