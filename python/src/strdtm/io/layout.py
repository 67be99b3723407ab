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

"""Binary string-file layout detection.

Producers disagree on two things and declare neither: the record tag is one
or two bytes wide, and the float64 coordinates are big- or little-endian.
Each of the four combinations is a hypothesis; the first one whose leading
record decodes to a plausible tag and plausible survey coordinates wins.
"""

import logging
import math
from collections import namedtuple

from strdtm.config import resolve_config
from strdtm.io.scan import read_description, read_tag, read_triple, skip_zeros

logger = logging.getLogger(__name__)

Layout = namedtuple("Layout", ["tag_width", "byteorder"])
DecodedPrefix = namedtuple("DecodedPrefix", ["tag", "y", "x", "z", "end"])

HYPOTHESES = [
    Layout(1, "big"),
    Layout(1, "little"),
    Layout(2, "big"),
    Layout(2, "little"),
]
DEFAULT_LAYOUT = Layout(2, "big")
LOOKAHEAD_RECORDS = 16


def plausible_value(value, config):
    if not math.isfinite(value):
        return False
    magnitude = abs(value)
    if magnitude >= config.max_magnitude:
        return False
    # denormalised or near-zero garbage from a misaligned read
    if 0 < magnitude < config.min_magnitude:
        return False
    return True


def plausible_coordinates(y, x, z, config=None):
    """Finite, bounded, and the two horizontal values of comparable magnitude."""
    config = resolve_config(config)
    if not all(plausible_value(v, config) for v in (y, x, z)):
        return False
    small = min(abs(y), abs(x))
    large = max(abs(y), abs(x))
    return large <= config.max_ratio * max(small, 1.0)


def plausible_tag(tag, config=None):
    config = resolve_config(config)
    return tag is not None and 1 <= tag <= config.max_tag


def try_hypothesis(data, pos, layout, config=None):
    """Decode one record at ``pos`` under ``layout``; None if implausible."""
    config = resolve_config(config)
    tag = read_tag(data, pos, layout.tag_width, layout.byteorder)
    if not plausible_tag(tag, config):
        return None
    coords = read_triple(data, pos + layout.tag_width, layout.byteorder)
    if coords is None:
        return None
    y, x, z = coords
    if not plausible_coordinates(y, x, z, config):
        return None
    return DecodedPrefix(tag, y, x, z, pos + layout.tag_width + 24)


def candidate_starts(data, pos, floor, layout):
    """Offsets to try for a record whose first non-zero byte is at ``pos``.

    A two-byte tag below 256 (big-endian) or a multiple of 256 (little-endian)
    has a zero byte that the padding skipper already swallowed.
    """
    if layout.tag_width != 2 or pos - 1 < floor or data[pos - 1] != 0:
        return [pos]
    if layout.byteorder == "big":
        return [pos - 1, pos]
    return [pos, pos - 1]


def decode_prefix(data, pos, floor, layout, config=None):
    """First record at ``pos`` under ``layout``, allowing a swallowed tag byte."""
    for start in candidate_starts(data, pos, floor, layout):
        prefix = try_hypothesis(data, start, layout, config)
        if prefix is not None:
            return start, prefix
    return None


def count_decodable(data, pos, floor, layout, config=None, limit=LOOKAHEAD_RECORDS):
    """Number of consecutive records from ``pos`` that decode under ``layout``."""
    config = resolve_config(config)
    count = 0
    while count < limit:
        pos, _ = skip_zeros(data, pos)
        if pos >= len(data):
            break
        found = decode_prefix(data, pos, floor, layout, config)
        if found is None:
            break
        _, pos = read_description(
            data, found[1].end, max_length=config.max_description, min_run=config.min_zero_run,
        )
        count += 1
    return count


def _accept(layout, pos, prefix):
    logger.debug(
        "Layout %d-byte tag / %s-endian accepted at offset %d (tag=%d, y=%r, x=%r, z=%r)",
        layout.tag_width, layout.byteorder, pos, prefix.tag, prefix.y, prefix.x, prefix.z,
    )
    return layout, True


def detect_layout(data, start=0, config=None):
    """Return ``(layout, validated)`` for the binary records from ``start``.

    ``validated`` is False when no hypothesis fits and the default
    (two-byte tag, big-endian) is returned for record-level checks to judge.

    A zero run shorter than a padding run right before the first record is
    the zero byte of a two-byte tag, so the two-byte hypotheses are tried one
    byte earlier first. After a padding run the same zero byte may still
    belong to the tag; a one-byte hypothesis then has to decode at least as
    many of the following records as its two-byte counterpart.
    """
    config = resolve_config(config)
    pos, run = skip_zeros(data, start)
    if 0 < run < config.min_zero_run:
        for layout in HYPOTHESES:
            if layout.tag_width != 2:
                continue
            prefix = try_hypothesis(data, pos - 1, layout, config)
            if prefix is not None:
                return _accept(layout, pos - 1, prefix)
    for layout in HYPOTHESES:
        prefix = try_hypothesis(data, pos, layout, config)
        if prefix is None:
            logger.debug("Layout %d-byte tag / %s-endian rejected at offset %d", layout.tag_width, layout.byteorder, pos)
            continue
        if layout.tag_width == 1 and run:
            wider = Layout(2, layout.byteorder)
            narrow_count = count_decodable(data, pos, start, layout, config)
            wide_count = count_decodable(data, pos, start, wider, config)
            if wide_count > narrow_count:
                logger.debug(
                    "Two-byte tags decode %d records against %d for one-byte tags",
                    wide_count, narrow_count,
                )
                return _accept(wider, pos, prefix)
        return _accept(layout, pos, prefix)
    logger.warning("No binary layout hypothesis validated; defaulting to 2-byte tag, big-endian")
    return DEFAULT_LAYOUT, False
