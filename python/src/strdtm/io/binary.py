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

"""Binary string-file decoder.

After a two-line text header the file is a stream of records::

    [tag: 1 or 2 bytes][Y, X, Z: 3 x float64][description][NUL]

with runs of at least eight zero bytes between logical groups. Tag width and
byte order come from ``strdtm.io.layout``. A record whose coordinates fail
the plausibility test is treated as corrupt: the decoder backs up to just
after its tag, scans forward to the next padding run and resumes there, so
one bad record costs at most the rest of its group.
"""

import logging

from strdtm.config import resolve_config
from strdtm.errors import FormatError
from strdtm.io.layout import candidate_starts, decode_prefix, detect_layout
from strdtm.io.scan import as_bytes, find_line_end, read_description, scan_for_separator, skip_zeros
from strdtm.records import StringRecord

logger = logging.getLogger(__name__)

HEADER_LINES = 2


class BinaryDecodeResult:
    def __init__(self, records, layout, validated, header="", resyncs=0, skipped=0):
        self.records = records
        self.layout = layout
        self.validated = validated
        self.header = header
        self.resyncs = resyncs
        self.skipped = skipped

    def vertices(self):
        return [rec.vertex() for rec in self.records if not rec.is_separator]

    def __repr__(self):
        return (
            f"BinaryDecodeResult({len(self.records)} records, layout={tuple(self.layout)}, "
            f"resyncs={self.resyncs})"
        )


def _separator():
    return StringRecord(0, 0.0, 0.0, 0.0)


def _split_description(text):
    text = text.strip()
    if not text:
        return []
    if "," in text:
        return [part.strip() for part in text.split(",")]
    return [text]


def _at_end_marker(data, pos, token):
    end = pos + len(token)
    if data[pos:end] != token:
        return False
    return end >= len(data) or data[end] in (0x00, 0x0A, 0x0D)


def decode_binary_records(content, config=None):
    """Decode a binary string file into records, separators included."""
    config = resolve_config(config)
    data = as_bytes(content)
    if not data:
        raise FormatError("Invalid binary string file: no content")

    header_end = find_line_end(data, HEADER_LINES)
    header = data[:header_end].decode("latin-1").strip()
    logger.debug("Binary string header (%d bytes): %r", header_end, header[:100])

    layout, validated = detect_layout(data, header_end, config)
    end_token = config.end_token.upper().encode("ascii")

    records = []
    resyncs = 0
    skipped = 0
    in_group = False
    n = len(data)
    pos = header_end

    while pos < n:
        pos, run = skip_zeros(data, pos)
        if pos >= n:
            break
        if _at_end_marker(data, pos, end_token):
            logger.debug("End marker at offset %d", pos)
            break
        if n - min(candidate_starts(data, pos, header_end, layout)) < layout.tag_width + 24:
            logger.debug("Ignoring %d trailing bytes at offset %d", n - pos, pos)
            break

        found = decode_prefix(data, pos, header_end, layout, config)

        if found is None:
            skipped += 1
            resyncs += 1
            resume = scan_for_separator(data, pos + layout.tag_width, config.min_zero_run)
            if resume is None:
                logger.warning("Corrupt record at offset %d and no padding run follows; stopping", pos)
                break
            logger.warning("Corrupt record at offset %d; resynchronised at offset %d", pos, resume)
            if in_group:
                records.append(_separator())
                in_group = False
            pos = resume
            continue

        start, prefix = found
        # a tag byte swallowed by the skipper is not padding
        if run - (pos - start) >= config.min_zero_run and in_group:
            records.append(_separator())
            in_group = False
        description, pos = read_description(
            data, prefix.end, max_length=config.max_description, min_run=config.min_zero_run,
        )
        records.append(StringRecord(prefix.tag, prefix.x, prefix.y, prefix.z, _split_description(description)))
        in_group = True

    logger.info(
        "Decoded %d binary records (layout %d-byte/%s, %d resync(s))",
        sum(1 for r in records if not r.is_separator), layout.tag_width, layout.byteorder, resyncs,
    )
    return BinaryDecodeResult(records, layout, validated, header=header, resyncs=resyncs, skipped=skipped)
