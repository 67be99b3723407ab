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

"""Byte-cursor primitives shared by the binary decoders.

Every function here is pure: it takes a buffer and a cursor and returns a
new cursor (or a value), never mutating shared state. Decoders compose them
to walk a buffer and to recover from misaligned or corrupt records.
"""

import struct

FLOAT64 = {
    "big": struct.Struct(">d"),
    "little": struct.Struct("<d"),
}
TRIPLE64 = {
    "big": struct.Struct(">ddd"),
    "little": struct.Struct("<ddd"),
}
INT32_BE = struct.Struct(">i")


def as_bytes(content):
    """Return ``content`` as bytes; ``str`` is taken as Latin-1 code points."""
    if isinstance(content, bytes):
        return content
    if isinstance(content, (bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        return content.encode("latin-1", errors="replace")
    raise TypeError(f"Expected bytes or str, got {type(content).__name__}")


def skip_zeros(data, pos, end=None):
    """Return ``(new_pos, run_length)`` after the zero bytes starting at ``pos``."""
    end = len(data) if end is None else end
    start = pos
    while pos < end and data[pos] == 0:
        pos += 1
    return pos, pos - start


def scan_for_separator(data, pos, min_run=8):
    """Scan forward from ``pos`` for a run of at least ``min_run`` zero bytes.

    Returns the offset just past the run (the first non-zero byte after it,
    or ``len(data)``), or None when no such run exists. The result is always
    greater than ``pos``, so a caller that resumes there makes progress.
    """
    run = 0
    n = len(data)
    i = pos
    while i < n:
        if data[i] == 0:
            run += 1
        else:
            if run >= min_run:
                return i
            run = 0
        i += 1
    if run >= min_run:
        return n
    return None


def find_line_end(data, count, start=0, limit=500):
    """Offset just after the ``count``-th line feed within ``limit`` bytes.

    Falls back to just after the last line feed seen, or ``start`` when the
    window contains none.
    """
    seen = 0
    last = -1
    stop = min(len(data), start + limit)
    for i in range(start, stop):
        if data[i] == 0x0A:
            seen += 1
            last = i
            if seen == count:
                return i + 1
    return last + 1 if last >= 0 else start


def read_tag(data, pos, width, byteorder):
    if pos + width > len(data):
        return None
    if width == 1:
        return data[pos]
    return int.from_bytes(data[pos:pos + width], byteorder)


def read_triple(data, pos, byteorder):
    if pos + 24 > len(data):
        return None
    return TRIPLE64[byteorder].unpack_from(data, pos)


def read_int32s(data, pos, count):
    if pos + 4 * count > len(data):
        return None
    return struct.unpack_from(f">{count}i", data, pos)


def is_printable(byte):
    return 0x20 <= byte <= 0x7E


def read_description(data, pos, max_length=500, min_run=8):
    """Read a printable-ASCII description starting at ``pos``.

    Stops at a NUL (consumed unless it opens a ``min_run`` zero run, which is
    left for the padding skipper), at CR/LF (consumed), or at any other
    non-printable byte (left in place). Returns ``(text, new_pos)``.
    """
    chars = []
    n = len(data)
    while pos < n and len(chars) < max_length:
        byte = data[pos]
        if byte == 0:
            if data[pos:pos + min_run] == bytes(min(min_run, n - pos)):
                break
            pos += 1
            break
        if is_printable(byte):
            chars.append(chr(byte))
            pos += 1
            continue
        if byte in (0x0D, 0x0A):
            pos += 1
            if byte == 0x0D and pos < n and data[pos] == 0x0A:
                pos += 1
        break
    return "".join(chars), pos
