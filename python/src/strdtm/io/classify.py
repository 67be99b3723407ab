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

"""Text versus binary classification for string and DTM content."""

from strdtm.io.scan import as_bytes


def content_stats(content, sample_size=1000):
    """Return null, printable and high-byte ratios over the leading sample."""
    data = as_bytes(content)[:sample_size]
    n = len(data)
    if n == 0:
        return {"nulls": 0.0, "printable": 0.0, "high": 0.0, "sampled": 0}
    nulls = data.count(0)
    high = sum(1 for b in data if b > 127)
    printable = sum(1 for b in data if 32 <= b <= 126 or b in (9, 10, 13))
    return {
        "nulls": nulls / n,
        "printable": printable / n,
        "high": high / n,
        "sampled": n,
    }


def is_binary(content, sample_size=1000):
    """Guess whether ``content`` is a binary encoding.

    More than 5% NUL bytes means binary; more than 90% printable ASCII means
    text; more than 30% bytes above 127 means binary; otherwise text. A wrong
    guess is caught downstream by record-level sanity checks.
    """
    stats = content_stats(content, sample_size)
    if stats["sampled"] == 0:
        return False
    if stats["nulls"] > 0.05:
        return True
    if stats["printable"] > 0.9:
        return False
    if stats["high"] > 0.3:
        return True
    return False
