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

"""Tests for the text string and triangle decoders and the content classifier."""

import pytest

from strdtm.errors import FormatError
from strdtm.io.classify import content_stats, is_binary
from strdtm.io.grouping import records_to_entities, sniff_content_kind
from strdtm.io.text import decode_text_records, decode_text_triangles, decode_text_vertices, parse_line
from strdtm.records import FileContentKind


HEADER = "test,05-Jan-26,,ssi_styles:survey.ssi\n0, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000\n"


def _text_file(*lines):
    return HEADER + "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def test_plain_text_is_not_binary():
    assert not is_binary(_text_file("1, 10.0, 20.0, 5.0"))


def test_many_nulls_is_binary():
    assert is_binary(b"header\n" + b"\x00" * 20 + b"\x01" * 20)


def test_high_bytes_without_nulls_is_binary():
    assert is_binary(bytes([200]) * 100 + b"a" * 50)


def test_empty_content_defaults_to_text():
    assert not is_binary(b"")
    assert content_stats(b"")["sampled"] == 0


def test_classifier_only_samples_leading_bytes():
    data = b"a" * 1000 + b"\x00" * 1000
    assert not is_binary(data)
    assert is_binary(data, sample_size=2000)


# ---------------------------------------------------------------------------
# Line parsing
# ---------------------------------------------------------------------------

def test_parse_line_is_northing_first():
    rec = parse_line("7, 10.0, 20.0, 5.0, road, edge,,")
    assert rec.record_number == 7
    assert (rec.x, rec.y, rec.z) == (20.0, 10.0, 5.0)
    assert rec.descriptions == ["road", "edge"]


def test_parse_line_rejects_short_or_bad_lines():
    with pytest.raises(ValueError):
        parse_line("1, 2.0, 3.0")
    with pytest.raises(ValueError):
        parse_line("1, north, 3.0, 4.0")


# ---------------------------------------------------------------------------
# Record decoding
# ---------------------------------------------------------------------------

def test_decode_stops_at_end_sentinel():
    content = _text_file(
        "1, 10.0, 20.0, 5.0",
        "0, 0.000, 0.000, 0.000, end",
        "1, 99.0, 99.0, 99.0",
    )
    records, skipped = decode_text_records(content)
    assert len(records) == 1
    assert skipped == 0


def test_decode_skips_malformed_lines(caplog):
    content = _text_file(
        "1, 10.0, 20.0, 5.0",
        "1, ten, 20.0, 5.0",
        "1, 11.0, 20.0",
        "1, 12.0, 20.0, 5.0",
        "0, 0.000, 0.000, 0.000, END",
    )
    with caplog.at_level("WARNING"):
        records, skipped = decode_text_records(content)
    assert len(records) == 2
    assert skipped == 2
    assert "Skipping line 4" in caplog.text


def test_decode_rejects_header_only_content():
    with pytest.raises(FormatError, match="too few lines"):
        decode_text_records(HEADER)


def test_decode_accepts_bytes():
    records, _ = decode_text_records(_text_file("1, 10.0, 20.0, 5.0").encode("utf-8"))
    assert records[0].y == 10.0


def test_decode_text_vertices_drops_separators():
    content = _text_file(
        "32000, 1.0, 2.0, 3.0, ",
        "0, 0.000, 0.000, 0.000,",
        "32000, 4.0, 5.0, 6.0, ",
        "0, 0.000, 0.000, 0.000, END",
    )
    assert decode_text_vertices(content) == [(2.0, 1.0, 3.0), (5.0, 4.0, 6.0)]


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def test_groups_split_on_separator_record_number_and_label():
    content = _text_file(
        "1, 0.0, 0.0, 0.0, a",
        "1, 0.0, 1.0, 0.0, a",
        "2, 0.0, 2.0, 0.0, a",
        "2, 0.0, 3.0, 0.0, b",
        "2, 0.0, 4.0, 0.0, b",
        "0, 0.000, 0.000, 0.000,",
        "2, 5.0, 5.0, 0.0, b",
        "0, 0.000, 0.000, 0.000, END",
    )
    records, _ = decode_text_records(content)
    entities = records_to_entities(records)
    assert [(e.name, e.kind, len(e)) for e in entities] == [
        ("a_1", "line", 2),
        ("a_2", "point", 1),
        ("b_3", "line", 2),
        ("b_4", "point", 1),
    ]


def test_closed_group_is_polygon():
    content = _text_file(
        "5, 0.0, 0.0, 0.0",
        "5, 0.0, 10.0, 0.0",
        "5, 10.0, 10.0, 0.0",
        "5, 0.0, 0.0, 0.0",
        "0, 0.000, 0.000, 0.000, END",
    )
    records, _ = decode_text_records(content)
    (entity,) = records_to_entities(records)
    assert entity.kind == "polygon"
    assert entity.name == "str_poly_1"
    assert entity.record_number == 5


def test_sniff_detects_drill_holes(data_dir):
    records, _ = decode_text_records((data_dir / "blast_sample.str").read_text())
    assert sniff_content_kind(records) is FileContentKind.DRILL_HOLE_SET


def test_sniff_matches_design_identifier_substring():
    records, _ = decode_text_records(_text_file("1, 10.0, 20.0, 5.0, DrillBlast"))
    assert sniff_content_kind(records) is FileContentKind.DRILL_HOLE_SET
    records, _ = decode_text_records(_text_file("1, 10.0, 20.0, 5.0, survey"))
    assert sniff_content_kind(records) is FileContentKind.ANNOTATION


# ---------------------------------------------------------------------------
# Text triangle files
# ---------------------------------------------------------------------------

DTM_TEXT = """pit.str,05-Jan-26,,ssi_styles:survey.ssi
0, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000
OBJECT, 1,
TRISOLATION, 1, neighbours=no,validated=true,closed=no
1, 1, 2, 3, 0, 0, 0,
2, 1, 3, 4, 0, 0, 0,
TRISOLATION, 2, neighbours=no,validated=true,closed=no
1, 4, 5, 6, 0, 0, 0,
END
"""


def test_text_triangles_group_by_trisolation():
    result = decode_text_triangles(DTM_TEXT)
    assert len(result.groups) == 2
    assert [t.indices for t in result.groups[0]] == [(0, 1, 2), (0, 2, 3)]
    assert result.groups[1][0].indices == (3, 4, 5)
    assert result.valid_count == 3
    assert not result.degraded


def test_text_triangles_drop_missing_vertices():
    result = decode_text_triangles(DTM_TEXT, vertex_count=5)
    assert result.total_count == 3
    assert result.invalid_count == 1
    assert len(result.groups) == 1
    assert result.corruption_ratio == pytest.approx(1 / 3)
    assert result.degraded


def test_zero_line_closes_triangle_group():
    content = DTM_TEXT.replace("2, 1, 3, 4, 0, 0, 0,\n", "0,\n2, 1, 3, 4, 0, 0, 0,\n")
    result = decode_text_triangles(content)
    assert [len(g) for g in result.groups] == [1, 1, 1]
