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

"""Tests for the text writers."""

import datetime

import pytest

from strdtm.config import FormatConfig
from strdtm.drill.holes import DrillHole
from strdtm.errors import FormatError
from strdtm.io import writers
from strdtm.io.grouping import records_to_entities, records_to_holes
from strdtm.io.text import decode_text_records, decode_text_triangles, decode_text_vertices
from strdtm.records import Entity, Surface

DATE = datetime.date(2026, 1, 5)


def _lines(data):
    return data.decode("utf-8").splitlines()


def _square(name="pit", z=0.0, visible=True):
    return Surface(
        [(0.0, 0.0, z), (10.0, 0.0, z), (10.0, 10.0, z + 1.0), (0.0, 10.0, z + 1.0)],
        [(0, 1, 2), (0, 2, 3)],
        name=name,
        visible=visible,
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def test_date_string_format():
    assert writers.date_string(DATE) == "05-Jan-26"
    assert writers.date_string(datetime.date(2031, 12, 31)) == "31-Dec-31"


def test_format_number():
    assert writers.format_number(1.23456) == "1.235"
    assert writers.format_number(2, 4) == "2.0000"
    assert writers.format_number(None) == "0.000"
    assert writers.format_number(float("nan")) == "0.000"


def test_header_lines():
    lines = writers.header_lines("blast", DATE)
    assert lines[0] == "blast,05-Jan-26,,ssi_styles:survey.ssi"
    assert lines[1].split(",")[0] == "0"
    assert len(lines[1].split(",")) == 7


# ---------------------------------------------------------------------------
# Drill holes
# ---------------------------------------------------------------------------

def _hole(hole_id="1", visible=True, toe=(100.0, 200.0, 38.0)):
    hole = DrillHole(
        collar=(100.0, 200.0, 50.0),
        hole_id=hole_id,
        blast_name="B12",
        toe=toe,
        diameter=115.0,
        subdrill_amount=1.5,
        hole_type="Rig-2",
    )
    hole.visible = visible
    return hole


def test_write_holes_collar_and_toe_lines():
    lines = _lines(writers.write_holes([_hole()], name="blast", date=DATE))
    assert lines[2] == (
        "1, 200.000, 100.000, 50.000, "
        "DrillBlast1.1,B12,00001,12.000,0.115,,Rig-2,1.500,0.0000,-90.0000,METHOD,0.000,,0.000"
    )
    assert lines[3] == "1, 200.000, 100.000, 38.000, "
    assert lines[4] == "0, 0.000, 0.000, 0.000,"
    assert lines[-1] == "0, 0.000, 0.000, 0.000, END"


def test_write_holes_skips_invisible_and_does_not_mutate():
    hole = _hole()
    lines = _lines(writers.write_holes([hole, _hole("2", visible=False)], date=DATE))
    assert len(lines) == 6
    assert hole.bench_height is None


def test_write_holes_without_toe_writes_collar_only():
    lines = _lines(writers.write_holes([_hole(toe=None)], date=DATE))
    assert len(lines) == 5
    assert lines[3] == "0, 0.000, 0.000, 0.000,"


def test_holes_round_trip():
    data = writers.write_holes([_hole("7"), _hole("12", toe=(105.0, 200.0, 38.0))], date=DATE)
    records, _ = decode_text_records(data)
    holes = records_to_holes(records)
    assert [h.hole_id for h in holes] == ["7", "12"]
    assert holes[0].blast_name == "B12"
    assert holes[0].diameter == pytest.approx(115.0)
    assert holes[0].subdrill_amount == pytest.approx(1.5)
    assert holes[0].bench_height == pytest.approx(10.5)
    assert holes[1].bearing == pytest.approx(90.0)
    assert holes[1].length_calculated == pytest.approx((25.0 + 144.0) ** 0.5, abs=1e-3)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

def test_write_entities_round_trip_kinds():
    entities = [
        Entity("road", "line", [(0.0, 0.0, 0.0), (10.0, 0.0, 0.0), (10.0, 10.0, 0.0)], color="#FF0000"),
        Entity("pad", "polygon", [(0.0, 0.0, 1.0), (5.0, 0.0, 1.0), (5.0, 5.0, 1.0), (0.0, 0.0, 1.0)], color="#00FF00"),
        Entity("stn", "point", [(1.0, 2.0, 3.0)]),
        Entity("hidden", "line", [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0)], visible=False),
    ]
    data = writers.write_entities(entities, name="drawing", date=DATE)
    records, skipped = decode_text_records(data)
    assert skipped == 0
    decoded = records_to_entities(records)
    assert [(e.name, e.kind, len(e)) for e in decoded] == [
        ("road_1", "line", 3),
        ("pad_2", "polygon", 4),
        ("stn_3", "point", 1),
    ]
    assert decoded[0].record_number == 1
    assert decoded[1].record_number == 2


def test_polygon_gets_no_extra_closing_vertex():
    entity = Entity("open", "polygon", [(0.0, 0.0, 0.0), (5.0, 0.0, 0.0), (5.0, 5.0, 0.0)])
    lines = writers.entity_lines(entity)
    assert len(lines) == 4


def test_text_entity_uses_label_fields():
    entity = Entity("note", "text", [(1.0, 2.0, 3.0)], text="Bench 12")
    lines = writers.entity_lines(entity)
    assert lines[0].endswith("note,Bench 12")
    assert lines[1] == "0, 0.000, 0.000, 0.000,"


def test_circle_is_closed_ring():
    entity = Entity("ring", "circle", [(100.0, 200.0, 5.0)], radius=2.0)
    data = writers.write_entities([entity], date=DATE)
    records, _ = decode_text_records(data)
    (decoded,) = records_to_entities(records)
    assert decoded.kind == "polygon"
    assert len(decoded) == 37
    assert decoded.vertices[0] == pytest.approx((102.0, 200.0, 5.0))
    assert decoded.vertices[9] == pytest.approx((100.0, 202.0, 5.0))


# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------

def test_collect_vertices_deduplicates_shared_corners():
    unique, index_map = writers.collect_vertices([_square()])
    assert len(unique) == 4
    assert index_map["0.000_0.000_0.000"] == 1
    assert index_map["0.000_10.000_1.000"] == 4


def test_dedup_uses_rounded_key():
    a = Surface([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)], [(0, 1, 2)])
    b = Surface([(0.0001, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)], [(0, 1, 2)])
    unique, _ = writers.collect_vertices([a, b])
    assert len(unique) == 4
    _, dtm = writers.write_surface_pair([a, b], date=DATE)
    result = decode_text_triangles(dtm)
    assert [t.indices for t in result.triangles] == [(0, 1, 2), (0, 1, 3)]


def test_write_surface_pair_shapes():
    str_bytes, dtm_bytes = writers.write_surface_pair([_square(), _square("hidden", visible=False)], name="pit", date=DATE)
    str_lines = _lines(str_bytes)
    assert str_lines[2] == "32000, 0.000, 0.000, 0.000, "
    assert len(str_lines) == 2 + 4 + 1
    dtm_lines = _lines(dtm_bytes)
    assert dtm_lines[0].startswith("pit.str,05-Jan-26")
    assert dtm_lines[2] == "OBJECT, 1,"
    assert dtm_lines[3] == "TRISOLATION, 1, neighbours=no,validated=true,closed=no"
    assert dtm_lines[4] == "1, 1, 2, 3, 0, 0, 0,"
    assert dtm_lines[5] == "2, 1, 3, 4, 0, 0, 0,"
    assert dtm_lines[-1] == "END"


def test_surface_pair_round_trip():
    surfaces = [_square("a"), _square("b", z=50.0)]
    str_bytes, dtm_bytes = writers.write_surface_pair(surfaces, date=DATE)
    vertices = decode_text_vertices(str_bytes)
    result = decode_text_triangles(dtm_bytes, vertex_count=len(vertices))
    assert len(result.groups) == 2
    for surf, group in zip(surfaces, result.groups):
        written = {tuple(sorted(corners)) for corners in surf.triangle_vertices()}
        read = {tuple(sorted(vertices[i] for i in tri.indices)) for tri in group}
        assert read == written


def test_decimal_places_drive_key_and_output():
    cfg = FormatConfig(decimal_places=1)
    surf = Surface([(0.04, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 0.0)], [(0, 1, 2)])
    unique, _ = writers.collect_vertices([surf], cfg)
    assert len(unique) == 2
    with pytest.raises(FormatError, match="missing from the vertex pass"):
        writers.write_surface_triangles([surf], {}, config=cfg)
