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

"""
strdtm Open Data Model

Field names shared by the decoded records and the DataFrames built from them.

Hole tables use easting/northing/elevation, azimuth from north and dip negative
downwards, matching common drillhole collar tables.
"""

HOLE_ID = "hole_id"
BLAST_NAME = "blast_name"
FROM_HOLE_ID = "from_hole_id"
EASTING = "easting"
NORTHING = "northing"
ELEVATION = "elevation"
TOE_EASTING = "toe_easting"
TOE_NORTHING = "toe_northing"
TOE_ELEVATION = "toe_elevation"
GRADE_EASTING = "grade_easting"
GRADE_NORTHING = "grade_northing"
GRADE_ELEVATION = "grade_elevation"
AZIMUTH = "azimuth"
DIP = "dip"
ANGLE = "angle"
LENGTH = "length"
DIAMETER = "diameter"
SUBDRILL = "subdrill"
SUBDRILL_LENGTH = "subdrill_length"
BENCH_HEIGHT = "bench_height"
HOLE_TYPE = "hole_type"
DESIGN_ID = "design_id"
METHOD = "method"
CRS = "crs"

# surface tables
VERTEX_ID = "vertex_id"
TRIANGLE_ID = "triangle_id"
V1 = "v1"
V2 = "v2"
V3 = "v3"
SURFACE = "surface"

# entity kinds
POINT = "point"
LINE = "line"
POLYGON = "polygon"
TEXT = "text"
CIRCLE = "circle"
