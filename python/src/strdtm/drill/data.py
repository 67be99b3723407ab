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

"""Table conversion helpers for decoded holes and surfaces.

Decoded records convert to pandas / geopandas tables in the strdtm open data
model, and design tables (CSV, Parquet or DataFrame) convert back into
``DrillHole`` objects for export. Column standardization maps common source
column names onto the model so callers rarely need a column map.
"""

import math

import pandas as pd
import geopandas as gpd

from strdtm.datamodel import (
    HOLE_ID,
    BLAST_NAME,
    FROM_HOLE_ID,
    EASTING,
    NORTHING,
    ELEVATION,
    TOE_EASTING,
    TOE_NORTHING,
    TOE_ELEVATION,
    GRADE_EASTING,
    GRADE_NORTHING,
    GRADE_ELEVATION,
    AZIMUTH,
    DIP,
    ANGLE,
    LENGTH,
    DIAMETER,
    SUBDRILL,
    SUBDRILL_LENGTH,
    BENCH_HEIGHT,
    HOLE_TYPE,
    DESIGN_ID,
    METHOD,
    VERTEX_ID,
    TRIANGLE_ID,
    V1,
    V2,
    V3,
    SURFACE,
)
from strdtm.drill.holes import DrillHole, dip_to_angle
from strdtm.drill.validate import report_missing_columns


# Columns of a blast-hole table, in output order
STRDTM_DATA_MODEL_BLAST_HOLE = {
    # Hole identifier within its blast
    HOLE_ID: str,
    # Blast (pattern) the hole belongs to
    BLAST_NAME: str,
    # "<blast>:::<hole>", unique across blasts
    FROM_HOLE_ID: str,
    # Collar position, projected metres
    EASTING: float,
    NORTHING: float,
    ELEVATION: float,
    # Toe position, missing when the file had no toe record
    TOE_EASTING: float,
    TOE_NORTHING: float,
    TOE_ELEVATION: float,
    # Design grade point on the hole axis
    GRADE_EASTING: float,
    GRADE_NORTHING: float,
    GRADE_ELEVATION: float,
    # Degrees from north
    AZIMUTH: float,
    # Degrees from horizontal, negative downwards
    DIP: float,
    # Degrees from vertical, 0 straight down
    ANGLE: float,
    LENGTH: float,
    # Millimetres
    DIAMETER: float,
    SUBDRILL: float,
    SUBDRILL_LENGTH: float,
    BENCH_HEIGHT: float,
    HOLE_TYPE: str,
    DESIGN_ID: str,
    METHOD: str,
}

REQUIRED_HOLE_COLUMNS = [HOLE_ID, EASTING, NORTHING, ELEVATION]

# 'Best guess' mapping of source column names onto the data model. Keys from
# the source are lowercased and stripped before lookup.
DEFAULT_COLUMN_MAP = {
    HOLE_ID: ["hole_id", "holeid", "hole id", "hole-id", "hole", "id"],
    BLAST_NAME: ["blast_name", "blastname", "blast name", "blast", "entity_name", "entityname", "pattern"],
    EASTING: ["easting", "x", "collar_x", "start_x", "startxlocation"],
    NORTHING: ["northing", "y", "collar_y", "start_y", "startylocation"],
    ELEVATION: ["elevation", "rl", "elev", "z", "collar_z", "start_z", "startzlocation"],
    TOE_EASTING: ["toe_easting", "toe_x", "end_x", "endxlocation"],
    TOE_NORTHING: ["toe_northing", "toe_y", "end_y", "endylocation"],
    TOE_ELEVATION: ["toe_elevation", "toe_z", "toe_rl", "end_z", "endzlocation"],
    AZIMUTH: ["azimuth", "az", "bearing", "holebearing"],
    DIP: ["dip"],
    ANGLE: ["angle", "holeangle", "angle_from_vertical"],
    LENGTH: ["length", "depth", "hole_length", "holelength", "holelengthcalculated"],
    DIAMETER: ["diameter", "dia", "hole_diameter", "holediameter"],
    SUBDRILL: ["subdrill", "subdrill_amount", "subdrillamount", "sub_drill"],
    HOLE_TYPE: ["hole_type", "holetype", "rig", "rig_name"],
    DESIGN_ID: ["design_id", "designid"],
    METHOD: ["method"],
}

# Pivot of DEFAULT_COLUMN_MAP: normalized source name -> model column
_COLUMN_LOOKUP = {}
for standard_col, variations in DEFAULT_COLUMN_MAP.items():
    for variation in variations:
        normalized = variation.lower().strip()
        _COLUMN_LOOKUP[normalized] = standard_col


def standardize_columns(df, column_map=None, source_column_map=None):
    lookup = dict(_COLUMN_LOOKUP)
    if column_map:
        for standard_col, variations in column_map.items():
            for variation in variations:
                lookup[str(variation).lower().strip()] = standard_col
    if source_column_map:
        normalized_map = {
            str(raw_name).lower().strip(): str(expected_name).lower().strip()
            for raw_name, expected_name in source_column_map.items()
            if raw_name is not None and expected_name is not None
        }
        lookup.update(normalized_map)

    renamed = {}
    for col in df.columns:
        key = str(col).lower().strip()
        renamed[col] = lookup.get(key, key)
    out = df.rename(columns=renamed)
    if not out.columns.is_unique:
        out = out.T.groupby(level=0, sort=False).first().T
    return out


def load_table(source, kind="csv", column_map=None, source_column_map=None, **kwargs):
    if isinstance(source, pd.DataFrame):
        df = source.copy()
    elif kind == "csv":
        df = pd.read_csv(source, **kwargs)
    elif kind == "parquet":
        df = pd.read_parquet(source, **kwargs)
    else:
        raise ValueError(f"Unsupported kind: {kind}")
    return standardize_columns(df, column_map=column_map, source_column_map=source_column_map)


def _xyz(vertex):
    if vertex is None:
        return (math.nan, math.nan, math.nan)
    return (vertex.x, vertex.y, vertex.z)


def _or_nan(value):
    return math.nan if value is None else value


def holes_to_frame(holes):
    rows = []
    for hole in holes:
        toe = _xyz(hole.toe)
        grade = _xyz(hole.grade)
        rows.append({
            HOLE_ID: hole.hole_id,
            BLAST_NAME: hole.blast_name,
            FROM_HOLE_ID: hole.from_hole_id,
            EASTING: hole.collar.x,
            NORTHING: hole.collar.y,
            ELEVATION: hole.collar.z,
            TOE_EASTING: toe[0],
            TOE_NORTHING: toe[1],
            TOE_ELEVATION: toe[2],
            GRADE_EASTING: grade[0],
            GRADE_NORTHING: grade[1],
            GRADE_ELEVATION: grade[2],
            AZIMUTH: hole.bearing,
            DIP: hole.dip,
            ANGLE: hole.angle,
            LENGTH: hole.length_calculated,
            DIAMETER: hole.diameter,
            SUBDRILL: hole.subdrill_amount,
            SUBDRILL_LENGTH: _or_nan(hole.subdrill_length),
            BENCH_HEIGHT: _or_nan(hole.bench_height),
            HOLE_TYPE: hole.hole_type,
            DESIGN_ID: hole.design_id,
            METHOD: hole.method,
        })
    return pd.DataFrame(rows, columns=list(STRDTM_DATA_MODEL_BLAST_HOLE.keys()))


def holes_to_geodataframe(holes, crs=None):
    """Blast-hole table with collar points as geometry."""
    df = holes_to_frame(holes)
    geom = gpd.points_from_xy(df[EASTING], df[NORTHING], df[ELEVATION])
    return gpd.GeoDataFrame(df, geometry=geom, crs=crs)


def _direction_cosines(azimuth, dip):
    az_rad = math.radians(azimuth)
    dip_rad = math.radians(dip)
    ca = math.cos(dip_rad) * math.sin(az_rad)
    cb = math.cos(dip_rad) * math.cos(az_rad)
    cc = math.sin(dip_rad)
    return ca, cb, cc


def _number(row, col, default=0.0):
    val = row.get(col, default)
    if val is None or pd.isna(val):
        return default
    return float(val)


def _text(row, col, default):
    val = row.get(col)
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return default
    val = str(val).strip()
    return val or default


def _toe_from_row(row, collar):
    if all(col in row and not pd.isna(row[col]) for col in (TOE_EASTING, TOE_NORTHING, TOE_ELEVATION)):
        return (float(row[TOE_EASTING]), float(row[TOE_NORTHING]), float(row[TOE_ELEVATION]))
    length = _number(row, LENGTH)
    if length <= 0:
        return None
    # straight hole from the collar along azimuth / dip
    if DIP in row and not pd.isna(row[DIP]):
        dip = float(row[DIP])
    else:
        dip = _number(row, ANGLE) - 90.0
    ca, cb, cc = _direction_cosines(_number(row, AZIMUTH), dip)
    return (collar[0] + length * ca, collar[1] + length * cb, collar[2] + length * cc)


def frame_to_holes(source, source_column_map=None, **kwargs):
    """Build ``DrillHole`` objects from a design table.

    The table needs hole id and collar coordinates. The toe comes from toe
    columns when present, else from length, azimuth and dip (or angle).
    """
    df = load_table(source, source_column_map=source_column_map, **kwargs)
    missing = report_missing_columns(df, REQUIRED_HOLE_COLUMNS)
    if missing:
        raise ValueError(f"Hole table missing columns: {missing}")

    holes = []
    for _, row in df.iterrows():
        collar = (float(row[EASTING]), float(row[NORTHING]), float(row[ELEVATION]))
        if DIP in row and not pd.isna(row[DIP]):
            angle = dip_to_angle(float(row[DIP]))
        else:
            angle = _number(row, ANGLE)
        holes.append(DrillHole(
            collar=collar,
            hole_id=_text(row, HOLE_ID, str(len(holes) + 1)),
            blast_name=_text(row, BLAST_NAME, "BLASTID"),
            toe=_toe_from_row(row, collar),
            design_id=_text(row, DESIGN_ID, ""),
            diameter=_number(row, DIAMETER),
            subdrill_amount=_number(row, SUBDRILL),
            bearing=_number(row, AZIMUTH),
            angle=angle,
            length_calculated=_number(row, LENGTH),
            hole_type=_text(row, HOLE_TYPE, "Undefined"),
            method=_text(row, METHOD, "METHOD"),
        ))
    return holes


def surface_to_frames(surface):
    """Return ``(vertices, triangles)`` DataFrames for one surface.

    Vertex ids are 0-based positions in ``surface.vertices``.
    """
    vertices = pd.DataFrame(surface.vertices, columns=[EASTING, NORTHING, ELEVATION])
    vertices.insert(0, VERTEX_ID, range(surface.vertex_count))
    vertices[SURFACE] = surface.name
    triangles = pd.DataFrame(surface.triangles, columns=[V1, V2, V3])
    triangles.insert(0, TRIANGLE_ID, range(1, surface.triangle_count + 1))
    triangles[SURFACE] = surface.name
    return vertices, triangles
