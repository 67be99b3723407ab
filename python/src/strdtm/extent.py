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

import shapely.geometry


class Extent():

    def __init__(self, xmin=None, xmax=None, ymin=None, ymax=None, zmin=None, zmax=None, bbox=None, name=None, crs=None):
        """
        Create an extent object: an axis-aligned plan bounding box with an
        optional elevation range, name and coordinate reference system (CRS).

        Pass either:
        @param bbox - the plan bounding box as a shapely.geometry.box object
        OR
        @param xmin, xmax, ymin, ymax - the coordinates of the bounding box edges

        @param zmin, zmax - optional elevation range
        @param name - optional name for the extent
        @param crs - coordinate reference system of the survey coordinates, if known
        """
        if bbox is None:
            self.bbox = shapely.geometry.box(xmin, ymin, xmax, ymax)
        else:
            self.bbox = bbox
        self.set_minmax()
        self.zmin = zmin
        self.zmax = zmax
        self.name = name
        self.crs = crs

    def set_minmax(self):
        self.xmin, self.ymin, self.xmax, self.ymax = self.bbox.bounds

    def center(self):
        """Return the plan centre as (y, x), northing first like the string files."""
        xmin, ymin, xmax, ymax = self.bbox.bounds
        return (ymin + ymax) / 2.0, (xmin + xmax) / 2.0

    def contains(self, x, y):
        return self.bbox.covers(shapely.geometry.Point(x, y))

    def union(self, other):
        zs = [z for z in (self.zmin, self.zmax, other.zmin, other.zmax) if z is not None]
        return Extent(
            bbox=shapely.geometry.box(*self.bbox.union(other.bbox).bounds),
            zmin=min(zs) if zs else None,
            zmax=max(zs) if zs else None,
            name=self.name,
            crs=self.crs,
        )
