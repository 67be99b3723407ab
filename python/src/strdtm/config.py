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

"""Format settings shared by the decoders and writers.

One ``FormatConfig`` travels through a whole parse or write call. Every
threshold the engine relies on lives here so a caller can tune a single
producer quirk without touching the decoders.
"""


class FormatConfig:
    def __init__(self,
        design_identifier="DrillBlast",
        design_label="DrillBlast1.1",
        end_token="END",
        sniff_lines=10,
        closure_tolerance=0.001,
        sample_size=1000,
        max_tag=32000,
        max_ratio=10000.0,
        max_magnitude=1e10,
        min_magnitude=1e-10,
        min_zero_run=8,
        max_description=500,
        triangle_stride=33,
        max_triangle_index=100000,
        corruption_threshold=0.3,
        decimal_places=3,
        surface_record_number=32000,
        hole_record_number=1,
        circle_segments=36,
        styles_reference="ssi_styles:survey.ssi"):
        self.design_identifier = design_identifier
        self.design_label = design_label
        self.end_token = end_token
        self.sniff_lines = sniff_lines
        self.closure_tolerance = closure_tolerance
        self.sample_size = sample_size
        self.max_tag = max_tag
        self.max_ratio = max_ratio
        self.max_magnitude = max_magnitude
        self.min_magnitude = min_magnitude
        self.min_zero_run = min_zero_run
        self.max_description = max_description
        self.triangle_stride = triangle_stride
        self.max_triangle_index = max_triangle_index
        self.corruption_threshold = corruption_threshold
        self.decimal_places = decimal_places
        self.surface_record_number = surface_record_number
        self.hole_record_number = hole_record_number
        self.circle_segments = circle_segments
        self.styles_reference = styles_reference

    def update(self, **kwargs):
        for key, val in kwargs.items():
            if not hasattr(self, key):
                raise ValueError(f"Unknown format setting: {key}")
            setattr(self, key, val)
        return self

    def to_dict(self):
        return dict(vars(self))

    def copy(self):
        return FormatConfig(**self.to_dict())


DEFAULT_CONFIG = FormatConfig()


def resolve_config(config=None):
    return DEFAULT_CONFIG if config is None else config
