# Copyright (C) 2026 Darkmine Pty Ltd
# SPDX-License-Identifier: GPL-3.0-or-later

from . import classify, scan, grouping, layout, text, binary, triangles, assemble, writers, api
from .api import parse, parse_surface, write, write_surface_pair, ParseResult, SurfaceParseResult

__all__ = [
	"classify",
	"scan",
	"grouping",
	"layout",
	"text",
	"binary",
	"triangles",
	"assemble",
	"writers",
	"api",
	"parse",
	"parse_surface",
	"write",
	"write_surface_pair",
	"ParseResult",
	"SurfaceParseResult",
]
