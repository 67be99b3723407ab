# Copyright (C) 2026 Darkmine Pty Ltd
# SPDX-License-Identifier: GPL-3.0-or-later

from . import holes, data, validate

__all__ = [
	"holes",
	"data",
	"validate",
]
