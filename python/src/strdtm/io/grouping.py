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

"""Turn a decoded record stream into entities or drill holes.

Both the text and the binary decoders produce the same flat list of
``StringRecord`` values, with separator records (record number 0) marking
group boundaries. What the groups mean is decided once per file by
``sniff_content_kind`` and then built by exactly one of the two builders.
"""

import logging

from strdtm.config import resolve_config
from strdtm.drill.holes import derive_geometry, has_design_payload, hole_from_collar
from strdtm.records import Entity, FileContentKind, NamingContext, infer_kind

logger = logging.getLogger(__name__)


def sniff_content_kind(records, config=None):
    """Decide between annotation and drill-hole content from early records."""
    config = resolve_config(config)
    sampled = 0
    for rec in records:
        if rec.is_separator:
            continue
        if has_design_payload(rec.descriptions, config.design_identifier):
            return FileContentKind.DRILL_HOLE_SET
        sampled += 1
        if sampled >= config.sniff_lines:
            break
    return FileContentKind.ANNOTATION


def records_to_entities(records, naming=None, config=None):
    """Group records into point / line / polygon entities.

    A group ends at a separator, or when the record number or the D1 label
    changes between consecutive records.
    """
    config = resolve_config(config)
    naming = naming or NamingContext()
    entities = []
    group = []

    def flush():
        if not group:
            return
        first = group[0]
        vertices = [rec.vertex() for rec in group]
        kind = infer_kind(vertices, config.closure_tolerance)
        name = naming.unique_name(kind, first.label)
        entities.append(Entity(
            name=name,
            kind=kind,
            vertices=vertices,
            record_number=first.record_number,
            descriptions=first.descriptions,
        ))
        group.clear()

    for rec in records:
        if rec.is_separator:
            flush()
            continue
        if group and (rec.record_number != group[0].record_number or rec.label != group[0].label):
            flush()
        group.append(rec)
    flush()
    return entities


def _finalize_hole(hole, holes):
    if not derive_geometry(hole):
        logger.warning(
            "Hole %s has no usable toe; keeping design bearing/angle from the collar payload",
            hole.from_hole_id,
        )
    holes.append(hole)


def records_to_holes(records, config=None):
    """Pair collar records (with design payload) and their toe records."""
    config = resolve_config(config)
    holes = []
    current = None
    hole_index = 1
    for rec in records:
        if rec.is_separator:
            continue
        if has_design_payload(rec.descriptions, config.design_identifier):
            if current is not None:
                _finalize_hole(current, holes)
            current = hole_from_collar(rec.vertex(), rec.descriptions, hole_index)
            hole_index += 1
        elif current is not None and current.toe is None:
            current.toe = rec.vertex()
        else:
            logger.debug("Ignoring record without a collar to attach to: %r", rec)
    if current is not None:
        _finalize_hole(current, holes)
    return holes
