# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

from pathlib import Path
import sys

import pytest


ROOT = Path(__file__).resolve().parents[1]
PYTHON_SRC_PATH = ROOT / "python" / "src"
DATA_PATH = Path(__file__).resolve().parent / "data"

if str(PYTHON_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC_PATH))


@pytest.fixture
def data_dir():
    return DATA_PATH


@pytest.fixture
def blast_sample_bytes(data_dir):
    """Raw bytes of the three-hole text blast file."""
    return (data_dir / "blast_sample.str").read_bytes()
