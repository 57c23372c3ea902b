"""
Pytest configuration: make sure `import equiprent` (and `import api`)
works regardless of where pytest is invoked.

It prepends the project root (one directory above *tests/*) to
``sys.path`` **before** any tests are collected, and provides the
sample lines and rates shared by the engine tests.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from equiprent.models import EquipmentLine  # noqa: E402
from equiprent.pricing import rate_lookup  # noqa: E402


@pytest.fixture
def standard_rates():
    """Standard daily rates: scaffold 50, mixer 100."""
    return rate_lookup({"scaffold": Decimal("50"), "mixer": Decimal("100")})


@pytest.fixture
def discounted_lines():
    """Two scaffolds negotiated down to 40, one mixer at its standard 100."""
    return [
        EquipmentLine("scaffold", 2, "Scaffold frame", Decimal("40")),
        EquipmentLine("mixer", 1, "Concrete mixer", Decimal("100")),
    ]
