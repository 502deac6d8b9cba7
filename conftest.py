# Ensure project root is on sys.path so 'trirk' is importable when running pytest from
# environments that don't automatically include it.
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_client_stats():
    """Start every test with empty run counters."""
    from trirk.logging_config import client_stats

    client_stats.clear()
    yield
    client_stats.clear()
