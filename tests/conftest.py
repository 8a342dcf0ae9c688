"""
Shared test fixtures for the snowflake pipeline tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from geometry_primitives import Segment, SnowflakeParams
from pipeline import build_segments, generate_snowflake
from seeded_rng import SeededRandom, seed_from_string
from skeleton import build_wedge


@pytest.fixture
def ada_params():
    """The reference parameter tuple from the export panel."""
    return SnowflakeParams(seed="Ada|Lovelace|6|10", complexity=6, thickness=10)


@pytest.fixture
def ada_wedge():
    rand = SeededRandom(seed_from_string("Ada|Lovelace|6|10"))
    return build_wedge(rand, 6, 10)


@pytest.fixture
def ada_segments(ada_params):
    return build_segments(ada_params)


@pytest.fixture(scope="session")
def ada_result():
    """Full pipeline result, computed once per session."""
    return generate_snowflake(
        SnowflakeParams(seed="Ada|Lovelace|6|10", complexity=6, thickness=10)
    )


@pytest.fixture
def cross_segments():
    """Two crossing 2-unit segments centred on the origin."""
    return [
        Segment((-1.0, 0.0), (1.0, 0.0)),
        Segment((0.0, -1.0), (0.0, 1.0)),
    ]


@pytest.fixture
def square_loop():
    return [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)]
