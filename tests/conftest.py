#!/usr/bin/env python3
"""Shared pytest fixtures for the ringscan test suite."""

import pytest
import json
import pathlib
import sqlite3
import sys
from typing import Any, Dict, List

# Add parent directory to path for imports
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from tests.fixtures.generate_galaxy_data import (
    generate_galaxy_json,
    make_body,
    make_system,
    render_dump,
)


# ============================================================================
# File Fixtures
# ============================================================================

@pytest.fixture
def sol_dump(tmp_path) -> pathlib.Path:
    """Single system whose second body is the only qualifying one."""
    dump = tmp_path / "sol.json"
    dump.write_text(
        '[\n'
        '{"name":"Sol","population":0,"coords":{"x":0,"y":0,"z":0},"bodies":['
        '{"name":"A","rings":[],"isLandable":true,"atmosphereType":"Thin"},'
        '{"name":"B","rings":[{"name":"R1"}],"isLandable":true,"atmosphereType":"Thick"}]},\n'
        ']\n'
    )
    return dump


@pytest.fixture
def galaxy_dump(tmp_path) -> pathlib.Path:
    """1000 systems, one per line, exactly 30 of which qualify."""
    dump = tmp_path / "galaxy.json"
    generate_galaxy_json(1000, str(dump))
    return dump


@pytest.fixture
def pretty_galaxy_dump(tmp_path) -> pathlib.Path:
    """Same systems as galaxy_dump, each pretty-printed over many lines."""
    dump = tmp_path / "galaxy_pretty.json"
    generate_galaxy_json(1000, str(dump), indent=2)
    return dump


@pytest.fixture
def write_dump(tmp_path):
    """Write the given systems as a dump file and return its path."""
    def _write(systems: List[Dict[str, Any]], name: str = "dump.json", **layout) -> pathlib.Path:
        path = tmp_path / name
        path.write_text(render_dump(systems, **layout), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def db_path(tmp_path) -> pathlib.Path:
    return tmp_path / "galaxy.db"


@pytest.fixture
def read_rows():
    """Read back persisted rows through an independent connection."""
    def _read(path: pathlib.Path) -> List[sqlite3.Row]:
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute("SELECT * FROM systems ORDER BY id").fetchall()
        finally:
            conn.close()
    return _read


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def ringed_body() -> Dict[str, Any]:
    return make_body("Qualifier 1", rings=[{"name": "Qualifier 1 A Ring"}], atmosphere="Thin Sulphur dioxide")


@pytest.fixture
def sample_system(ringed_body) -> Dict[str, Any]:
    return make_system(
        "Eol Prou RS-T d3-94",
        bodies=[make_body("Eol Prou RS-T d3-94 A", rings=[]), ringed_body],
        coords={"x": -9530.5, "y": -910.28125, "z": 19808.125},
    )


@pytest.fixture
def nested_system_text() -> str:
    """A system whose strings contain braces, brackets, commas and escaped quotes."""
    system = make_system(
        'Tricky "{[" System',
        bodies=[make_body('Ring}] \\ "body",', rings=[{"name": "a,]"}], atmosphere="Thin [Neon]")],
    )
    return json.dumps(system, indent=4)


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def clean_environment(monkeypatch):
    """Ensure a clean environment for tests."""
    for var in ['RINGSCAN_DB', 'RINGSCAN_BATCH_SIZE', 'RINGSCAN_REPORT_EVERY', 'RINGSCAN_CHUNK_KB',
                'RINGSCAN_MAX_FRAGMENT_CHARS', 'RINGSCAN_RATE_PRECISION', 'RINGSCAN_METRICS_FILE', 'DEBUG']:
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# Performance Testing Fixtures
# ============================================================================

@pytest.fixture
def memory_profiler():
    """Setup memory profiling for tests."""
    try:
        from memory_profiler import memory_usage
    except ImportError:
        pytest.skip("memory_profiler not installed")

    def profile_memory(func, *args, **kwargs):
        """Return peak memory (MiB) while running func."""
        return max(memory_usage((func, args, kwargs), interval=0.01))

    return profile_memory


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "benchmark: marks benchmark tests")
