import pytest

from helpers.fake_comm import ScriptedManager, ThreadWorld, run_threaded_pipeline


@pytest.fixture
def run_pipeline():
    """Callable running a full pipeline of `size` ranks over 1..n in threads."""
    return run_threaded_pipeline


@pytest.fixture
def scripted():
    """Factory for a single-rank manager fed from a list of records."""
    return ScriptedManager


@pytest.fixture
def world():
    return ThreadWorld
