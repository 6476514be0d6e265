"""Shared fixtures for the BST visualizer tests."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bst_engine import BSTAnimated, History, build_balanced
from playback import ManualScheduler, PlaybackConfig, Session
from settings import Settings


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def config():
    """Auto-play off so tests drive the cursor by hand unless they opt in."""
    return PlaybackConfig(speed=500, auto_play=False)


@pytest.fixture
def session(scheduler, config):
    return Session(scheduler=scheduler, config=config)


@pytest.fixture
def seven_session(session):
    """Session holding the balanced tree 1..7 (root 4)."""
    session.load_keys([1, 2, 3, 4, 5, 6, 7])
    return session


@pytest.fixture
def engine():
    return BSTAnimated(build_balanced([1, 2, 3, 4, 5, 6, 7]), History())


@pytest.fixture
def settings(tmp_path):
    return Settings(path=str(tmp_path / "settings.json"), load=False)
