import os
import random
import sys

import pytest

# Ensure the project root (flat make10_* modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from make10_config import session_config
from make10_grid import Grid
from make10_rng import ShuffleBag
from make10_session import Session, State

FIXED_NOW = 1700000000.0  # seconds


def fixed_clock():
    return FIXED_NOW


def make_session(values=None, seed=7, **overrides):
    """Session past its countdown, optionally with a settled hand-made grid."""
    cfg = session_config(SEED=seed, **overrides)
    session = Session(cfg, rng=random.Random(seed), clock=fixed_clock)
    session.events.keep_history = True
    session.start("tester")
    session.tick(cfg["COUNTDOWN_MS"])
    assert session.state == State.ACTIVE
    if values is not None:
        session.grid = Grid.from_values(values)
    return session


def nines_bag(rng=None):
    """Bag that only ever dispenses 9s; nothing it adds can complete a 10."""
    return ShuffleBag(policy="weighted", weights={9: 1}, min_size=16, rng=rng or random.Random(0))


@pytest.fixture()
def active_session():
    return make_session


@pytest.fixture()
def prefs_path(tmp_path):
    return tmp_path / "prefs.json"
