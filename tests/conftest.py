import os
import sys
import pytest

# Ensure project root is on sys.path for imports like `core.*`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from rules.rules_loader import load_trackers
from models.technology import TrackerKind


@pytest.fixture(scope="session")
def trackers():
    return {tracker.kind: tracker for tracker in load_trackers()}


@pytest.fixture
def tracker_for(trackers):
    def get(kind: TrackerKind):
        return trackers[kind]
    return get
