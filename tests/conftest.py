"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from questkit.config import Settings
from questkit.games.clock import VirtualScheduler


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (dispatcher flows)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def scheduler():
    """Deterministic clock for engines and tickers."""
    return VirtualScheduler()


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


class Recorder:
    """Collects callback payloads (results, feedback, timer states)."""

    def __init__(self):
        self.calls = []

    def __call__(self, payload):
        self.calls.append(payload)

    @property
    def last(self):
        return self.calls[-1] if self.calls else None

    def __len__(self):
        return len(self.calls)

    def __bool__(self):
        # A registered callback is always truthy, even before its first call
        return True


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def feedback_recorder():
    return Recorder()


# =============================================================================
# Sample configs (camelCase, as the authoring surface saves them)
# =============================================================================

@pytest.fixture
def drag_drop_config():
    return {
        "instruction": "Sort the equipment into the right bin",
        "items": [
            {"id": "i1", "content": "Hard hat", "correctTargetId": "ppe", "xp": 25},
            {"id": "i2", "content": "Gloves", "correctTargetId": "ppe", "xp": 25},
            {"id": "i3", "content": "Ladder", "correctTargetId": "tools", "xp": 25},
            {"id": "i4", "content": "Drill", "correctTargetId": "tools", "xp": 25},
        ],
        "targets": [
            {"id": "ppe", "label": "Protective equipment"},
            {"id": "tools", "label": "Tools"},
        ],
        "totalXp": 100,
    }


@pytest.fixture
def time_attack_config(drag_drop_config):
    return {**drag_drop_config, "timeLimitSeconds": 30}


@pytest.fixture
def hotspot_config():
    return {
        "instruction": "Find the hazards",
        "imageUrl": "https://cdn.example.com/site.jpg",
        "hotspots": [
            {"x": 20, "y": 20, "radius": 5, "label": "Spill", "xp": 10},
            {"x": 60, "y": 60, "radius": 8, "label": "Loose cable", "xp": 10},
            {"x": 90, "y": 10, "radius": 4, "label": "Open hatch", "xp": 10},
        ],
    }


@pytest.fixture
def matching_config():
    return {
        "instruction": "Match each sign to its meaning",
        "leftItems": [
            {"id": "l1", "text": "Red circle", "xp": 10},
            {"id": "l2", "text": "Blue circle", "xp": 10},
            {"id": "l3", "text": "Yellow triangle", "xp": 10},
        ],
        "rightItems": [
            {"id": "r1", "text": "Prohibition"},
            {"id": "r2", "text": "Mandatory action"},
            {"id": "r3", "text": "Warning"},
        ],
        "pairs": [
            {"leftId": "l1", "rightId": "r1"},
            {"leftId": "l2", "rightId": "r2"},
            {"leftId": "l3", "rightId": "r3"},
        ],
        "totalXp": 30,
    }


@pytest.fixture
def sequence_config():
    return {
        "instruction": "Order the lockout steps",
        "items": [
            {"id": "s1", "content": "Notify", "xp": 5},
            {"id": "s2", "content": "Shut down", "xp": 5},
            {"id": "s3", "content": "Isolate", "xp": 5},
            {"id": "s4", "content": "Verify", "xp": 5},
        ],
        "correctOrder": ["s1", "s2", "s3", "s4"],
        "totalXp": 20,
    }


@pytest.fixture
def true_false_config():
    return {
        "instruction": "True or false?",
        "statement": "Hard hats expire.",
        "correctAnswer": True,
        "trueExplanation": "Shells degrade with UV exposure.",
        "falseExplanation": "Check the date stamp inside the shell.",
        "xp": 15,
    }


@pytest.fixture
def multiple_choice_config():
    return {
        "instruction": "Which gloves protect against cuts?",
        "options": [
            {"id": "a", "text": "Kevlar", "correct": True, "xp": 20},
            {"id": "b", "text": "Latex", "correct": False},
            {"id": "c", "text": "Cotton", "correct": False},
        ],
        "allowMultipleCorrect": False,
    }


@pytest.fixture
def scenario_config():
    return {
        "scenario": "A colleague collapses near a machine that is still running.",
        "question": "What do you do?",
        "allowMultipleCorrect": True,
        "options": [
            {"id": "o1", "text": "Stop the machine", "correct": True, "xp": 10},
            {"id": "o2", "text": "Call for help", "correct": True, "xp": 10},
            {"id": "o3", "text": "Check breathing", "correct": True, "xp": 10},
            {"id": "o4", "text": "Move them immediately", "correct": False, "feedback": "Never move an injured person first."},
        ],
    }


@pytest.fixture
def memory_flip_config():
    return {
        "instruction": "Match each hazard to its symbol",
        "cards": [
            {"id": "c1", "text": "Flammable"},
            {"id": "c2", "imageUrl": "https://cdn.example.com/flame.png"},
            {"id": "c3", "text": "Corrosive"},
            {"id": "c4", "imageUrl": "https://cdn.example.com/corrosion.png"},
        ],
        "pairs": [
            {"leftId": "c1", "rightId": "c2", "xp": 10},
            {"leftId": "c3", "rightId": "c4", "xp": 10},
        ],
        "timeLimitSeconds": 60,
        "perfectGameMultiplier": 2,
    }


@pytest.fixture
def photo_swipe_config():
    return {
        "instruction": "Swipe right if the scene is safe",
        "cards": [
            {"id": "p1", "imageUrl": "https://cdn.example.com/1.jpg", "isCorrect": "safe", "explanation": "Guard in place.", "xp": 5},
            {"id": "p2", "imageUrl": "https://cdn.example.com/2.jpg", "isCorrect": "unsafe", "explanation": "No harness.", "xp": 5},
            {"id": "p3", "imageUrl": "https://cdn.example.com/3.jpg", "isCorrect": "safe", "explanation": "Clear walkway.", "xp": 5},
        ],
        "timeAttackMode": False,
    }
