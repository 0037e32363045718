# tests/conftest.py
"""Shared test fixtures.

Fixtures:
- clock: MockClock starting at 2025-01-01T00:00:00Z
- memory_sink: InMemorySink capturing finished events
- emitter: Emitter named "requests" wired to clock and memory_sink
- recording_filter / failing sinks: see tests/fixtures.py

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
import random
from collections.abc import Iterator

import pytest
from hypothesis import Phase, Verbosity, settings

from widelog import Emitter, InMemorySink, MockClock

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def memory_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def emitter(clock: MockClock, memory_sink: InMemorySink) -> Iterator[Emitter]:
    """Emitter "requests" with a mock clock, a seeded RNG and one memory sink."""
    emitter = Emitter.builder("requests").clock(clock).random_source(random.Random(1234)).add_sink(memory_sink).build()
    yield emitter
    emitter.close()
