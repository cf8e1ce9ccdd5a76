"""Shared fixtures for repro engine tests."""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from kennelhq.repro.base import CycleHistoryEntry, CycleSource, ReproSummary
from kennelhq.repro.config_loader import ReproConfig, load_repro_config
from kennelhq.repro.dates import add_days

# Fixed "today" so projections and alerts are reproducible
TEST_TODAY = date(2026, 2, 23)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def repro_config() -> ReproConfig:
    """Load the real repro config for tests."""
    return load_repro_config()


@pytest.fixture
def today() -> date:
    return TEST_TODAY


@pytest.fixture
def dog_summary() -> ReproSummary:
    return ReproSummary(species="DOG", today=TEST_TODAY)


# ---------------------------------------------------------------------------
# History builders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_history() -> Callable[..., tuple[CycleHistoryEntry, ...]]:
    """Build history entries with the given offsets.

    Cycles start 180 days apart from 2023-01-01; each ovulation lands
    ``offset`` days after its cycle start.
    """

    def _make(
        offsets: list[int],
        source: CycleSource = CycleSource.HORMONE_TEST,
    ) -> tuple[CycleHistoryEntry, ...]:
        entries = []
        for i, offset in enumerate(offsets):
            start = add_days(date(2023, 1, 1), 180 * i)
            entries.append(
                CycleHistoryEntry(
                    id=f"cycle-{i + 1}",
                    cycle_start=start,
                    ovulation=add_days(start, offset),
                    offset_days=offset,
                    source=source,
                )
            )
        return tuple(entries)

    return _make
