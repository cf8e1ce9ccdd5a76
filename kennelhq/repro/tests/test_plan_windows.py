"""Tests for computing windows straight from a breeding plan."""

from __future__ import annotations

from datetime import date

import pytest

from kennelhq.repro.base import (
    AnchorMode,
    Confidence,
    CycleHistoryEntry,
    CycleSource,
    ReproSummary,
)
from kennelhq.repro.config_loader import ReproConfig
from kennelhq.repro.dates import InvalidDate
from kennelhq.repro.merge import merge_timelines
from kennelhq.repro.plan_windows import BreedingPlanInput, candidates_from_plan, windows_from_plan
from kennelhq.repro.timeline import build_timeline_from_seed


class TestWindowsFromPlan:
    def test_empty_plan_returns_none(self, repro_config: ReproConfig) -> None:
        assert windows_from_plan(BreedingPlanInput(), repro_config) is None

    def test_blank_strings_are_absent(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(species="DOG", cycle_start_observed="", earliest_cycle_start=" ")
        assert windows_from_plan(plan, repro_config) is None

    def test_observed_cycle_start(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(species="DOG", cycle_start_observed="2024-01-01")
        timeline = windows_from_plan(plan, repro_config)
        assert timeline.explain.anchor_mode is AnchorMode.CYCLE_START
        assert timeline.explain.confidence is Confidence.LOW
        assert timeline.milestones.ovulation == date(2024, 1, 13)
        assert timeline.milestones.birth_expected == date(2024, 3, 16)

    def test_timestamp_text_does_not_shift_day(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(species="DOG", cycle_start_observed="2024-01-01T00:00:00.000Z")
        assert windows_from_plan(plan, repro_config).milestones.cycle_start == date(2024, 1, 1)

    def test_birth_date_wins(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(
            species="DOG",
            cycle_start_observed="2024-01-01",
            ovulation_confirmed="2024-01-14",
            birth_date_actual="2024-03-16",
        )
        timeline = windows_from_plan(plan, repro_config)
        assert timeline.explain.anchor_mode is AnchorMode.BIRTH_DATE
        assert timeline.birth.full.start == timeline.birth.full.end == date(2024, 3, 16)

    def test_hormone_history_raises_cycle_start_confidence(self, repro_config: ReproConfig) -> None:
        history = (
            CycleHistoryEntry(
                id="c1",
                cycle_start=date(2023, 6, 1),
                ovulation=date(2023, 6, 13),
                offset_days=12,
                confidence=Confidence.HIGH,
                source=CycleSource.HORMONE_TEST,
            ),
        )
        plan = BreedingPlanInput(
            species="DOG", cycle_start_observed="2024-01-01", cycle_history=history
        )
        assert windows_from_plan(plan, repro_config).explain.confidence is Confidence.MEDIUM

    def test_range_seeds_are_merged(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(
            species="DOG", earliest_cycle_start="2024-01-01", latest_cycle_start="2024-01-21"
        )
        summary = ReproSummary(species="DOG")
        expected = merge_timelines(
            build_timeline_from_seed(summary, date(2024, 1, 1), repro_config),
            build_timeline_from_seed(summary, date(2024, 1, 21), repro_config),
        )
        timeline = windows_from_plan(plan, repro_config)
        assert timeline == expected
        assert timeline.explain.anchor_mode is None

    @pytest.mark.parametrize("field", ["earliest_cycle_start", "latest_cycle_start"])
    def test_single_seed(self, field: str, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(species="DOG", **{field: "2024-01-01"})
        expected = build_timeline_from_seed(
            ReproSummary(species="DOG"), date(2024, 1, 1), repro_config
        )
        assert windows_from_plan(plan, repro_config) == expected

    def test_anchor_beats_seeds(self, repro_config: ReproConfig) -> None:
        plan = BreedingPlanInput(
            species="DOG",
            locked_cycle_start="2024-02-01",
            earliest_cycle_start="2024-01-01",
            latest_cycle_start="2024-01-21",
        )
        timeline = windows_from_plan(plan, repro_config)
        assert timeline.milestones.cycle_start == date(2024, 2, 1)

    def test_empty_species_uses_fallback(self, repro_config: ReproConfig) -> None:
        dog = windows_from_plan(
            BreedingPlanInput(species="DOG", cycle_start_observed="2024-01-01"), repro_config
        )
        blank = windows_from_plan(
            BreedingPlanInput(species="", cycle_start_observed="2024-01-01"), repro_config
        )
        assert blank == dog

    def test_malformed_date_raises(self, repro_config: ReproConfig) -> None:
        with pytest.raises(InvalidDate):
            windows_from_plan(
                BreedingPlanInput(species="DOG", cycle_start_observed="2024-02-30"), repro_config
            )

    def test_mode_hint_text(self) -> None:
        plan = BreedingPlanInput(cycle_start_observed="2024-01-01", repro_anchor_mode="ovulation")
        assert candidates_from_plan(plan).repro_anchor_mode is AnchorMode.OVULATION
        unknown = BreedingPlanInput(repro_anchor_mode="SOMETHING")
        assert candidates_from_plan(unknown).repro_anchor_mode is None
