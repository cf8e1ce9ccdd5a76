"""Tests for anchor resolution priority and confidence."""

from __future__ import annotations

from datetime import date

from kennelhq.repro.anchor import ovulation_confidence, resolve_anchor
from kennelhq.repro.base import AnchorCandidates, AnchorMode, Confidence
from kennelhq.repro.config_loader import ReproConfig

EVERYTHING = AnchorCandidates(
    birth_date_actual=date(2024, 3, 16),
    ovulation_confirmed=date(2024, 1, 13),
    ovulation_confirmed_method="PROGESTERONE_TEST",
    locked_ovulation_date=date(2024, 1, 14),
    breed_date_actual=date(2024, 1, 14),
    cycle_start_observed=date(2024, 1, 1),
    locked_cycle_start=date(2024, 1, 2),
    has_hormone_testing_history=True,
)


class TestAnchorPriority:
    def test_birth_date_beats_everything(self, repro_config: ReproConfig) -> None:
        anchor = resolve_anchor(EVERYTHING, repro_config)
        assert anchor is not None
        assert anchor.mode is AnchorMode.BIRTH_DATE
        assert anchor.date == date(2024, 3, 16)
        assert anchor.confidence is Confidence.HIGH

    def test_ovulation_beats_breeding_and_cycle_start(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            ovulation_confirmed=date(2024, 1, 13),
            ovulation_confirmed_method="PROGESTERONE_TEST",
            breed_date_actual=date(2024, 1, 14),
            cycle_start_observed=date(2024, 1, 1),
        )
        anchor = resolve_anchor(candidates, repro_config)
        assert anchor.mode is AnchorMode.OVULATION
        assert anchor.date == date(2024, 1, 13)
        assert anchor.confidence is Confidence.HIGH
        assert anchor.method == "PROGESTERONE_TEST"

    def test_breeding_date_beats_cycle_start(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            breed_date_actual=date(2024, 1, 14),
            cycle_start_observed=date(2024, 1, 1),
        )
        anchor = resolve_anchor(candidates, repro_config)
        assert anchor.mode is AnchorMode.BREEDING_DATE
        assert anchor.confidence is Confidence.MEDIUM

    def test_confirmed_ovulation_preferred_over_legacy(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            ovulation_confirmed=date(2024, 1, 13),
            locked_ovulation_date=date(2024, 1, 20),
        )
        assert resolve_anchor(candidates, repro_config).date == date(2024, 1, 13)

    def test_legacy_locked_ovulation(self, repro_config: ReproConfig) -> None:
        anchor = resolve_anchor(
            AnchorCandidates(locked_ovulation_date=date(2024, 1, 20)), repro_config
        )
        assert anchor.mode is AnchorMode.OVULATION
        assert anchor.confidence is Confidence.MEDIUM

    def test_observed_cycle_start_preferred_over_legacy(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            cycle_start_observed=date(2024, 1, 1),
            locked_cycle_start=date(2024, 1, 5),
        )
        assert resolve_anchor(candidates, repro_config).date == date(2024, 1, 1)

    def test_legacy_locked_cycle_start(self, repro_config: ReproConfig) -> None:
        anchor = resolve_anchor(
            AnchorCandidates(locked_cycle_start=date(2024, 1, 5)), repro_config
        )
        assert anchor.mode is AnchorMode.CYCLE_START
        assert anchor.confidence is Confidence.LOW

    def test_nothing_present_returns_none(self, repro_config: ReproConfig) -> None:
        assert resolve_anchor(AnchorCandidates(), repro_config) is None

    def test_mode_hint_alone_is_not_an_anchor(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(repro_anchor_mode=AnchorMode.OVULATION)
        assert resolve_anchor(candidates, repro_config) is None

    def test_concrete_date_beats_mode_hint(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            cycle_start_observed=date(2024, 1, 1),
            repro_anchor_mode=AnchorMode.OVULATION,
        )
        assert resolve_anchor(candidates, repro_config).mode is AnchorMode.CYCLE_START


class TestAnchorConfidence:
    def test_cycle_start_with_testing_history(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(
            cycle_start_observed=date(2024, 1, 1), has_hormone_testing_history=True
        )
        assert resolve_anchor(candidates, repro_config).confidence is Confidence.MEDIUM

    def test_cycle_start_without_history(self, repro_config: ReproConfig) -> None:
        candidates = AnchorCandidates(cycle_start_observed=date(2024, 1, 1))
        assert resolve_anchor(candidates, repro_config).confidence is Confidence.LOW

    def test_lab_methods_are_high(self, repro_config: ReproConfig) -> None:
        for method in ("PROGESTERONE_TEST", "LH_TEST", "ULTRASOUND", " progesterone_test "):
            assert ovulation_confidence(method, repro_config) is Confidence.HIGH

    def test_other_methods_are_medium(self, repro_config: ReproConfig) -> None:
        for method in (None, "", "VAGINAL_CYTOLOGY", "BEHAVIOR"):
            assert ovulation_confidence(method, repro_config) is Confidence.MEDIUM
