"""Pydantic models for the repro engine endpoints: plan windows, ovulation patterns, projections.

Request dates are accepted as ``YYYY-MM-DD`` text and parsed by the engine, so
a malformed value surfaces as the engine's ``InvalidDate`` (HTTP 422) rather
than drifting through a timezone-aware parser.
"""

from __future__ import annotations

from datetime import date

from pydantic import Field

from kennelhq.models.base import KennelBase
from kennelhq.repro.base import (
    AnchorMode,
    Confidence,
    CycleLengthSource,
    CycleSource,
    OffsetSource,
    PatternClassification,
)


# ---------- Cycle history ----------

class CycleHistoryIn(KennelBase):
    id: str
    cycle_start: str
    ovulation: str | None = None
    ovulation_method: str | None = Field(default=None, max_length=50)
    birth_date: str | None = None
    breeding_plan_id: str | None = None
    notes: str = ""


class CycleHistoryRead(KennelBase):
    id: str
    cycle_start: date
    ovulation: date | None = None
    ovulation_method: str | None = None
    offset_days: int | None = None
    variance: float | None = None
    confidence: Confidence
    source: CycleSource
    breeding_plan_id: str | None = None
    birth_date: date | None = None
    notes: str = ""


# ---------- Plan windows ----------

class BreedingPlanRequest(KennelBase):
    species: str | None = None
    dob: str | None = None
    repro_anchor_mode: AnchorMode | None = None
    ovulation_confirmed: str | None = None
    ovulation_confirmed_method: str | None = Field(default=None, max_length=50)
    breed_date_actual: str | None = None
    cycle_start_observed: str | None = None
    locked_cycle_start: str | None = None
    locked_ovulation_date: str | None = None
    birth_date_actual: str | None = None
    earliest_cycle_start: str | None = None
    latest_cycle_start: str | None = None
    cycle_history: list[CycleHistoryIn] = Field(default_factory=list)


class PlanWindowsRead(KennelBase):
    """Flat windows shape consumed by calendar and Gantt rollups."""

    pre_breeding_full: tuple[str, str]
    pre_breeding_likely: tuple[str, str]
    hormone_testing_full: tuple[str, str]
    hormone_testing_likely: tuple[str, str]
    breeding_full: tuple[str, str]
    breeding_likely: tuple[str, str]
    birth_full: tuple[str, str]
    birth_likely: tuple[str, str]
    post_birth_care_full: tuple[str, str]
    post_birth_care_likely: tuple[str, str]
    placement_normal_full: tuple[str, str]
    placement_normal_likely: tuple[str, str]
    placement_extended_full: tuple[str, str]
    placement_extended_likely: tuple[str, str]

    cycle_start: str
    ovulation: str
    ovulation_confirmed: str | None = None
    birth_expected: str | None = None
    placement_start_expected: str | None = None
    placement_completed_expected: str | None = None
    placement_extended_end_expected: str | None = None

    anchor_mode: AnchorMode | None = None
    confidence: Confidence | None = None
    species: str | None = None
    ovulation_offset_days: int | None = None
    offset_source: OffsetSource | None = None


# ---------- Ovulation pattern ----------

class OvulationPatternRequest(KennelBase):
    species: str | None = None
    history: list[CycleHistoryIn] = Field(default_factory=list)


class OvulationPatternRead(KennelBase):
    sample_size: int
    confirmed_cycles: int
    classification: PatternClassification
    confidence: Confidence
    guidance: str
    avg_offset_days: float | None = None
    std_deviation: float | None = None
    min_offset: int | None = None
    max_offset: int | None = None
    species_default_offset: int | None = None


class OvulationPatternResponse(KennelBase):
    pattern: OvulationPatternRead
    history: list[CycleHistoryRead]


# ---------- Cycle projection ----------

class CycleProjectionRequest(KennelBase):
    species: str | None = None
    today: str | None = None  # defaults to the server's current day
    dob: str | None = None
    cycle_starts: list[str] = Field(default_factory=list)
    cycle_length_override_days: int | None = None
    cycle_history: list[CycleHistoryIn] = Field(default_factory=list)
    horizon_months: int | None = Field(default=None, ge=0, le=120)
    max_count: int | None = Field(default=None, ge=0, le=120)
    has_active_breeding_plan: bool = False


class EffectiveCycleLengthRead(KennelBase):
    days: int
    source: CycleLengthSource
    gaps_used_days: list[int] = Field(default_factory=list)
    history_avg_days: float | None = None
    warning_conflict: bool = False


class ProjectedCycleRead(KennelBase):
    date: date
    source: CycleLengthSource
    cycle_length_days: int
    species: str


class OvulationWindowRead(KennelBase):
    earliest: date
    latest: date
    most_likely: date


class NextCycleRead(KennelBase):
    projected_heat_start: date
    confidence: Confidence
    projected_ovulation_window: OvulationWindowRead | None = None
    recommended_testing_start: date | None = None


class CountdownRead(KennelBase):
    days: int
    text: str
    urgency: str
    is_overdue: bool
    needs_attention: bool


class CycleAlertRead(KennelBase):
    kind: str
    message: str
    due_date: date | None = None


class CycleExpectationRead(KennelBase):
    earliest: date
    likely: date
    latest: date


class CycleProjectionResponse(KennelBase):
    today: date
    horizon_end: date
    projected: list[ProjectedCycleRead]
    effective: EffectiveCycleLengthRead
    next_cycle: NextCycleRead | None = None
    countdown: CountdownRead | None = None
    alerts: list[CycleAlertRead] = Field(default_factory=list)
    expected_first_cycle: CycleExpectationRead | None = None
