"""Canonical value objects for the KennelHQ repro engine.

These types are the single source of truth passed between the anchor
resolver, timeline builder, range merger, pattern analyzer, projector and the
API layer.  Every object is immutable and returned fresh; the engine keeps no
state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from kennelhq.repro.dates import format_local_date


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AnchorMode(str, Enum):
    CYCLE_START = "CYCLE_START"
    OVULATION = "OVULATION"
    BREEDING_DATE = "BREEDING_DATE"
    BIRTH_DATE = "BIRTH_DATE"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CycleSource(str, Enum):
    HORMONE_TEST = "HORMONE_TEST"
    BIRTH_CALCULATED = "BIRTH_CALCULATED"
    ESTIMATED = "ESTIMATED"


class PatternClassification(str, Enum):
    EARLY = "Early Ovulator"
    AVERAGE = "Average"
    LATE = "Late Ovulator"
    INSUFFICIENT_DATA = "Insufficient Data"


class CycleLengthSource(str, Enum):
    OVERRIDE = "OVERRIDE"
    HISTORY = "HISTORY"
    BIOLOGY = "BIOLOGY"


class OffsetSource(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    SPECIES = "SPECIES"


class Phase(str, Enum):
    """Breeding phases in timeline order."""

    PRE_BREEDING = "pre_breeding"
    HORMONE_TESTING = "hormone_testing"
    BREEDING = "breeding"
    BIRTH = "birth"
    POST_BIRTH_CARE = "post_birth_care"
    PLACEMENT_NORMAL = "placement_normal"
    PLACEMENT_EXTENDED = "placement_extended"


# ---------------------------------------------------------------------------
# Ranges and timelines
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageRange:
    """Inclusive ``[start, end]`` window of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"StageRange start {self.start} is after end {self.end}")

    @classmethod
    def ordered(cls, a: date, b: date) -> StageRange:
        return cls(a, b) if a <= b else cls(b, a)

    def contains(self, other: StageRange) -> bool:
        return self.start <= other.start and other.end <= self.end

    def to_iso(self) -> tuple[str, str]:
        return format_local_date(self.start), format_local_date(self.end)


@dataclass(frozen=True)
class PhaseWindows:
    """Outer (``full``) and expected (``likely``) windows for one phase."""

    full: StageRange
    likely: StageRange

    def __post_init__(self) -> None:
        if not self.full.contains(self.likely):
            raise ValueError(
                f"full window {self.full.to_iso()} does not contain likely "
                f"window {self.likely.to_iso()}"
            )


@dataclass(frozen=True)
class Milestones:
    cycle_start: date
    ovulation: date
    ovulation_confirmed: date | None = None
    birth_expected: date | None = None
    placement_start_expected: date | None = None
    placement_completed_expected: date | None = None
    placement_extended_end_expected: date | None = None


@dataclass(frozen=True)
class TimelineExplain:
    """How a timeline was derived.

    Attributes:
        anchor_mode:           Anchor kind, None for a raw cycle-start seed.
        confidence:            Anchor confidence, None for a raw seed.
        species:               Species profile actually used (after fallback).
        ovulation_offset_days: Cycle-start-to-ovulation offset applied.
        offset_source:         Whether the offset is the female's own or the species'.
    """

    anchor_mode: AnchorMode | None = None
    confidence: Confidence | None = None
    species: str | None = None
    ovulation_offset_days: int | None = None
    offset_source: OffsetSource | None = None


@dataclass(frozen=True)
class Timeline:
    """A complete breeding schedule: one PhaseWindows per phase plus milestones."""

    pre_breeding: PhaseWindows
    hormone_testing: PhaseWindows
    breeding: PhaseWindows
    birth: PhaseWindows
    post_birth_care: PhaseWindows
    placement_normal: PhaseWindows
    placement_extended: PhaseWindows
    milestones: Milestones
    explain: TimelineExplain = field(default_factory=TimelineExplain)

    def window(self, phase: Phase) -> PhaseWindows:
        return getattr(self, phase.value)

    def phases(self) -> dict[Phase, PhaseWindows]:
        return {phase: self.window(phase) for phase in Phase}

    def to_flat(self) -> dict:
        """Render the wire shape consumed by calendar and Gantt rollups.

        Keys are ``<phase>_full`` / ``<phase>_likely`` (ISO start/end pairs),
        the milestone names, and ``anchor_mode`` / ``confidence``.
        """
        flat: dict = {}
        for phase, windows in self.phases().items():
            flat[f"{phase.value}_full"] = windows.full.to_iso()
            flat[f"{phase.value}_likely"] = windows.likely.to_iso()

        m = self.milestones
        for name in (
            "cycle_start",
            "ovulation",
            "ovulation_confirmed",
            "birth_expected",
            "placement_start_expected",
            "placement_completed_expected",
            "placement_extended_end_expected",
        ):
            value = getattr(m, name)
            flat[name] = format_local_date(value) if value is not None else None

        flat["anchor_mode"] = self.explain.anchor_mode.value if self.explain.anchor_mode else None
        flat["confidence"] = self.explain.confidence.value if self.explain.confidence else None
        return flat


# ---------------------------------------------------------------------------
# Anchors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnchorCandidates:
    """Every date signal a breeding plan may carry.

    ``cycle_start_observed`` is the current field; ``locked_cycle_start`` and
    ``locked_ovulation_date`` are legacy plan fields still honoured.
    ``repro_anchor_mode`` is a hint only: concrete dates always win.
    """

    birth_date_actual: date | None = None
    ovulation_confirmed: date | None = None
    ovulation_confirmed_method: str | None = None
    locked_ovulation_date: date | None = None
    breed_date_actual: date | None = None
    cycle_start_observed: date | None = None
    locked_cycle_start: date | None = None
    repro_anchor_mode: AnchorMode | None = None
    has_hormone_testing_history: bool = False


@dataclass(frozen=True)
class Anchor:
    mode: AnchorMode
    date: date
    confidence: Confidence
    method: str | None = None


# ---------------------------------------------------------------------------
# Cycle history and patterns
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleHistoryEntry:
    """One observed heat cycle.

    Attributes:
        id:              Caller-side identifier.
        cycle_start:     First day of the heat.
        ovulation:       Observed or back-calculated ovulation day.
        ovulation_method: Confirmation method (``PROGESTERONE_TEST`` ...).
        offset_days:     ``ovulation - cycle_start`` in days.
        variance:        ``offset_days - avg_offset_days`` against the current
                         pattern.  Recomputed, never stored.
        confidence:      HIGH (hormone tested), MEDIUM (back-calculated), LOW.
        source:          How the ovulation day was obtained.
        breeding_plan_id: Plan the cycle belongs to, if any.
        birth_date:      Actual birth date for birth-calculated cycles.
        notes:           Free text.
    """

    id: str
    cycle_start: date
    ovulation: date | None = None
    ovulation_method: str | None = None
    offset_days: int | None = None
    variance: float | None = None
    confidence: Confidence = Confidence.LOW
    source: CycleSource = CycleSource.ESTIMATED
    breeding_plan_id: str | None = None
    birth_date: date | None = None
    notes: str = ""


@dataclass(frozen=True)
class OvulationPattern:
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


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReproSummary:
    """Per-animal input context.

    ``today`` is supplied by the caller; the engine never reads the system
    clock.  Projection requires it, timeline building ignores it.
    """

    species: str | None
    today: date | None = None
    dob: date | None = None
    cycle_starts: tuple[date, ...] = ()
    cycle_length_override_days: int | None = None
    cycle_history: tuple[CycleHistoryEntry, ...] = ()


@dataclass(frozen=True)
class EffectiveCycleLength:
    days: int
    source: CycleLengthSource
    gaps_used_days: tuple[int, ...] = ()
    history_avg_days: float | None = None
    warning_conflict: bool = False


@dataclass(frozen=True)
class ProjectedCycle:
    date: date
    source: CycleLengthSource
    cycle_length_days: int
    species: str


@dataclass(frozen=True)
class CycleProjection:
    projected: tuple[ProjectedCycle, ...]
    effective: EffectiveCycleLength
    horizon_end: date


@dataclass(frozen=True)
class OvulationWindow:
    earliest: date
    latest: date
    most_likely: date


@dataclass(frozen=True)
class NextCycleProjection:
    projected_heat_start: date
    confidence: Confidence
    projected_ovulation_window: OvulationWindow | None = None
    recommended_testing_start: date | None = None


@dataclass(frozen=True)
class CycleExpectation:
    earliest: date
    likely: date
    latest: date
