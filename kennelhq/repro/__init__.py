"""KennelHQ Repro Engine.

Pure, stateless date math for breeding plans: anchor resolution, phase
windows, ovulation pattern learning and cycle projection.  Callers always
pass ``today`` explicitly; nothing here reads the system clock or does I/O
beyond loading the bundled YAML config.

Core modules:
    dates         — ``YYYY-MM-DD`` parsing and calendar arithmetic
    config_loader — Load/validate/hot-reload repro_config.yaml (species table)
    base          — Canonical value objects and enums
    anchor        — Pick the single most trusted date signal
    timeline      — Phase windows from an anchor or a cycle-start seed
    merge         — Span two timelines
    pattern       — Ovulation pattern analysis and cycle recording
    projector     — Effective cycle length and upcoming cycle starts
    alerts        — Countdown labels, attention flags and breeder alerts
    plan_windows  — Timeline straight from a breeding plan record
"""

from kennelhq.repro.anchor import resolve_anchor
from kennelhq.repro.base import (
    Anchor,
    AnchorCandidates,
    AnchorMode,
    Confidence,
    CycleHistoryEntry,
    CycleSource,
    OvulationPattern,
    PatternClassification,
    Phase,
    PhaseWindows,
    ReproSummary,
    StageRange,
    Timeline,
)
from kennelhq.repro.config_loader import ReproConfig, get_repro_config
from kennelhq.repro.dates import InvalidDate, format_local_date, parse_local_date
from kennelhq.repro.merge import merge_timelines
from kennelhq.repro.pattern import analyze_pattern
from kennelhq.repro.plan_windows import BreedingPlanInput, windows_from_plan
from kennelhq.repro.projector import InvalidCycleLength, project_upcoming_cycle_starts
from kennelhq.repro.timeline import build_timeline, build_timeline_from_seed

__all__ = [
    "Anchor",
    "AnchorCandidates",
    "AnchorMode",
    "BreedingPlanInput",
    "Confidence",
    "CycleHistoryEntry",
    "CycleSource",
    "InvalidCycleLength",
    "InvalidDate",
    "OvulationPattern",
    "PatternClassification",
    "Phase",
    "PhaseWindows",
    "ReproConfig",
    "ReproSummary",
    "StageRange",
    "Timeline",
    "analyze_pattern",
    "build_timeline",
    "build_timeline_from_seed",
    "format_local_date",
    "get_repro_config",
    "merge_timelines",
    "parse_local_date",
    "project_upcoming_cycle_starts",
    "resolve_anchor",
    "windows_from_plan",
]
