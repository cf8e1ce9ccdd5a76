"""Compute phase windows straight from a breeding plan record.

This is the entry point the calendar and Gantt rollups call.  It resolves an
anchor when the plan has one; otherwise it falls back to the plan's projected
cycle-start range.  When neither exists it returns ``None`` and never makes up
a date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from kennelhq.repro.anchor import resolve_anchor
from kennelhq.repro.base import (
    AnchorCandidates,
    AnchorMode,
    CycleHistoryEntry,
    CycleSource,
    ReproSummary,
    Timeline,
)
from kennelhq.repro.config_loader import ReproConfig, get_repro_config
from kennelhq.repro.dates import coerce_local_date
from kennelhq.repro.merge import merge_timelines
from kennelhq.repro.timeline import build_timeline, build_timeline_from_seed

logger = logging.getLogger("kennelhq.repro.plan_windows")

DateLike = date | str | None


@dataclass(frozen=True)
class BreedingPlanInput:
    """Date signals a breeding plan carries.

    Dates may be ``date`` objects or ``YYYY-MM-DD`` text; empty text counts
    as absent.  ``locked_cycle_start`` and ``locked_ovulation_date`` are
    legacy fields kept for older plans.
    """

    species: str | None = None
    dob: DateLike = None
    repro_anchor_mode: AnchorMode | str | None = None
    ovulation_confirmed: DateLike = None
    ovulation_confirmed_method: str | None = None
    breed_date_actual: DateLike = None
    cycle_start_observed: DateLike = None
    locked_cycle_start: DateLike = None
    locked_ovulation_date: DateLike = None
    birth_date_actual: DateLike = None
    earliest_cycle_start: DateLike = None
    latest_cycle_start: DateLike = None
    cycle_history: tuple[CycleHistoryEntry, ...] = ()


def _anchor_mode(value: AnchorMode | str | None) -> AnchorMode | None:
    if value is None or isinstance(value, AnchorMode):
        return value
    text = value.strip().upper()
    if not text:
        return None
    try:
        return AnchorMode(text)
    except ValueError:
        logger.debug("Unknown anchor mode hint %r ignored", value)
        return None


def candidates_from_plan(plan: BreedingPlanInput) -> AnchorCandidates:
    """Parse a plan's date fields into anchor candidates.

    Raises:
        InvalidDate: If any date text is malformed.
    """
    return AnchorCandidates(
        birth_date_actual=coerce_local_date(plan.birth_date_actual),
        ovulation_confirmed=coerce_local_date(plan.ovulation_confirmed),
        ovulation_confirmed_method=plan.ovulation_confirmed_method,
        locked_ovulation_date=coerce_local_date(plan.locked_ovulation_date),
        breed_date_actual=coerce_local_date(plan.breed_date_actual),
        cycle_start_observed=coerce_local_date(plan.cycle_start_observed),
        locked_cycle_start=coerce_local_date(plan.locked_cycle_start),
        repro_anchor_mode=_anchor_mode(plan.repro_anchor_mode),
        has_hormone_testing_history=any(
            e.source is CycleSource.HORMONE_TEST for e in plan.cycle_history
        ),
    )


def windows_from_plan(
    plan: BreedingPlanInput,
    config: ReproConfig | None = None,
) -> Timeline | None:
    """Build the plan's timeline, or None when it has no usable date.

    Order: resolved anchor, then the merged earliest/latest seed range, then
    whichever single seed is present.

    Raises:
        InvalidDate: If any date text on the plan is malformed.
    """
    cfg = config or get_repro_config()
    summary = ReproSummary(
        species=plan.species,
        dob=coerce_local_date(plan.dob),
        cycle_history=tuple(plan.cycle_history),
    )

    anchor = resolve_anchor(candidates_from_plan(plan), cfg)
    if anchor is not None:
        return build_timeline(summary, anchor, cfg)

    earliest = coerce_local_date(plan.earliest_cycle_start)
    latest = coerce_local_date(plan.latest_cycle_start)
    if earliest is not None and latest is not None:
        return merge_timelines(
            build_timeline_from_seed(summary, earliest, cfg),
            build_timeline_from_seed(summary, latest, cfg),
        )
    seed = earliest or latest
    if seed is not None:
        return build_timeline_from_seed(summary, seed, cfg)

    logger.debug("Plan has no anchor or cycle-start range; no windows")
    return None
