"""Project future cycle starts for a female.

The cycle length used for projection resolves in this order:

1. ``OVERRIDE``: the breeder's per-animal override.
2. ``HISTORY``: mean of the most recent gaps between recorded cycle starts.
3. ``BIOLOGY``: the species default.

Projection is bounded by both ``max_count`` and the horizon so it always
terminates; a non-positive cycle length raises ``InvalidCycleLength``.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Sequence

from kennelhq.repro.base import (
    CycleExpectation,
    CycleLengthSource,
    CycleProjection,
    EffectiveCycleLength,
    NextCycleProjection,
    OvulationPattern,
    OvulationWindow,
    ProjectedCycle,
    ReproSummary,
)
from kennelhq.repro.config_loader import DayWindow, ReproConfig, get_repro_config
from kennelhq.repro.dates import add_days, add_months, days_between
from kennelhq.repro.pattern import analyze_pattern, individual_offset_days, round_half_up

logger = logging.getLogger("kennelhq.repro.projector")


class InvalidCycleLength(ValueError):
    """Raised when the effective cycle length is zero or negative."""


def _require_today(summary: ReproSummary) -> date:
    if summary.today is None:
        raise ValueError("ReproSummary.today is required for projections")
    return summary.today


def compute_effective_cycle_length(
    species: str | None,
    cycle_starts: Sequence[date] = (),
    override_days: int | None = None,
    config: ReproConfig | None = None,
) -> EffectiveCycleLength:
    """Resolve the cycle length to project with.

    Args:
        species:       Species code (fallback profile applies).
        cycle_starts:  Recorded cycle starts, any order.
        override_days: Breeder override; wins over history and biology.
        config:        Engine config (defaults to the bundled one).

    Raises:
        InvalidCycleLength: If an override is zero or negative.
    """
    cfg = config or get_repro_config()
    profile = cfg.species(species)

    starts = sorted(cycle_starts)
    gaps = [days_between(a, b) for a, b in zip(starts, starts[1:])]
    recent = tuple(gaps[-cfg.projection.history_window_cycles:]) if gaps else ()
    history_avg = round(sum(recent) / len(recent), 2) if recent else None

    if override_days is not None:
        if override_days <= 0:
            raise InvalidCycleLength(
                f"Cycle length override must be positive, got {override_days}"
            )
        conflict = False
        if history_avg:
            diff = abs(override_days - history_avg)
            conflict = diff * 100 > cfg.projection.override_conflict_pct * history_avg
            if conflict:
                logger.warning(
                    "Cycle length override %d differs from recorded average %.1f by %.0f%%",
                    override_days, history_avg, diff * 100 / history_avg,
                )
        return EffectiveCycleLength(
            days=override_days,
            source=CycleLengthSource.OVERRIDE,
            gaps_used_days=recent,
            history_avg_days=history_avg,
            warning_conflict=conflict,
        )

    if history_avg is not None:
        days = round_half_up(history_avg)
        if days > 0:
            return EffectiveCycleLength(
                days=days,
                source=CycleLengthSource.HISTORY,
                gaps_used_days=recent,
                history_avg_days=history_avg,
            )
        logger.warning(
            "Ignoring non-positive cycle history average %.1f for %s", history_avg, profile.code
        )

    return EffectiveCycleLength(
        days=profile.cycle_length_days,
        source=CycleLengthSource.BIOLOGY,
        gaps_used_days=recent,
        history_avg_days=history_avg,
    )


def project_upcoming_cycle_starts(
    summary: ReproSummary,
    horizon_months: int | None = None,
    max_count: int | None = None,
    config: ReproConfig | None = None,
) -> CycleProjection:
    """Project cycle starts forward from the latest known start.

    Dates already in the past relative to ``summary.today`` are kept: a
    projected start that has passed without a recorded heat means overdue.

    Raises:
        InvalidCycleLength: If the effective cycle length is not positive.
        ValueError:         If ``horizon_months`` or ``max_count`` is negative.
    """
    cfg = config or get_repro_config()
    today = _require_today(summary)
    horizon_months = cfg.projection.default_horizon_months if horizon_months is None else horizon_months
    max_count = cfg.projection.default_max_count if max_count is None else max_count
    if horizon_months < 0:
        raise ValueError(f"horizon_months must not be negative, got {horizon_months}")
    if max_count < 0:
        raise ValueError(f"max_count must not be negative, got {max_count}")

    profile = cfg.species(summary.species)
    effective = compute_effective_cycle_length(
        summary.species, summary.cycle_starts, summary.cycle_length_override_days, cfg
    )
    if effective.days <= 0:
        raise InvalidCycleLength(f"Cycle length must be positive, got {effective.days}")

    horizon_end = add_months(today, horizon_months)
    current = max(summary.cycle_starts) if summary.cycle_starts else today

    projected: list[ProjectedCycle] = []
    while len(projected) < max_count:
        current = add_days(current, effective.days)
        if current > horizon_end:
            break
        projected.append(
            ProjectedCycle(
                date=current,
                source=effective.source,
                cycle_length_days=effective.days,
                species=profile.code,
            )
        )

    logger.debug(
        "Projected %d cycle start(s) for %s every %d days (%s) until %s",
        len(projected), profile.code, effective.days, effective.source.value, horizon_end,
    )
    return CycleProjection(projected=tuple(projected), effective=effective, horizon_end=horizon_end)


def project_next_cycle(
    summary: ReproSummary,
    pattern: OvulationPattern | None = None,
    config: ReproConfig | None = None,
) -> NextCycleProjection | None:
    """Project the next heat on or after today with its ovulation window.

    Returns None when the animal has no recorded cycle starts.
    """
    cfg = config or get_repro_config()
    today = _require_today(summary)
    if not summary.cycle_starts:
        return None

    profile = cfg.species(summary.species)
    if pattern is None:
        pattern = analyze_pattern(summary.cycle_history, profile.code, cfg)
    effective = compute_effective_cycle_length(
        summary.species, summary.cycle_starts, summary.cycle_length_override_days, cfg
    )

    last = max(summary.cycle_starts)
    steps = max(1, math.ceil(days_between(last, today) / effective.days))
    heat_start = add_days(last, steps * effective.days)

    window = None
    testing_start = None
    if not profile.induced_ovulator:
        offset = individual_offset_days(pattern, cfg)
        if offset is None:
            offset = profile.ovulation_offset_days
        most_likely = add_days(heat_start, offset)
        if pattern.std_deviation is not None:
            half_width = math.ceil(pattern.std_deviation)
        else:
            half_width = cfg.timeline.uncertainty_days(pattern.confidence.value)
        window = OvulationWindow(
            earliest=add_days(most_likely, -half_width),
            latest=add_days(most_likely, half_width),
            most_likely=most_likely,
        )
        if profile.testing_available:
            testing_start = add_days(most_likely, -profile.hormone_testing_lead_days)

    return NextCycleProjection(
        projected_heat_start=heat_start,
        confidence=pattern.confidence,
        projected_ovulation_window=window,
        recommended_testing_start=testing_start,
    )


def _expectation(origin: date, window: DayWindow) -> CycleExpectation:
    return CycleExpectation(
        earliest=add_days(origin, window.min),
        likely=add_days(origin, window.likely),
        latest=add_days(origin, window.max),
    )


def expected_first_cycle(
    summary: ReproSummary, config: ReproConfig | None = None
) -> CycleExpectation | None:
    """Age window for a juvenile's first heat, from date of birth."""
    cfg = config or get_repro_config()
    window = cfg.species(summary.species).juvenile_first_cycle_days
    if summary.dob is None or window is None:
        return None
    return _expectation(summary.dob, window)


def expected_postpartum_return(
    species: str | None, birth_date: date, config: ReproConfig | None = None
) -> CycleExpectation | None:
    """When a dam's cycle should resume after giving birth."""
    cfg = config or get_repro_config()
    window = cfg.species(species).postpartum_return_days
    if window is None:
        return None
    return _expectation(birth_date, window)
