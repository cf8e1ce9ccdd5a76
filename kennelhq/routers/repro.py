"""Stateless repro engine endpoints: plan windows, ovulation patterns, cycle projections."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from kennelhq.dependencies import AppSettings, EngineConfig, Today
from kennelhq.models.repro import (
    BreedingPlanRequest,
    CountdownRead,
    CycleHistoryIn,
    CycleProjectionRequest,
    CycleProjectionResponse,
    OvulationPatternRequest,
    OvulationPatternResponse,
    PlanWindowsRead,
)
from kennelhq.repro.alerts import (
    build_cycle_alerts,
    countdown_label,
    days_until,
    is_overdue,
    needs_attention,
)
from kennelhq.repro.base import CycleHistoryEntry, ReproSummary
from kennelhq.repro.config_loader import ReproConfig
from kennelhq.repro.dates import InvalidDate, as_local_date, coerce_local_date
from kennelhq.repro.pattern import analyze_pattern, apply_variances, record_cycle
from kennelhq.repro.plan_windows import BreedingPlanInput, windows_from_plan
from kennelhq.repro.projector import (
    InvalidCycleLength,
    expected_first_cycle,
    project_next_cycle,
    project_upcoming_cycle_starts,
)

router = APIRouter(prefix="/repro", tags=["repro"])
logger = logging.getLogger("kennelhq.repro.api")


def _unprocessable(exc: ValueError) -> HTTPException:
    logger.info("Rejected repro request: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))


def _history(
    items: list[CycleHistoryIn], species: str | None, config: ReproConfig
) -> tuple[CycleHistoryEntry, ...]:
    """Derive canonical history entries (offset, source, confidence) from raw input."""
    return tuple(
        record_cycle(
            item.id,
            as_local_date(item.cycle_start),
            species,
            ovulation=coerce_local_date(item.ovulation),
            ovulation_method=item.ovulation_method,
            birth_date=coerce_local_date(item.birth_date),
            breeding_plan_id=item.breeding_plan_id,
            notes=item.notes,
            config=config,
        )
        for item in items
    )


# ---------- Plan windows ----------

@router.post("/plan-windows", response_model=PlanWindowsRead | None)
async def plan_windows(body: BreedingPlanRequest, config: EngineConfig) -> Any:
    """Phase windows for a breeding plan, or null when it has no usable date."""
    try:
        plan = BreedingPlanInput(
            species=body.species,
            dob=body.dob,
            repro_anchor_mode=body.repro_anchor_mode,
            ovulation_confirmed=body.ovulation_confirmed,
            ovulation_confirmed_method=body.ovulation_confirmed_method,
            breed_date_actual=body.breed_date_actual,
            cycle_start_observed=body.cycle_start_observed,
            locked_cycle_start=body.locked_cycle_start,
            locked_ovulation_date=body.locked_ovulation_date,
            birth_date_actual=body.birth_date_actual,
            earliest_cycle_start=body.earliest_cycle_start,
            latest_cycle_start=body.latest_cycle_start,
            cycle_history=_history(body.cycle_history, body.species, config),
        )
        timeline = windows_from_plan(plan, config)
    except InvalidDate as exc:
        raise _unprocessable(exc) from exc

    if timeline is None:
        return None
    explain = timeline.explain
    return PlanWindowsRead(
        **timeline.to_flat(),
        species=explain.species,
        ovulation_offset_days=explain.ovulation_offset_days,
        offset_source=explain.offset_source,
    )


# ---------- Ovulation pattern ----------

@router.post("/ovulation-pattern", response_model=OvulationPatternResponse)
async def ovulation_pattern(body: OvulationPatternRequest, config: EngineConfig) -> Any:
    """Classify a female's ovulation timing from her cycle history."""
    try:
        history = _history(body.history, body.species, config)
    except InvalidDate as exc:
        raise _unprocessable(exc) from exc

    pattern = analyze_pattern(history, body.species, config)
    return {
        "pattern": pattern,
        "history": apply_variances(history, pattern),
    }


# ---------- Cycle projection ----------

@router.post("/cycle-projection", response_model=CycleProjectionResponse)
async def cycle_projection(
    body: CycleProjectionRequest,
    today: Today,
    settings: AppSettings,
    config: EngineConfig,
) -> Any:
    """Upcoming cycle starts, next-heat ovulation window and breeder alerts."""
    try:
        as_of = coerce_local_date(body.today) or today
        history = _history(body.cycle_history, body.species, config)
        summary = ReproSummary(
            species=body.species,
            today=as_of,
            dob=coerce_local_date(body.dob),
            cycle_starts=tuple(sorted(as_local_date(d) for d in body.cycle_starts)),
            cycle_length_override_days=body.cycle_length_override_days,
            cycle_history=history,
        )
        projection = project_upcoming_cycle_starts(
            summary,
            horizon_months=(
                body.horizon_months
                if body.horizon_months is not None
                else settings.projection_horizon_months
            ),
            max_count=(
                body.max_count if body.max_count is not None else settings.projection_max_count
            ),
            config=config,
        )
        pattern = analyze_pattern(history, body.species, config)
        next_cycle = project_next_cycle(summary, pattern, config)
    except (InvalidDate, InvalidCycleLength) as exc:
        raise _unprocessable(exc) from exc

    countdown = None
    if next_cycle is not None:
        days = days_until(next_cycle.projected_heat_start, as_of)
        label = countdown_label(days)
        countdown = CountdownRead(
            days=days,
            text=label.text,
            urgency=label.urgency.value,
            is_overdue=is_overdue(days),
            needs_attention=needs_attention(days, config.alerts.attention_window_days),
        )

    return {
        "today": as_of,
        "horizon_end": projection.horizon_end,
        "projected": list(projection.projected),
        "effective": projection.effective,
        "next_cycle": next_cycle,
        "countdown": countdown,
        "alerts": build_cycle_alerts(
            next_cycle, pattern, as_of, body.has_active_breeding_plan, config
        ),
        "expected_first_cycle": expected_first_cycle(summary, config),
    }
