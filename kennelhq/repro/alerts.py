"""Turn "days until next cycle" into badge flags and breeder alerts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from kennelhq.repro.base import NextCycleProjection, OvulationPattern, PatternClassification
from kennelhq.repro.config_loader import ReproConfig, get_repro_config
from kennelhq.repro.dates import days_between, format_local_date

logger = logging.getLogger("kennelhq.repro.alerts")


class Urgency(str, Enum):
    PAST = "past"
    IMMINENT = "imminent"
    SOON = "soon"
    NORMAL = "normal"


@dataclass(frozen=True)
class Countdown:
    text: str
    urgency: Urgency


@dataclass(frozen=True)
class CycleAlert:
    """A single actionable prompt for the breeder.

    Attributes:
        kind:     ``testing-soon``, ``heat-soon``, ``no-breeding-plan`` or
                  ``need-more-data``.
        message:  Human-readable text.
        due_date: The date the alert is about, when there is one.
    """

    kind: str
    message: str
    due_date: date | None = None


def days_until(target: date, today: date) -> int:
    """Signed days from today to target (negative when target has passed)."""
    return days_between(today, target)


def is_overdue(days: int) -> bool:
    return days < 0


def needs_attention(days: int, window_days: int | None = None) -> bool:
    """True when ``days`` falls within ``±window_days`` (inclusive)."""
    if window_days is None:
        window_days = get_repro_config().alerts.attention_window_days
    return -window_days <= days <= window_days


def countdown_label(days: int) -> Countdown:
    if days < 0:
        n = -days
        return Countdown(f"{n} day{'s' if n != 1 else ''} ago", Urgency.PAST)
    if days == 0:
        return Countdown("Today", Urgency.IMMINENT)
    if days == 1:
        return Countdown("Tomorrow", Urgency.IMMINENT)
    if days <= 7:
        return Countdown(f"{days} days", Urgency.IMMINENT)
    if days <= 30:
        return Countdown(f"{days} days", Urgency.SOON)
    return Countdown(f"{days} days", Urgency.NORMAL)


def _when(days: int) -> str:
    text = countdown_label(days).text
    return text.lower() if days <= 1 else f"in {text}"


def build_cycle_alerts(
    projection: NextCycleProjection | None,
    pattern: OvulationPattern | None,
    today: date,
    has_active_breeding_plan: bool = False,
    config: ReproConfig | None = None,
) -> list[CycleAlert]:
    """Collect the alerts a female's next projected cycle warrants."""
    ac = (config or get_repro_config()).alerts
    alerts: list[CycleAlert] = []

    testing_imminent = False
    if projection is not None:
        heat = projection.projected_heat_start
        heat_days = days_until(heat, today)

        testing = projection.recommended_testing_start
        if testing is not None:
            testing_days = days_until(testing, today)
            if 0 <= testing_days <= ac.testing_soon_days:
                testing_imminent = True
                alerts.append(
                    CycleAlert(
                        kind="testing-soon",
                        message=(
                            f"Start hormone testing {_when(testing_days)} "
                            f"({format_local_date(testing)})."
                        ),
                        due_date=testing,
                    )
                )

        if 0 <= heat_days <= ac.heat_soon_days and not testing_imminent:
            alerts.append(
                CycleAlert(
                    kind="heat-soon",
                    message=(
                        f"Next heat expected {_when(heat_days)} "
                        f"({format_local_date(heat)})."
                    ),
                    due_date=heat,
                )
            )

        if 0 <= heat_days <= ac.breeding_plan_prompt_days and not has_active_breeding_plan:
            alerts.append(
                CycleAlert(
                    kind="no-breeding-plan",
                    message="A heat is coming up with no active breeding plan.",
                    due_date=heat,
                )
            )

    if (
        pattern is not None
        and pattern.classification is PatternClassification.INSUFFICIENT_DATA
        and pattern.sample_size >= 1
    ):
        alerts.append(CycleAlert(kind="need-more-data", message=pattern.guidance))

    if alerts:
        logger.debug("Cycle alerts: %s", ", ".join(a.kind for a in alerts))
    return alerts
