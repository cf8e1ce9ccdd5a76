"""Ovulation pattern analysis for an individual female.

Classifies how a female's observed cycle-start-to-ovulation offset compares to
her species norm, and records/corrects cycle history entries so offsets,
sources and confidence are always derived from the same inputs.

Statistics use the population standard deviation (``statistics.pstdev``) over
the observed offsets, not the Bessel-corrected sample formula.  Patterns are
recomputed on every query and never cached across history changes.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from kennelhq.repro.base import (
    Confidence,
    CycleHistoryEntry,
    CycleSource,
    OvulationPattern,
    PatternClassification,
)
from kennelhq.repro.config_loader import ReproConfig, SpeciesProfile, get_repro_config
from kennelhq.repro.dates import add_days, days_between

logger = logging.getLogger("kennelhq.repro.pattern")

INSUFFICIENT_GUIDANCE = (
    "Record at least {n} cycles with a confirmed ovulation (hormone testing or "
    "an actual birth date) to learn this female's pattern."
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (``Math.round`` semantics)."""
    return int(math.floor(value + 0.5))


def _plural(n: int, word: str = "day") -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_offset(
    avg_offset_days: float, species_default: int, dead_zone_days: float = 1.0
) -> PatternClassification:
    """Compare an average offset to the species default with a ±dead zone."""
    diff = avg_offset_days - species_default
    if diff < -dead_zone_days:
        return PatternClassification.EARLY
    if diff > dead_zone_days:
        return PatternClassification.LATE
    return PatternClassification.AVERAGE


def _guidance(
    classification: PatternClassification,
    avg_offset_days: float,
    std_deviation: float | None,
    profile: SpeciesProfile,
    config: ReproConfig,
) -> str:
    default = profile.ovulation_offset_days
    lead = profile.hormone_testing_lead_days
    individual_day = round_half_up(avg_offset_days)
    testing_day = max(0, individual_day - lead)
    shift = abs(round_half_up(avg_offset_days) - default)

    if classification is PatternClassification.EARLY:
        text = (
            f"Ovulates about {_plural(shift)} earlier than the breed average "
            f"(Day {default}). Start testing {_plural(shift)} earlier than breed "
            f"average, around Day {testing_day}."
        )
    elif classification is PatternClassification.LATE:
        text = (
            f"Ovulates about {_plural(shift)} later than the breed average "
            f"(Day {default}). Start testing {_plural(shift)} later than breed "
            f"average, around Day {testing_day}."
        )
    else:
        text = (
            f"Ovulation timing matches the breed average (Day {default}). "
            f"Start testing around Day {testing_day}."
        )

    if not profile.testing_available:
        text = text.replace("Start testing", "Plan breeding attempts").replace(
            "around Day", "from Day"
        )

    if std_deviation is not None and std_deviation > config.pattern.high_confidence_max_std_days:
        spread = math.ceil(std_deviation)
        text += (
            f" Timing varies by ±{std_deviation:.1f} days between cycles, so begin "
            f"{_plural(spread)} earlier to avoid missing ovulation."
        )
    return text


def analyze_pattern(
    history: Iterable[CycleHistoryEntry],
    species: str | None,
    config: ReproConfig | None = None,
) -> OvulationPattern:
    """Compute sample statistics and a classification for a female's cycles.

    Args:
        history: Cycle history entries in any order.
        species: Species code used for the default offset (fallback applies).
        config:  Engine config (defaults to the bundled one).

    Returns:
        A fresh OvulationPattern.  Fewer than ``min_samples`` offsets yields
        ``Insufficient Data`` with LOW confidence.
    """
    cfg = config or get_repro_config()
    pc = cfg.pattern
    profile = cfg.species(species)

    with_offsets = [e for e in history if e.offset_days is not None]
    offsets = [e.offset_days for e in with_offsets]
    sample_size = len(offsets)
    confirmed = sum(1 for e in with_offsets if e.source is CycleSource.HORMONE_TEST)
    birth_calculated = sum(
        1 for e in with_offsets if e.source is CycleSource.BIRTH_CALCULATED
    )

    if sample_size < pc.min_samples:
        return OvulationPattern(
            sample_size=sample_size,
            confirmed_cycles=confirmed,
            classification=PatternClassification.INSUFFICIENT_DATA,
            confidence=Confidence.LOW,
            guidance=INSUFFICIENT_GUIDANCE.format(n=pc.min_samples),
            min_offset=min(offsets) if offsets else None,
            max_offset=max(offsets) if offsets else None,
            species_default_offset=profile.ovulation_offset_days,
        )

    avg = round(statistics.mean(offsets), 2)
    std = round(statistics.pstdev(offsets), 2)

    classification = classify_offset(
        avg, profile.ovulation_offset_days, pc.classification_dead_zone_days
    )

    if (
        confirmed >= pc.high_confidence_min_confirmed
        and std <= pc.high_confidence_max_std_days
    ):
        confidence = Confidence.HIGH
    elif confirmed >= pc.medium_confidence_min_confirmed or birth_calculated > 0:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    logger.debug(
        "Pattern %s: n=%d confirmed=%d avg=%.2f std=%.2f (%s default %d)",
        classification.value, sample_size, confirmed, avg, std,
        profile.code, profile.ovulation_offset_days,
    )

    return OvulationPattern(
        sample_size=sample_size,
        confirmed_cycles=confirmed,
        classification=classification,
        confidence=confidence,
        guidance=_guidance(classification, avg, std, profile, cfg),
        avg_offset_days=avg,
        std_deviation=std,
        min_offset=min(offsets),
        max_offset=max(offsets),
        species_default_offset=profile.ovulation_offset_days,
    )


def apply_variances(
    history: Iterable[CycleHistoryEntry], pattern: OvulationPattern
) -> list[CycleHistoryEntry]:
    """Return entries whose ``variance`` is measured against ``pattern``."""
    avg = pattern.avg_offset_days
    out: list[CycleHistoryEntry] = []
    for entry in history:
        if entry.offset_days is None or avg is None:
            variance = None
        else:
            variance = round(entry.offset_days - avg, 2)
        out.append(replace(entry, variance=variance))
    return out


def individual_offset_days(
    pattern: OvulationPattern, config: ReproConfig | None = None
) -> int | None:
    """The female's own offset, once at least two ovulations were confirmed.

    Only hormone-tested cycles count as confirmed.
    """
    cfg = config or get_repro_config()
    if pattern.avg_offset_days is None:
        return None
    if pattern.confirmed_cycles < cfg.pattern.min_samples:
        return None
    return round_half_up(pattern.avg_offset_days)


# ---------------------------------------------------------------------------
# Recording and correcting cycles
# ---------------------------------------------------------------------------


def record_cycle(
    id: str,
    cycle_start: date,
    species: str | None,
    *,
    ovulation: date | None = None,
    ovulation_method: str | None = None,
    birth_date: date | None = None,
    breeding_plan_id: str | None = None,
    notes: str = "",
    config: ReproConfig | None = None,
) -> CycleHistoryEntry:
    """Build a history entry, deriving offset, source and confidence.

    A confirmed ovulation makes the entry HORMONE_TEST / HIGH.  Without one,
    an actual birth date back-calculates ovulation through the species
    gestation (BIRTH_CALCULATED / MEDIUM).  Otherwise the cycle is only an
    observed heat start (ESTIMATED / LOW, no offset).
    """
    cfg = config or get_repro_config()
    profile = cfg.species(species)

    if ovulation is not None:
        source = CycleSource.HORMONE_TEST
        confidence = Confidence.HIGH
    elif birth_date is not None:
        ovulation = add_days(birth_date, -profile.gestation_days)
        source = CycleSource.BIRTH_CALCULATED
        confidence = Confidence.MEDIUM
    else:
        source = CycleSource.ESTIMATED
        confidence = Confidence.LOW

    offset = days_between(cycle_start, ovulation) if ovulation is not None else None
    if offset is not None and offset < 0:
        logger.warning(
            "Cycle %s: ovulation %s precedes cycle start %s (offset %d)",
            id, ovulation, cycle_start, offset,
        )

    return CycleHistoryEntry(
        id=id,
        cycle_start=cycle_start,
        ovulation=ovulation,
        ovulation_method=ovulation_method if source is CycleSource.HORMONE_TEST else None,
        offset_days=offset,
        variance=None,
        confidence=confidence,
        source=source,
        breeding_plan_id=breeding_plan_id,
        birth_date=birth_date,
        notes=notes,
    )


_UNSET = object()


def correct_cycle(
    entry: CycleHistoryEntry,
    species: str | None,
    *,
    cycle_start: date | None = None,
    ovulation=_UNSET,
    ovulation_method=_UNSET,
    birth_date=_UNSET,
    config: ReproConfig | None = None,
) -> CycleHistoryEntry:
    """Apply a date correction and re-derive every computed field.

    Fields not passed keep their current value; pass ``None`` explicitly to
    clear an ovulation, method or birth date.  A birth-calculated ovulation
    is always re-derived from the birth date rather than kept.
    """
    new_ovulation = entry.ovulation if ovulation is _UNSET else ovulation
    if ovulation is _UNSET and entry.source is not CycleSource.HORMONE_TEST:
        new_ovulation = None
    return record_cycle(
        entry.id,
        cycle_start or entry.cycle_start,
        species,
        ovulation=new_ovulation,
        ovulation_method=entry.ovulation_method if ovulation_method is _UNSET else ovulation_method,
        birth_date=entry.birth_date if birth_date is _UNSET else birth_date,
        breeding_plan_id=entry.breeding_plan_id,
        notes=entry.notes,
        config=config,
    )


# ---------------------------------------------------------------------------
# Anchor upgrade check
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OffsetComparison:
    """Observed ovulation timing against the species default.

    Attributes:
        offset_days:   ``ovulation - cycle_start``.
        variance_days: ``offset_days - species default``.
        verdict:       ``on-time``, ``early`` or ``late``.
    """

    offset_days: int
    variance_days: int
    verdict: str


def compare_to_species(
    cycle_start: date,
    ovulation: date,
    species: str | None,
    config: ReproConfig | None = None,
) -> OffsetComparison:
    """Check a confirmed ovulation against the species norm for its cycle."""
    cfg = config or get_repro_config()
    profile = cfg.species(species)
    offset = days_between(cycle_start, ovulation)
    variance = offset - profile.ovulation_offset_days
    dead_zone = cfg.pattern.classification_dead_zone_days
    if variance < -dead_zone:
        verdict = "early"
    elif variance > dead_zone:
        verdict = "late"
    else:
        verdict = "on-time"
    return OffsetComparison(offset_days=offset, variance_days=variance, verdict=verdict)
