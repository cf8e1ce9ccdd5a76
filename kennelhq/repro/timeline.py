"""Build a full breeding timeline from a resolved anchor or a cycle-start seed.

Every phase gets two windows: ``likely`` (the expected days) and ``full`` (the
outer bound after confidence-dependent slop).  Windows are derived in
timeline order so every ``full`` range contains its ``likely`` range without
any post-hoc clamping.

Terms used below:

    O  ovulation center
    C  cycle start (O - offset)
    B  birth (O + gestation, or the actual birth date)
    P  placement start (B + post-birth care)
    u  ovulation uncertainty for the anchor confidence
"""

from __future__ import annotations

import logging
from datetime import date

from kennelhq.repro.base import (
    Anchor,
    AnchorMode,
    Confidence,
    Milestones,
    OffsetSource,
    PhaseWindows,
    ReproSummary,
    StageRange,
    Timeline,
    TimelineExplain,
)
from kennelhq.repro.config_loader import ReproConfig, SpeciesProfile, get_repro_config
from kennelhq.repro.dates import add_days, max_date
from kennelhq.repro.pattern import analyze_pattern, individual_offset_days

logger = logging.getLogger("kennelhq.repro.timeline")


def resolve_offset(
    summary: ReproSummary,
    profile: SpeciesProfile,
    config: ReproConfig,
) -> tuple[int, OffsetSource]:
    """Pick the cycle-start-to-ovulation offset for this female.

    Her own rounded average wins once her history holds enough confirmed
    ovulations; otherwise the species default applies.
    """
    if summary.cycle_history:
        pattern = analyze_pattern(summary.cycle_history, profile.code, config)
        individual = individual_offset_days(pattern, config)
        if individual is not None:
            return individual, OffsetSource.INDIVIDUAL
    return profile.ovulation_offset_days, OffsetSource.SPECIES


def _window(likely_start: date, likely_end: date, full_start: date, full_end: date) -> PhaseWindows:
    return PhaseWindows(
        full=StageRange(full_start, full_end),
        likely=StageRange(likely_start, likely_end),
    )


def _assemble(
    *,
    ovulation: date,
    offset: int,
    offset_source: OffsetSource,
    profile: SpeciesProfile,
    config: ReproConfig,
    anchor: Anchor | None,
) -> Timeline:
    tl = config.timeline
    confidence = anchor.confidence if anchor is not None else None
    u = tl.uncertainty_days(confidence.value if confidence else Confidence.LOW.value)

    o = ovulation
    c = add_days(o, -offset)

    # ── Pre-breeding ──
    pre_end = max_date(c, add_days(o, -1))
    pre_breeding = _window(
        c, pre_end, add_days(c, -profile.start_buffer_days), add_days(pre_end, u)
    )

    # ── Hormone testing ──
    test_start = add_days(o, -profile.hormone_testing_lead_days)
    hormone_testing = _window(
        test_start,
        o,
        add_days(test_start, -(tl.hormone_testing_slop_days + u)),
        add_days(o, u),
    )

    # ── Breeding ──
    breed_end = add_days(o, tl.breeding_likely_days)
    breed_slop = tl.breeding_slop_days + u
    breeding = _window(
        o, breed_end, add_days(o, -breed_slop), add_days(breed_end, breed_slop)
    )

    # ── Birth ──
    if anchor is not None and anchor.mode is AnchorMode.BIRTH_DATE:
        b = anchor.date
        birth = _window(b, b, b, b)
    else:
        b = add_days(o, profile.gestation_days)
        hw = tl.birth_likely_half_width_days
        outer = hw + tl.birth_slop_days + u
        birth = _window(
            add_days(b, -hw), add_days(b, hw), add_days(b, -outer), add_days(b, outer)
        )

    # ── Post-birth care and placement ──
    care = profile.post_birth_care_days
    normal = profile.placement_normal_days
    extended = profile.placement_extended_days
    p = add_days(b, care)

    post_birth_care = _window(
        birth.likely.start, p, birth.full.start, add_days(birth.full.end, care)
    )
    placement_normal = _window(
        p,
        add_days(p, normal),
        add_days(birth.full.start, care),
        add_days(birth.full.end, care + normal),
    )
    placement_extended = _window(
        add_days(p, normal),
        add_days(p, normal + extended),
        add_days(birth.full.start, care + normal),
        add_days(birth.full.end, care + normal + extended),
    )

    milestones = Milestones(
        cycle_start=c,
        ovulation=o,
        ovulation_confirmed=o if anchor is not None and anchor.mode is AnchorMode.OVULATION else None,
        birth_expected=b,
        placement_start_expected=p,
        placement_completed_expected=add_days(p, normal),
        placement_extended_end_expected=add_days(p, normal + extended),
    )
    explain = TimelineExplain(
        anchor_mode=anchor.mode if anchor is not None else None,
        confidence=confidence,
        species=profile.code,
        ovulation_offset_days=offset,
        offset_source=offset_source,
    )

    logger.debug(
        "Timeline %s: anchor=%s confidence=%s C=%s O=%s B=%s (offset %d, %s)",
        profile.code,
        explain.anchor_mode.value if explain.anchor_mode else "seed",
        confidence.value if confidence else "-",
        c, o, b, offset, offset_source.value,
    )

    return Timeline(
        pre_breeding=pre_breeding,
        hormone_testing=hormone_testing,
        breeding=breeding,
        birth=birth,
        post_birth_care=post_birth_care,
        placement_normal=placement_normal,
        placement_extended=placement_extended,
        milestones=milestones,
        explain=explain,
    )


def build_timeline(
    summary: ReproSummary,
    anchor: Anchor,
    config: ReproConfig | None = None,
) -> Timeline:
    """Derive every phase window from a resolved anchor.

    Args:
        summary: Animal context (species and cycle history are used).
        anchor:  Output of ``resolve_anchor``.
        config:  Engine config (defaults to the bundled one).
    """
    cfg = config or get_repro_config()
    profile = cfg.species(summary.species)
    offset, source = resolve_offset(summary, profile, cfg)

    if anchor.mode is AnchorMode.BIRTH_DATE:
        ovulation = add_days(anchor.date, -profile.gestation_days)
    elif anchor.mode in (AnchorMode.OVULATION, AnchorMode.BREEDING_DATE):
        ovulation = anchor.date
    else:
        ovulation = add_days(anchor.date, offset)

    return _assemble(
        ovulation=ovulation,
        offset=offset,
        offset_source=source,
        profile=profile,
        config=cfg,
        anchor=anchor,
    )


def build_timeline_from_seed(
    summary: ReproSummary,
    cycle_start: date,
    config: ReproConfig | None = None,
) -> Timeline:
    """Derive a timeline from a raw cycle-start seed (no anchor).

    The seed is treated as LOW confidence for window widths, but the
    explain metadata carries no anchor mode or confidence.
    """
    cfg = config or get_repro_config()
    profile = cfg.species(summary.species)
    offset, source = resolve_offset(summary, profile, cfg)
    return _assemble(
        ovulation=add_days(cycle_start, offset),
        offset=offset,
        offset_source=source,
        profile=profile,
        config=cfg,
        anchor=None,
    )
