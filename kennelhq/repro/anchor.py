"""Pick the single most trusted date signal for a breeding plan.

Priority, highest confidence first (first present wins):

1. Actual birth date      -> BIRTH_DATE, HIGH
2. Confirmed ovulation    -> OVULATION, HIGH for lab methods, MEDIUM otherwise
   (legacy locked ovulation date is used when no confirmed date exists)
3. Actual breeding date   -> BREEDING_DATE, MEDIUM (induced ovulators)
4. Observed / locked cycle start -> CYCLE_START, MEDIUM with a hormone-testing
   history, LOW without

When nothing is present the resolver returns ``None``.  Callers must not
invent a fallback date.
"""

from __future__ import annotations

import logging

from kennelhq.repro.base import Anchor, AnchorCandidates, AnchorMode, Confidence
from kennelhq.repro.config_loader import ReproConfig, get_repro_config

logger = logging.getLogger("kennelhq.repro.anchor")


def ovulation_confidence(method: str | None, config: ReproConfig | None = None) -> Confidence:
    """HIGH when ovulation was confirmed by a lab method, MEDIUM otherwise."""
    cfg = config or get_repro_config()
    key = (method or "").strip().upper()
    if key and key in cfg.anchor.lab_confirmation_methods:
        return Confidence.HIGH
    return Confidence.MEDIUM


def resolve_anchor(
    candidates: AnchorCandidates,
    config: ReproConfig | None = None,
) -> Anchor | None:
    """Resolve exactly one anchor from the candidate signals.

    Args:
        candidates: Date signals from a breeding plan.
        config:     Engine config (defaults to the bundled one).

    Returns:
        The winning Anchor, or None when no signal is present.
    """
    c = candidates
    anchor: Anchor | None = None

    if c.birth_date_actual is not None:
        anchor = Anchor(AnchorMode.BIRTH_DATE, c.birth_date_actual, Confidence.HIGH)
    elif c.ovulation_confirmed is not None or c.locked_ovulation_date is not None:
        ov_date = c.ovulation_confirmed or c.locked_ovulation_date
        anchor = Anchor(
            AnchorMode.OVULATION,
            ov_date,
            ovulation_confidence(c.ovulation_confirmed_method, config),
            method=c.ovulation_confirmed_method,
        )
    elif c.breed_date_actual is not None:
        anchor = Anchor(AnchorMode.BREEDING_DATE, c.breed_date_actual, Confidence.MEDIUM)
    elif c.cycle_start_observed is not None or c.locked_cycle_start is not None:
        anchor = Anchor(
            AnchorMode.CYCLE_START,
            c.cycle_start_observed or c.locked_cycle_start,
            Confidence.MEDIUM if c.has_hormone_testing_history else Confidence.LOW,
        )

    if anchor is None:
        logger.debug("No anchor candidates present; refusing to build a timeline")
        return None

    if c.repro_anchor_mode is not None and c.repro_anchor_mode != anchor.mode:
        logger.debug(
            "Anchor mode hint %s ignored; concrete %s date present",
            c.repro_anchor_mode.value,
            anchor.mode.value,
        )
    return anchor
