"""Combine two timelines into one spanning both.

Used when a plan only has an earliest/latest cycle-start range: each seed
yields a timeline and the merged one covers every day either could touch.
"""

from __future__ import annotations

from kennelhq.repro.base import Phase, PhaseWindows, StageRange, Timeline
from kennelhq.repro.dates import max_date, min_date


def _span(a: StageRange, b: StageRange) -> StageRange:
    return StageRange(min_date(a.start, b.start), max_date(a.end, b.end))


def merge_timelines(a: Timeline, b: Timeline) -> Timeline:
    """Per phase, widen full and likely to ``[min(starts), max(ends)]``.

    Milestones and explain metadata are taken from ``a``, so argument order
    matters for those fields only.
    """
    merged = {
        phase.value: PhaseWindows(
            full=_span(a.window(phase).full, b.window(phase).full),
            likely=_span(a.window(phase).likely, b.window(phase).likely),
        )
        for phase in Phase
    }
    return Timeline(milestones=a.milestones, explain=a.explain, **merged)
