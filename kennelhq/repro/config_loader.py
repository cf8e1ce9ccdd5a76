"""Load, validate, and hot-reload the repro engine configuration.

The config lives in ``repro_config.yaml`` alongside this module.  It holds the
species biology table plus the tuning constants for timelines, pattern
analysis, projections and alerts.  The default config is loaded once and
cached.  Call ``reload_repro_config()`` to re-read from disk after an admin
update, no restart required.

Usage::

    from kennelhq.repro.config_loader import get_repro_config

    config = get_repro_config()
    dog = config.species("dog")
    dog.gestation_days                     # 63
    config.timeline.uncertainty_days("LOW")  # 2
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("kennelhq.repro.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "repro_config.yaml"

_REQUIRED_SPECIES_KEYS = (
    "cycle_length_days",
    "ovulation_offset_days",
    "gestation_days",
    "hormone_testing_lead_days",
    "post_birth_care_days",
    "placement_normal_days",
    "placement_extended_days",
)


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DayWindow:
    """A min / likely / max span in days, e.g. age at first heat."""

    min: int
    likely: int
    max: int


@dataclass(frozen=True)
class SpeciesProfile:
    """Reproductive biology for one species.

    Attributes:
        code:                      Upper-case species code (``DOG``).
        cycle_length_days:         Default interval between cycle starts.
        ovulation_offset_days:     Days from cycle start to expected ovulation.
        start_buffer_days:         Lead-in before cycle start shown as pre-breeding.
        gestation_days:            Ovulation to birth.
        hormone_testing_lead_days: Days before expected ovulation to begin testing.
        post_birth_care_days:      Birth until offspring are ready for placement.
        placement_normal_days:     Length of the normal placement window.
        placement_extended_days:   Extra time for offspring not yet placed.
        induced_ovulator:          Ovulation is triggered by breeding.
        testing_available:         Ovulation testing is practical for the species.
        juvenile_first_cycle_days: Age window for the first heat.
        postpartum_return_days:    Birth-to-next-cycle window.
    """

    code: str
    cycle_length_days: int
    ovulation_offset_days: int
    start_buffer_days: int
    gestation_days: int
    hormone_testing_lead_days: int
    post_birth_care_days: int
    placement_normal_days: int
    placement_extended_days: int
    induced_ovulator: bool = False
    testing_available: bool = True
    juvenile_first_cycle_days: DayWindow | None = None
    postpartum_return_days: DayWindow | None = None


@dataclass(frozen=True)
class TimelineConfig:
    """Slop constants that turn anchor confidence into window widths."""

    ovulation_uncertainty: dict[str, int]
    hormone_testing_slop_days: int = 2
    breeding_likely_days: int = 1
    breeding_slop_days: int = 1
    birth_likely_half_width_days: int = 1
    birth_slop_days: int = 1

    def uncertainty_days(self, confidence: str | None) -> int:
        """Extra full-window days for an anchor confidence (None means LOW)."""
        key = str(confidence or "LOW").upper()
        return self.ovulation_uncertainty.get(key, self.ovulation_uncertainty.get("LOW", 0))


@dataclass(frozen=True)
class AnchorConfig:
    lab_confirmation_methods: frozenset[str]


@dataclass(frozen=True)
class PatternConfig:
    """Ovulation pattern classification thresholds."""

    min_samples: int = 2
    classification_dead_zone_days: float = 1.0
    high_confidence_min_confirmed: int = 3
    high_confidence_max_std_days: float = 1.5
    medium_confidence_min_confirmed: int = 2


@dataclass(frozen=True)
class ProjectionConfig:
    history_window_cycles: int = 3
    override_conflict_pct: float = 20.0
    default_horizon_months: int = 36
    default_max_count: int = 36


@dataclass(frozen=True)
class AlertConfig:
    attention_window_days: int = 14
    testing_soon_days: int = 7
    heat_soon_days: int = 14
    breeding_plan_prompt_days: int = 30


@dataclass(frozen=True)
class ReproConfig:
    """Complete, validated repro engine configuration.

    This is the single in-memory representation of repro_config.yaml.  Every
    engine component reads its constants from this object.
    """

    version: str
    default_species: str
    species_profiles: dict[str, SpeciesProfile]
    timeline: TimelineConfig
    anchor: AnchorConfig
    pattern: PatternConfig
    projection: ProjectionConfig
    alerts: AlertConfig

    def species(self, code: str | None) -> SpeciesProfile:
        """Return the profile for a species string.

        Lookup is case-insensitive.  Unknown or empty species resolve to the
        ``default_species`` profile instead of failing.
        """
        key = (code or "").strip().upper()
        profile = self.species_profiles.get(key)
        if profile is None:
            if key:
                logger.debug(
                    "Unknown species %r, using %s profile", code, self.default_species
                )
            return self.species_profiles[self.default_species]
        return profile

    def is_known_species(self, code: str | None) -> bool:
        return (code or "").strip().upper() in self.species_profiles


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when repro_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Repro config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _day_window(raw: Any, where: str, errors: list[str]) -> DayWindow | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        errors.append(f"{where} must be a mapping with min/likely/max")
        return None
    try:
        window = DayWindow(
            min=int(raw["min"]), likely=int(raw["likely"]), max=int(raw["max"])
        )
    except (KeyError, TypeError, ValueError):
        errors.append(f"{where} needs integer min, likely and max")
        return None
    if not (window.min <= window.likely <= window.max):
        errors.append(f"{where} must satisfy min <= likely <= max")
    return window


def _validate_and_build(raw: dict) -> ReproConfig:
    """Validate the raw YAML dict and construct a ReproConfig.

    Raises:
        ConfigValidationError: If required fields are missing or invalid.
    """
    errors: list[str] = []

    version = str(raw.get("version", "1.0"))

    # ── Species table ──
    species_raw = raw.get("species", {})
    if not species_raw:
        errors.append("'species' section is missing or empty")

    profiles: dict[str, SpeciesProfile] = {}
    for code, cfg in (species_raw or {}).items():
        key = str(code).strip().upper()
        if not isinstance(cfg, dict):
            errors.append(f"species.{code} must be a mapping")
            continue
        missing = [k for k in _REQUIRED_SPECIES_KEYS if k not in cfg]
        if missing:
            errors.append(f"species.{code} is missing {', '.join(missing)}")
            continue
        try:
            values = {k: int(cfg[k]) for k in _REQUIRED_SPECIES_KEYS}
            start_buffer = int(cfg.get("start_buffer_days", 7))
        except (TypeError, ValueError):
            errors.append(f"species.{code} durations must be integers")
            continue
        for k, v in values.items():
            if v < 0:
                errors.append(f"species.{code}.{k} = {v} must not be negative")
        if values["cycle_length_days"] <= 0:
            errors.append(f"species.{code}.cycle_length_days must be positive")
        profiles[key] = SpeciesProfile(
            code=key,
            start_buffer_days=start_buffer,
            induced_ovulator=bool(cfg.get("induced_ovulator", False)),
            testing_available=bool(cfg.get("testing_available", True)),
            juvenile_first_cycle_days=_day_window(
                cfg.get("juvenile_first_cycle_days"),
                f"species.{code}.juvenile_first_cycle_days",
                errors,
            ),
            postpartum_return_days=_day_window(
                cfg.get("postpartum_return_days"),
                f"species.{code}.postpartum_return_days",
                errors,
            ),
            **values,
        )

    default_species = str(raw.get("default_species", "DOG")).strip().upper()
    if profiles and default_species not in profiles:
        errors.append(f"default_species {default_species!r} is not in the species table")

    # ── Timeline ──
    tl_raw = raw.get("timeline", {}) or {}
    unc_raw = tl_raw.get("ovulation_uncertainty_days", {}) or {}
    uncertainty: dict[str, int] = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}
    for level, val in unc_raw.items():
        try:
            uncertainty[str(level).upper()] = int(val)
        except (TypeError, ValueError):
            errors.append(f"timeline.ovulation_uncertainty_days.{level} must be an integer")
    if not (uncertainty["HIGH"] <= uncertainty["MEDIUM"] <= uncertainty["LOW"]):
        logger.warning(
            "Ovulation uncertainty is not monotonic (HIGH=%s, MEDIUM=%s, LOW=%s); "
            "lower-confidence anchors will not get wider windows.",
            uncertainty["HIGH"], uncertainty["MEDIUM"], uncertainty["LOW"],
        )
    timeline = TimelineConfig(
        ovulation_uncertainty=uncertainty,
        hormone_testing_slop_days=int(tl_raw.get("hormone_testing_slop_days", 2)),
        breeding_likely_days=int(tl_raw.get("breeding_likely_days", 1)),
        breeding_slop_days=int(tl_raw.get("breeding_slop_days", 1)),
        birth_likely_half_width_days=int(tl_raw.get("birth_likely_half_width_days", 1)),
        birth_slop_days=int(tl_raw.get("birth_slop_days", 1)),
    )
    for name in (
        "hormone_testing_slop_days",
        "breeding_likely_days",
        "breeding_slop_days",
        "birth_likely_half_width_days",
        "birth_slop_days",
    ):
        if getattr(timeline, name) < 0:
            errors.append(f"timeline.{name} must not be negative")

    # ── Anchor ──
    an_raw = raw.get("anchor", {}) or {}
    anchor = AnchorConfig(
        lab_confirmation_methods=frozenset(
            str(m).strip().upper()
            for m in an_raw.get(
                "lab_confirmation_methods", ["PROGESTERONE_TEST", "LH_TEST", "ULTRASOUND"]
            )
        )
    )

    # ── Pattern ──
    pt_raw = raw.get("pattern", {}) or {}
    pattern = PatternConfig(
        min_samples=int(pt_raw.get("min_samples", 2)),
        classification_dead_zone_days=float(pt_raw.get("classification_dead_zone_days", 1.0)),
        high_confidence_min_confirmed=int(pt_raw.get("high_confidence_min_confirmed", 3)),
        high_confidence_max_std_days=float(pt_raw.get("high_confidence_max_std_days", 1.5)),
        medium_confidence_min_confirmed=int(pt_raw.get("medium_confidence_min_confirmed", 2)),
    )
    if pattern.min_samples < 2:
        errors.append("pattern.min_samples must be at least 2")

    # ── Projection ──
    pr_raw = raw.get("projection", {}) or {}
    projection = ProjectionConfig(
        history_window_cycles=int(pr_raw.get("history_window_cycles", 3)),
        override_conflict_pct=float(pr_raw.get("override_conflict_pct", 20)),
        default_horizon_months=int(pr_raw.get("default_horizon_months", 36)),
        default_max_count=int(pr_raw.get("default_max_count", 36)),
    )
    if projection.history_window_cycles < 1:
        errors.append("projection.history_window_cycles must be at least 1")

    # ── Alerts ──
    al_raw = raw.get("alerts", {}) or {}
    alerts = AlertConfig(
        attention_window_days=int(al_raw.get("attention_window_days", 14)),
        testing_soon_days=int(al_raw.get("testing_soon_days", 7)),
        heat_soon_days=int(al_raw.get("heat_soon_days", 14)),
        breeding_plan_prompt_days=int(al_raw.get("breeding_plan_prompt_days", 30)),
    )

    if errors:
        raise ConfigValidationError(
            f"repro_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return ReproConfig(
        version=version,
        default_species=default_species,
        species_profiles=profiles,
        timeline=timeline,
        anchor=anchor,
        pattern=pattern,
        projection=projection,
        alerts=alerts,
    )


def load_repro_config(path: Path | None = None) -> ReproConfig:
    """Load and validate the repro config from disk.

    Args:
        path: Override path to YAML. Uses the bundled repro_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info(
        "Loaded repro config v%s (%d species) from %s",
        config.version,
        len(config.species_profiles),
        target,
    )
    return config


# ---------------------------------------------------------------------------
# Global default with hot-reload support
# ---------------------------------------------------------------------------

_config: ReproConfig | None = None
_config_lock = threading.Lock()


def get_repro_config() -> ReproConfig:
    """Return the default ReproConfig, loading it on first call.

    Thread-safe.  Use ``reload_repro_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_repro_config()
    return _config


def reload_repro_config(path: Path | None = None) -> ReproConfig:
    """Reload the repro config from disk and replace the cached default.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_repro_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded repro config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
