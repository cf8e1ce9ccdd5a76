"""Tests for repro_config.yaml loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from kennelhq.repro.config_loader import (
    ConfigValidationError,
    ReproConfig,
    _validate_and_build,
    get_repro_config,
    load_repro_config,
    reload_repro_config,
)

MINIMAL_SPECIES = {
    "cycle_length_days": 180,
    "ovulation_offset_days": 12,
    "gestation_days": 63,
    "hormone_testing_lead_days": 7,
    "post_birth_care_days": 56,
    "placement_normal_days": 14,
    "placement_extended_days": 14,
}


class TestConfigLoading:
    """Tests for loading the bundled repro_config.yaml."""

    def test_load_default_config(self, repro_config: ReproConfig) -> None:
        assert repro_config.version == "1.0"
        assert repro_config.default_species == "DOG"
        assert {"DOG", "CAT", "HORSE", "GOAT", "RABBIT", "SHEEP"} <= set(
            repro_config.species_profiles
        )

    def test_dog_biology(self, repro_config: ReproConfig) -> None:
        dog = repro_config.species("DOG")
        assert dog.cycle_length_days == 180
        assert dog.ovulation_offset_days == 12
        assert dog.gestation_days == 63
        assert dog.hormone_testing_lead_days == 7
        assert dog.post_birth_care_days == 56
        assert dog.placement_normal_days == 14
        assert dog.placement_extended_days == 14
        assert not dog.induced_ovulator

    def test_cat_is_induced_ovulator(self, repro_config: ReproConfig) -> None:
        cat = repro_config.species("CAT")
        assert cat.induced_ovulator
        assert not cat.testing_available

    def test_lookup_is_case_insensitive(self, repro_config: ReproConfig) -> None:
        assert repro_config.species("dog") is repro_config.species("DOG")
        assert repro_config.species(" Horse ") is repro_config.species("HORSE")

    def test_unknown_species_falls_back(self, repro_config: ReproConfig) -> None:
        """Unknown or empty species must resolve, never fail."""
        dog = repro_config.species("DOG")
        assert repro_config.species("unicorn") is dog
        assert repro_config.species("") is dog
        assert repro_config.species(None) is dog
        assert not repro_config.is_known_species("unicorn")
        assert repro_config.is_known_species("cat")

    def test_all_species_windows_ordered(self, repro_config: ReproConfig) -> None:
        for code, profile in repro_config.species_profiles.items():
            for window in (profile.juvenile_first_cycle_days, profile.postpartum_return_days):
                assert window is not None, code
                assert window.min <= window.likely <= window.max, code

    def test_uncertainty_by_confidence(self, repro_config: ReproConfig) -> None:
        tl = repro_config.timeline
        assert tl.uncertainty_days("HIGH") == 0
        assert tl.uncertainty_days("MEDIUM") == 1
        assert tl.uncertainty_days("LOW") == 2
        assert tl.uncertainty_days(None) == 2

    def test_lab_methods(self, repro_config: ReproConfig) -> None:
        assert "PROGESTERONE_TEST" in repro_config.anchor.lab_confirmation_methods
        assert "LH_TEST" in repro_config.anchor.lab_confirmation_methods

    def test_thresholds(self, repro_config: ReproConfig) -> None:
        assert repro_config.pattern.min_samples == 2
        assert repro_config.pattern.classification_dead_zone_days == 1.0
        assert repro_config.projection.override_conflict_pct == 20
        assert repro_config.alerts.attention_window_days == 14


class TestConfigValidation:
    def test_missing_species_section(self) -> None:
        with pytest.raises(ConfigValidationError, match="species"):
            _validate_and_build({"version": "1.0"})

    def test_missing_species_key(self) -> None:
        cfg = dict(MINIMAL_SPECIES)
        del cfg["gestation_days"]
        with pytest.raises(ConfigValidationError, match="gestation_days"):
            _validate_and_build({"species": {"DOG": cfg}})

    def test_negative_duration(self) -> None:
        cfg = dict(MINIMAL_SPECIES, placement_normal_days=-1)
        with pytest.raises(ConfigValidationError, match="must not be negative"):
            _validate_and_build({"species": {"DOG": cfg}})

    def test_zero_cycle_length(self) -> None:
        cfg = dict(MINIMAL_SPECIES, cycle_length_days=0)
        with pytest.raises(ConfigValidationError, match="cycle_length_days"):
            _validate_and_build({"species": {"DOG": cfg}})

    def test_default_species_must_exist(self) -> None:
        with pytest.raises(ConfigValidationError, match="default_species"):
            _validate_and_build({"default_species": "CAT", "species": {"DOG": MINIMAL_SPECIES}})

    def test_bad_day_window(self) -> None:
        cfg = dict(
            MINIMAL_SPECIES, postpartum_return_days={"min": 100, "likely": 50, "max": 200}
        )
        with pytest.raises(ConfigValidationError, match="postpartum_return_days"):
            _validate_and_build({"species": {"DOG": cfg}})

    def test_errors_are_collected(self) -> None:
        cfg = dict(MINIMAL_SPECIES, gestation_days=-1, placement_normal_days=-2)
        with pytest.raises(ConfigValidationError) as excinfo:
            _validate_and_build({"species": {"DOG": cfg}, "pattern": {"min_samples": 1}})
        assert "3 validation error(s)" in str(excinfo.value)

    def test_minimal_config_uses_defaults(self) -> None:
        config = _validate_and_build({"species": {"dog": MINIMAL_SPECIES}})
        dog = config.species("DOG")
        assert dog.code == "DOG"
        assert dog.start_buffer_days == 7
        assert dog.testing_available
        assert config.timeline.uncertainty_days("MEDIUM") == 1

    def test_load_nonexistent_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_repro_config(path=Path("/nonexistent/path/repro_config.yaml"))

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "repro_config.yaml"
        config_file.write_text("species: [unclosed")
        with pytest.raises(ConfigValidationError, match="YAML parse error"):
            load_repro_config(path=config_file)


class TestHotReload:
    def test_hot_reload(self, tmp_path: Path) -> None:
        """reload_repro_config() should replace the global singleton."""
        config_content = """
version: "2.0-test"
default_species: DOG
species:
  DOG:
    cycle_length_days: 200
    ovulation_offset_days: 12
    gestation_days: 63
    hormone_testing_lead_days: 7
    post_birth_care_days: 56
    placement_normal_days: 14
    placement_extended_days: 14
"""
        config_file = tmp_path / "repro_config.yaml"
        config_file.write_text(config_content.strip())

        try:
            new_config = reload_repro_config(path=config_file)
            assert new_config.version == "2.0-test"
            assert get_repro_config() is new_config
            assert get_repro_config().species("DOG").cycle_length_days == 200
        finally:
            reload_repro_config()

    def test_invalid_reload_keeps_old_config(self, tmp_path: Path) -> None:
        before = get_repro_config()
        config_file = tmp_path / "repro_config.yaml"
        config_file.write_text('version: "broken"\nspecies: {}\n')

        with pytest.raises(ConfigValidationError):
            reload_repro_config(path=config_file)
        assert get_repro_config() is before
