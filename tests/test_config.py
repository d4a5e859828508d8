"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest

from config.schema import (
    AssignmentSettings,
    BreakTime,
    DemoConfig,
    GridConfig,
    PlannerConfig,
    ValidationSettings,
)
from config.defaults import (
    DEFAULT_ROOMS,
    DEMO_SUBJECT_TIERS,
    SUBJECT_METADATA,
    SUBJECT_ROOM_MAP,
    default_grid,
    default_planner_config,
)
from config.manager import ConfigManager


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_grid_valid(self):
        """Default-Raster: Mo-Fr, 8 Stunden, 3 Pausen."""
        grid = default_grid()
        assert grid.days_per_week == 5
        assert grid.periods_per_day == 8
        assert grid.slots_per_week == 40
        assert len(grid.breaks) == 3

    def test_default_planner_config_valid(self):
        config = default_planner_config()
        assert config.school_name == "Muster-Gymnasium"
        assert config.validation.overlap_mode == "exact"
        assert config.validation.resource_scoped is False
        assert config.assignment.max_attempts == 50
        assert config.assignment.day_range == (1, 5)
        assert config.assignment.period_range == (1, 8)

    def test_day_name(self):
        grid = GridConfig()
        assert grid.day_name(1) == "Mo"
        assert grid.day_name(7) == "So"
        assert grid.day_name(9) == "9"

    def test_subject_tiers_reference_known_subjects(self):
        """Alle Fächer der Demo-Stundentafel haben Metadaten."""
        for names, (lo, hi) in DEMO_SUBJECT_TIERS.values():
            assert lo <= hi
            for name in names:
                assert name in SUBJECT_METADATA

    def test_subject_room_map_references_known_rooms(self):
        room_names = {name for name, _, _ in DEFAULT_ROOMS}
        for subject, rooms in SUBJECT_ROOM_MAP.items():
            assert subject in SUBJECT_METADATA
            assert set(rooms) <= room_names

    def test_sport_is_double_period(self):
        assert SUBJECT_METADATA["Sport"]["duration"] == 2


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_inverted_day_range_raises(self):
        """Absteigender Tagesbereich → Validierungsfehler."""
        with pytest.raises(Exception):
            AssignmentSettings(day_range=(5, 1))

    def test_period_range_outside_limits_raises(self):
        """Stunde 11 liegt außerhalb 1-10."""
        with pytest.raises(Exception):
            AssignmentSettings(period_range=(1, 11))

    def test_weekend_range_allowed(self):
        settings = AssignmentSettings(day_range=(1, 7), period_range=(1, 10))
        assert settings.slot_count == 70

    def test_slot_count_default(self):
        assert AssignmentSettings().slot_count == 40

    def test_zero_attempts_raises(self):
        with pytest.raises(Exception):
            AssignmentSettings(max_attempts=0)

    def test_unknown_overlap_mode_raises(self):
        with pytest.raises(Exception):
            ValidationSettings(overlap_mode="fuzzy")

    def test_break_after_last_period_raises(self):
        """Pause nach der letzten Stunde ist nicht erlaubt."""
        with pytest.raises(Exception):
            GridConfig(periods_per_day=6,
                       breaks=[BreakTime(after_period=6, duration_minutes=10)])

    def test_too_few_day_names_raises(self):
        with pytest.raises(Exception):
            GridConfig(days_per_week=6, day_names=["Mo", "Di"])

    def test_demo_lengths_must_match(self):
        """grade_names und classes_per_grade müssen gleich lang sein."""
        with pytest.raises(Exception):
            DemoConfig(grade_names=["10", "11"], classes_per_grade=[3])

    def test_demo_student_range_validated(self):
        with pytest.raises(Exception):
            DemoConfig(student_count_range=(40, 30))


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren, vollständiger Roundtrip."""
        config = default_planner_config()
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "planner_config.yaml"

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == config

    def test_saved_yaml_has_header_and_sections(self, tmp_path: Path):
        mgr = ConfigManager()
        path = mgr.save(default_planner_config(), tmp_path / "cfg.yaml")
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Konfliktprüfung" in text
        assert "max_attempts: 50" in text

    def test_modified_values_survive_roundtrip(self, tmp_path: Path):
        config = PlannerConfig(
            school_name="Testschule",
            validation=ValidationSettings(overlap_mode="interval", resource_scoped=True),
            assignment=AssignmentSettings(day_range=(1, 6), max_attempts=20),
        )
        mgr = ConfigManager()
        path = mgr.save(config, tmp_path / "cfg.yaml")
        loaded = mgr.load(path)
        assert loaded.school_name == "Testschule"
        assert loaded.validation.overlap_mode == "interval"
        assert loaded.assignment.day_range == (1, 6)
        assert loaded.assignment.max_attempts == 20

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "planner_config.yaml"
        mgr.save(default_planner_config())
        assert mgr.first_run_check() is False

    def test_load_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "fehlt.yaml")

    def test_load_invalid_file_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "kaputt.yaml"
        path.write_text("assignment:\n  max_attempts: 0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager().load(path)

    def test_load_or_default_without_file(self, tmp_path: Path):
        config = ConfigManager().load_or_default(tmp_path / "fehlt.yaml")
        assert config == default_planner_config()
