"""
Tests for the configuration loader.
"""
import pytest
import tempfile
from pathlib import Path

from app.config import ScheduleConfig, get_config, reload_config, ConfigurationError
from app.domain.entities.phase import PhaseGroup
from app.domain.services.schedule_generator import ScheduleGenerator


class TestScheduleConfig:
    """Tests for ScheduleConfig class."""

    def test_load_default_config(self):
        """Test loading the default configuration file."""
        config = get_config()
        assert config.version == "1.0.0"
        assert len(config.phases) == 17

    def test_phase_ids_in_order(self):
        ids = [phase.id for phase in get_config().phase_catalog()]
        assert ids[:3] == ["planification", "financement", "plans-permis"]
        assert ids[3] == "excavation-fondation"
        assert ids[-1] == "inspections-finales"

    def test_defaults(self):
        config = get_config()
        assert config.default_duration_days == 5
        assert config.default_trade == "autre"

    def test_trade_color(self):
        config = get_config()
        assert config.get_trade_color("excavation") == "#8B4513"
        assert config.get_trade_color("inconnu") == "#DC2626"

    def test_dict_access(self):
        config = get_config()
        assert "phases" in config
        assert config["version"] == "1.0.0"
        assert config.get("missing", 42) == 42


class TestPhaseCatalog:
    """Tests for the catalog built from configuration."""

    def test_catalog_is_cached(self):
        config = get_config()
        assert config.phase_catalog() is config.phase_catalog()

    def test_phase_fields(self):
        catalog = get_config().phase_catalog()
        windows = catalog.get("fenetres-portes")
        assert windows.phase_group == PhaseGroup.GROS_OEUVRE
        assert windows.supplier_lead_days == 42
        assert windows.fabrication_lead_days == 28
        assert catalog.get("planification").is_preparation
        assert catalog.get("cuisine-sdb").measurement.after_phase_id == "gypse"

    def test_stage_mapping(self):
        catalog = get_config().phase_catalog()
        assert catalog.stage_mapping["fondation"] == "excavation-fondation"
        assert catalog.phases_from_stage("finition")[0].id == "gypse"

    def test_mandatory_delays(self):
        delay = get_config().phase_catalog().delay_for("structure")
        assert delay.after_phase_id == "excavation-fondation"
        assert delay.minimum_days == 21

    def test_default_durations(self):
        estimate = ScheduleGenerator(get_config().phase_catalog()).calculate_total_project_duration()
        assert estimate.preparation_days == 65
        assert estimate.construction_days == 130

    def test_default_schedule_scenario(self):
        generator = ScheduleGenerator(get_config().phase_catalog())
        items = {i.step_id: i for i in generator.build_schedule(1, "2025-06-02")}
        assert items["excavation-fondation"].end_date.isoformat() == "2025-06-20"
        assert items["structure"].start_date.isoformat() == "2025-06-23"
        assert items["plans-permis"].end_date.isoformat() == "2025-05-30"


class TestConfigErrors:
    """Tests for invalid configuration files."""

    def test_missing_file(self):
        with pytest.raises(ConfigurationError):
            ScheduleConfig(Path("/nonexistent/schedule_config.yaml"))

    def test_invalid_yaml(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write("phases: [unclosed\n")
        with pytest.raises(ConfigurationError):
            ScheduleConfig(Path(f.name))

    def test_non_mapping_root(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ScheduleConfig(Path(f.name))

    def test_unknown_stage_target(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
            f.write(
                "phases:\n"
                "  - {id: gypse, phase_group: finition, default_trade: gypse, default_duration_days: 15}\n"
                "stage_mapping:\n"
                "  fondation: fondation\n"
            )
        config = ScheduleConfig(Path(f.name))
        with pytest.raises(ConfigurationError):
            config.phase_catalog()

    def test_reload_in_place(self):
        config = ScheduleConfig()
        catalog = config.phase_catalog()
        config.reload()
        assert config.phase_catalog() is not catalog
        assert len(config.phase_catalog()) == 17

    def test_reload_config(self):
        first = get_config()
        second = reload_config()
        assert first is not second
        assert second.version == "1.0.0"
