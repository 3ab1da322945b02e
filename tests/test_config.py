"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from hiphive_pipeline.config import (
    InvalidRunParameterError,
    load_config,
    load_config_with_overrides,
    parse_run_params,
)
from hiphive_pipeline.config.schema import PipelineConfig


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config("config/default.yaml")

    assert isinstance(config, PipelineConfig)
    assert config.versions.hpo_release == "2024-04-26"
    assert config.prioritiser.run_params == "human,mouse,fish,ppi"
    assert config.prioritiser.high_quality_score_cutoff == 0.6
    assert config.prioritiser.ppi_mode == "dynamic"
    assert config.prioritiser.nan_scores == "skip"
    assert config.execution.executor == "process"
    assert config.execution.max_workers is None
    assert config.execution.chunk_size == 500


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text("""
duckdb_path: data/phenotype.duckdb
prioritiser:
  run_params: human
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "data_dir" in str(exc_info.value)


def test_invalid_run_params_rejected(tmp_path):
    config_file = tmp_path / "bad_params.yaml"
    config_file.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "test.duckdb"}
prioritiser:
  run_params: "human,rat"
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(config_file)

    assert "'rat' is not a valid parameter" in str(exc_info.value)


def test_cutoff_out_of_range_rejected(tmp_path):
    config_file = tmp_path / "bad_cutoff.yaml"
    config_file.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "test.duckdb"}
prioritiser:
  high_quality_score_cutoff: 1.5
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(config_file)

    assert "high_quality_score_cutoff" in str(exc_info.value)


def test_parse_run_params():
    assert parse_run_params("human,ppi") == frozenset({"human", "ppi"})
    assert parse_run_params(" mouse , fish ") == frozenset({"mouse", "fish"})
    assert parse_run_params("") == frozenset({"human", "mouse", "fish", "ppi"})
    assert parse_run_params(None) == frozenset({"human", "mouse", "fish", "ppi"})

    with pytest.raises(InvalidRunParameterError):
        parse_run_params("human,worm")


def test_config_hash_deterministic():
    """Test that config hash is deterministic and changes with config."""
    config1 = load_config("config/default.yaml")
    config2 = load_config("config/default.yaml")

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64

    config3 = load_config_with_overrides(
        "config/default.yaml",
        {"prioritiser.ppi_score_offset": 0.5},
    )
    assert config3.config_hash() != config1.config_hash()
    assert config3.prioritiser.ppi_score_offset == 0.5


def test_overrides_ignore_none_values():
    config = load_config_with_overrides(
        "config/default.yaml",
        {"prioritiser.run_params": None, "prioritiser.disease_id": "OMIM:101600"},
    )

    assert config.prioritiser.run_params == "human,mouse,fish,ppi"
    assert config.prioritiser.disease_id == "OMIM:101600"


def test_overrides_are_validated():
    with pytest.raises(ValidationError):
        load_config_with_overrides(
            "config/default.yaml",
            {"prioritiser.run_params": "human,yeast"},
        )


def test_config_creates_data_directory(tmp_path):
    """Test that loading config creates the data directory."""
    config_file = tmp_path / "test_config.yaml"
    data_dir = tmp_path / "test_data"

    config_file.write_text(f"""
data_dir: {data_dir}
duckdb_path: {tmp_path / "test.duckdb"}
""")

    assert not data_dir.exists()

    config = load_config(config_file)

    assert data_dir.exists()
    assert data_dir.is_dir()
    assert config.matrix_path is None
