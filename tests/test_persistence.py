"""Tests for persistence layer (DuckDB store, provenance tracking and results)."""

import json

import polars as pl
import pytest

from hiphive_pipeline.config.loader import load_config
from hiphive_pipeline.output import RESULTS_TABLE_NAME, results_to_dataframe, save_results
from hiphive_pipeline.persistence import PipelineStore, ProvenanceTracker
from hiphive_pipeline.phenotype import GeneModel, GeneModelPhenotypeMatch, Organism
from hiphive_pipeline.prioritisers import GeneScoreResult


@pytest.fixture
def test_config(tmp_path):
    """Create a minimal test config."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text("""
data_dir: {data_dir}
duckdb_path: {duckdb_path}
versions:
  hpo_release: "2024-04-26"
  phenotype_data_version: "2406"
  string_version: "10.0"
prioritiser:
  run_params: "human,mouse,ppi"
  ppi_score_offset: 0.5
""".format(
        data_dir=str(tmp_path / "data"),
        duckdb_path=str(tmp_path / "test.duckdb"),
    ))
    return load_config(config_path)


def evidence(model_id, organism, gene_id, symbol, score, disease_id=""):
    model = GeneModel(model_id, organism, gene_id, symbol, disease_id=disease_id)
    return GeneModelPhenotypeMatch(score=score, model=model)


@pytest.fixture
def results():
    return [
        GeneScoreResult(
            gene_id=2260, gene_symbol="FGFR1", score=0.7, ppi_score=0.7,
            closest_ppi_gene_id=2263,
            phenotype_evidence=(evidence("MGI:2", Organism.MOUSE, 2260, "FGFR1", 0.41),),
        ),
        GeneScoreResult(
            gene_id=2263, gene_symbol="FGFR2", score=1.0, candidate_gene_match=True,
            phenotype_evidence=(
                evidence("OMIM:1_2263", Organism.HUMAN, 2263, "FGFR2", 1.0, "OMIM:1"),
                evidence("MGI:1", Organism.MOUSE, 2263, "FGFR2", 0.9),
            ),
        ),
        GeneScoreResult(gene_id=1111, gene_symbol="GENEX", score=0.0),
    ]


# ============================================================================
# DuckDB Store Tests
# ============================================================================

def test_store_creates_database(tmp_path):
    """Test that PipelineStore creates .duckdb file at specified path."""
    db_path = tmp_path / "nested" / "test.duckdb"
    assert not db_path.exists()

    store = PipelineStore(db_path)
    store.close()

    assert db_path.exists()


def test_save_and_load_polars(tmp_path):
    """Test saving and loading polars DataFrame."""
    store = PipelineStore(tmp_path / "test.duckdb")

    df = pl.DataFrame({
        "gene": ["FGFR2", "FGFR1", "GENEX"],
        "score": [0.95, 0.88, 0.92],
        "entrez_id": [2263, 2260, 1111],
    })

    store.save_dataframe(df, "genes", "test genes")
    loaded = store.load_dataframe("genes")

    assert loaded.shape == df.shape
    assert loaded.columns == df.columns
    assert loaded["gene"].to_list() == df["gene"].to_list()
    assert loaded["score"].to_list() == df["score"].to_list()

    store.close()


def test_save_rejects_non_polars(tmp_path):
    store = PipelineStore(tmp_path / "test.duckdb")

    with pytest.raises(ValueError):
        store.save_dataframe([{"gene": "FGFR2"}], "genes")

    store.close()


def test_append_mode(tmp_path):
    store = PipelineStore(tmp_path / "test.duckdb")

    store.save_dataframe(pl.DataFrame({"col": [1, 2]}), "t", replace=False)
    store.save_dataframe(pl.DataFrame({"col": [3]}), "t", replace=False)

    assert store.load_dataframe("t")["col"].to_list() == [1, 2, 3]
    assert store.list_tables()[0]["row_count"] == 3

    store.save_dataframe(pl.DataFrame({"col": [9]}), "t")
    assert store.load_dataframe("t")["col"].to_list() == [9]

    store.close()


def test_has_table(tmp_path):
    store = PipelineStore(tmp_path / "test.duckdb")

    assert not store.has_table("test_table")
    store.save_dataframe(pl.DataFrame({"col": [1, 2, 3]}), "test_table", "test")
    assert store.has_table("test_table")

    store.close()


def test_list_tables(tmp_path):
    """Test listing tables returns metadata."""
    store = PipelineStore(tmp_path / "test.duckdb")

    for i in range(3):
        df = pl.DataFrame({"val": list(range(i + 1))})
        store.save_dataframe(df, f"table_{i}", f"description {i}")

    tables = store.list_tables()

    assert len(tables) == 3
    for table in tables:
        assert "table_name" in table
        assert "created_at" in table
        assert "row_count" in table
        assert "description" in table

    table_0 = [t for t in tables if t["table_name"] == "table_0"][0]
    assert table_0["row_count"] == 1
    assert table_0["description"] == "description 0"

    store.close()


def test_execute_query_with_params(tmp_path):
    store = PipelineStore(tmp_path / "test.duckdb")
    store.save_dataframe(pl.DataFrame({"gene": ["FGFR2", "FGFR1"], "score": [1.0, 0.5]}), "genes")

    df = store.execute_query("SELECT gene FROM genes WHERE score > ?", [0.7])

    assert df["gene"].to_list() == ["FGFR2"]

    store.close()


def test_load_nonexistent_returns_none(tmp_path):
    """Test that loading non-existent table returns None."""
    store = PipelineStore(tmp_path / "test.duckdb")

    assert store.load_dataframe("nonexistent_table") is None

    store.close()


def test_context_manager(tmp_path):
    """Test context manager support."""
    db_path = tmp_path / "test.duckdb"
    df = pl.DataFrame({"col": [1, 2, 3]})

    with PipelineStore(db_path) as store:
        store.save_dataframe(df, "test_table", "test")
        assert store.has_table("test_table")

    # Data persists after the connection closes
    with PipelineStore(db_path, read_only=True) as store:
        loaded = store.load_dataframe("test_table")
        assert loaded is not None
        assert loaded.shape == df.shape


def test_store_from_config(test_config):
    with PipelineStore.from_config(test_config) as store:
        assert store.db_path == test_config.duckdb_path


# ============================================================================
# Provenance Tests
# ============================================================================

def test_provenance_metadata_structure(test_config):
    """Test that provenance metadata has all required keys."""
    tracker = ProvenanceTracker("0.1.0", test_config)

    metadata = tracker.create_metadata()

    assert metadata["run_id"] == tracker.run_id
    assert metadata["pipeline_version"] == "0.1.0"
    assert metadata["data_source_versions"]["string_version"] == "10.0"
    assert metadata["prioritiser_settings"]["run_params"] == "human,mouse,ppi"
    assert metadata["prioritiser_settings"]["ppi_score_offset"] == 0.5
    assert isinstance(metadata["config_hash"], str)
    assert "created_at" in metadata
    assert len(metadata["processing_steps"]) == 0


def test_provenance_run_ids_are_unique(test_config):
    assert ProvenanceTracker("0.1.0", test_config).run_id != ProvenanceTracker("0.1.0", test_config).run_id


def test_provenance_records_steps(test_config):
    """Test that processing steps are recorded with timestamps."""
    tracker = ProvenanceTracker("0.1.0", test_config)

    tracker.record_step("load_matrix")
    tracker.record_step("prioritise", {"genes": 19000})

    steps = tracker.create_metadata()["processing_steps"]

    assert len(steps) == 2
    assert steps[0]["step_name"] == "load_matrix"
    assert "timestamp" in steps[0]
    assert "details" not in steps[0]
    assert steps[1]["step_name"] == "prioritise"
    assert steps[1]["details"]["genes"] == 19000


def test_provenance_sidecar_roundtrip(test_config, tmp_path):
    """Test saving and loading provenance sidecar."""
    tracker = ProvenanceTracker("0.1.0", test_config)
    tracker.record_step("test_step", {"key": "value"})

    sidecar_path = tracker.save_sidecar(tmp_path / "output.json")

    assert sidecar_path == tmp_path / "output.provenance.json"
    assert sidecar_path.exists()

    loaded = ProvenanceTracker.load_sidecar(sidecar_path)

    assert loaded["pipeline_version"] == "0.1.0"
    assert loaded["config_hash"] == test_config.config_hash()
    assert len(loaded["processing_steps"]) == 1
    assert loaded["processing_steps"][0]["step_name"] == "test_step"


def test_provenance_from_config_uses_package_version(test_config):
    from hiphive_pipeline import __version__

    tracker = ProvenanceTracker.from_config(test_config)

    assert tracker.pipeline_version == __version__


def test_provenance_save_to_store(test_config, tmp_path):
    """Test saving provenance to DuckDB store."""
    store = PipelineStore(tmp_path / "test.duckdb")
    tracker = ProvenanceTracker("0.1.0", test_config)
    tracker.record_step("test_step")

    tracker.save_to_store(store)

    result = store.conn.execute("SELECT * FROM _provenance").fetchall()
    assert len(result) == 1

    row = result[0]
    assert row[0] == tracker.run_id
    assert row[1] == "0.1.0"  # version
    assert row[2] == test_config.config_hash()

    steps = json.loads(row[4])
    assert len(steps) == 1
    assert steps[0]["step_name"] == "test_step"

    store.close()


# ============================================================================
# Results Tests
# ============================================================================

def test_results_to_dataframe_ranks_rows(results):
    df = results_to_dataframe(results, run_id="abc")

    assert df["gene_symbol"].to_list() == ["FGFR2", "FGFR1", "GENEX"]
    assert df["rank"].to_list() == [1, 2, 3]
    assert df["run_id"].unique().to_list() == ["abc"]


def test_results_to_dataframe_flattens_evidence(results):
    df = results_to_dataframe(results)
    fgfr2, fgfr1, genex = df.iter_rows(named=True)

    assert fgfr2["human_score"] == 1.0
    assert fgfr2["mouse_score"] == 0.9
    assert fgfr2["fish_score"] == 0.0
    assert fgfr2["best_model_id"] == "OMIM:1_2263"
    assert fgfr2["best_organism"] == "HUMAN"
    assert fgfr2["disease_ids"] == "OMIM:1"
    assert fgfr2["candidate_gene_match"] is True

    assert fgfr1["phenotype_score"] == pytest.approx(0.41)
    assert fgfr1["ppi_score"] == 0.7
    assert fgfr1["closest_ppi_gene_id"] == 2263

    assert genex["best_model_id"] is None
    assert genex["closest_ppi_gene_id"] is None
    assert genex["disease_ids"] == ""


def test_save_results_appends_runs(tmp_path, results):
    store = PipelineStore(tmp_path / "test.duckdb")

    save_results(store, results, run_id="run1")
    save_results(store, results[:1], run_id="run2")

    loaded = store.load_dataframe(RESULTS_TABLE_NAME)
    assert loaded.height == 4
    assert sorted(loaded["run_id"].unique().to_list()) == ["run1", "run2"]

    store.close()
