"""Provenance tracking for prioritisation runs."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class ProvenanceTracker:
    """
    Records what produced a ranking.

    Captures the pipeline version, data versions (HPO release, phenotype
    catalog, STRING), the config hash and each step of the run.
    """

    def __init__(self, pipeline_version: str, config: "PipelineConfig"):
        self.run_id = uuid.uuid4().hex
        self.pipeline_version = pipeline_version
        self.config_hash = config.config_hash()
        self.data_source_versions = config.versions.model_dump()
        self.prioritiser_settings = config.prioritiser.model_dump()
        self.processing_steps = []
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Record a processing step.

        Args:
            step_name: Name of the processing step
            details: Optional dictionary of additional details
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def create_metadata(self) -> dict:
        """Full provenance metadata as a JSON-serialisable dict."""
        return {
            "run_id": self.run_id,
            "pipeline_version": self.pipeline_version,
            "data_source_versions": self.data_source_versions,
            "prioritiser_settings": self.prioritiser_settings,
            "config_hash": self.config_hash,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.processing_steps,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Save provenance metadata as a JSON sidecar file.

        Args:
            output_path: Path of the output the sidecar describes.
                         Sidecar is written to {stem}.provenance.json

        Returns:
            Path of the sidecar file
        """
        sidecar_path = Path(output_path).with_suffix(".provenance.json")
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    def save_to_store(self, store: "PipelineStore") -> None:
        """Append this run's provenance to the _provenance table."""
        metadata = self.create_metadata()

        store.conn.execute("""
            CREATE TABLE IF NOT EXISTS _provenance (
                run_id VARCHAR,
                version VARCHAR,
                config_hash VARCHAR,
                created_at TIMESTAMP,
                steps_json VARCHAR
            )
        """)
        store.conn.execute("""
            INSERT INTO _provenance (run_id, version, config_hash, created_at, steps_json)
            VALUES (?, ?, ?, ?, ?)
        """, [
            metadata["run_id"],
            metadata["pipeline_version"],
            metadata["config_hash"],
            metadata["created_at"],
            json.dumps(metadata["processing_steps"], default=str),
        ])

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        config: "PipelineConfig",
        version: Optional[str] = None,
    ) -> "ProvenanceTracker":
        """
        Create ProvenanceTracker from a PipelineConfig.

        Args:
            config: PipelineConfig instance
            version: Pipeline version string. If None, uses hiphive_pipeline.__version__
        """
        if version is None:
            from hiphive_pipeline import __version__
            version = __version__

        return cls(version, config)
