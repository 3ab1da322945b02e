"""Protein-protein interaction proximity matrix."""

from hiphive_pipeline.network.matrix import (
    ProximityMatrix,
    load_proximity_matrix,
    save_proximity_matrix,
)

__all__ = ["ProximityMatrix", "load_proximity_matrix", "save_proximity_matrix"]
