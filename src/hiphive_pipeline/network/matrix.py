"""Random-walk proximity matrix over a protein-protein interaction network."""

from pathlib import Path
from typing import Iterable, Mapping

import numpy as np
import structlog

logger = structlog.get_logger(__name__)


class ProximityMatrix:
    """
    Square gene-by-gene proximity matrix keyed by Entrez gene id.

    Entry [i, j] is the random-walk proximity of the gene at row i to the
    gene at column j. Read-only once constructed; the underlying array is
    marked non-writeable so it can be shared between scoring threads.
    """

    def __init__(self, matrix: np.ndarray, gene_index: Mapping[int, int]):
        matrix = np.array(matrix, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Proximity matrix must be square, got shape {matrix.shape}")
        if len(gene_index) != matrix.shape[0]:
            raise ValueError(
                f"Gene index has {len(gene_index)} entries for a matrix of size {matrix.shape[0]}"
            )
        matrix.setflags(write=False)
        self._matrix = matrix
        self._gene_index = dict(gene_index)

    @classmethod
    def from_gene_ids(cls, matrix: np.ndarray, gene_ids: Iterable[int]) -> "ProximityMatrix":
        """Build a matrix whose row/column order is given by gene_ids."""
        return cls(matrix, {int(gene_id): index for index, gene_id in enumerate(gene_ids)})

    @classmethod
    def empty(cls) -> "ProximityMatrix":
        """A matrix with no genes. Every proximity lookup scores 0."""
        return cls(np.zeros((0, 0)), {})

    @property
    def num_rows(self) -> int:
        return self._matrix.shape[0]

    @property
    def num_columns(self) -> int:
        return self._matrix.shape[1]

    @property
    def gene_ids(self) -> list[int]:
        return list(self._gene_index)

    def contains_gene(self, gene_id: int) -> bool:
        return gene_id in self._gene_index

    def row_index(self, gene_id: int) -> int:
        """Row (and column) position of a gene. Raises KeyError if absent."""
        return self._gene_index[gene_id]

    def column_vector(self, gene_id: int) -> np.ndarray:
        """Read-only view of the gene's proximity column."""
        return self._matrix[:, self._gene_index[gene_id]]

    def value(self, row_gene_id: int, column_gene_id: int) -> float:
        return float(self._matrix[self._gene_index[row_gene_id], self._gene_index[column_gene_id]])

    def __len__(self) -> int:
        return self.num_rows

    def __repr__(self) -> str:
        return f"ProximityMatrix(genes={self.num_rows})"


def load_proximity_matrix(path: Path | str, exponentiate: bool = False) -> ProximityMatrix:
    """
    Load a proximity matrix from an .npz archive.

    The archive must hold a square float array ``matrix`` and an integer
    array ``gene_ids`` giving the Entrez id for each row/column.

    Args:
        path: Path to the .npz file
        exponentiate: Apply exp() to every entry (matrices stored as logs)

    Returns:
        ProximityMatrix

    Raises:
        FileNotFoundError: If path doesn't exist
        KeyError: If either array is missing from the archive
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Proximity matrix not found: {path}")

    with np.load(path) as archive:
        matrix = archive["matrix"]
        gene_ids = archive["gene_ids"]

    if exponentiate:
        matrix = np.exp(matrix)

    proximity = ProximityMatrix.from_gene_ids(matrix, gene_ids.tolist())
    logger.info("proximity_matrix_loaded", path=str(path), genes=proximity.num_rows)
    return proximity


def save_proximity_matrix(proximity: ProximityMatrix, path: Path | str) -> Path:
    """Write a matrix in the format read by load_proximity_matrix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gene_ids = np.array(proximity.gene_ids, dtype=np.int64)
    order = np.array([proximity.row_index(g) for g in proximity.gene_ids], dtype=np.int64)
    matrix = proximity._matrix[np.ix_(order, order)]
    np.savez(path, matrix=matrix, gene_ids=gene_ids)
    return path
