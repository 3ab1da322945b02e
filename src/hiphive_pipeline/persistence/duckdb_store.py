"""DuckDB-backed store for the phenotype catalog and prioritisation results."""

from pathlib import Path
from typing import Optional

import duckdb
import polars as pl


class PipelineStore:
    """
    DuckDB storage for catalog tables and run results.

    Every table written through save_dataframe is registered in the
    _tables catalog with its row count and a description, so a run can
    check what data is present before scoring.
    """

    def __init__(self, db_path: Path, read_only: bool = False):
        """
        Initialize PipelineStore with a DuckDB database.

        Args:
            db_path: Path to DuckDB database file. Parent directories
                     are created automatically.
            read_only: Open the database without write access
        """
        self.db_path = Path(db_path)
        self.read_only = read_only
        if not read_only:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = duckdb.connect(str(self.db_path), read_only=read_only)

        if not read_only:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS _tables (
                    table_name VARCHAR PRIMARY KEY,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    row_count INTEGER,
                    description VARCHAR
                )
            """)

    def save_dataframe(
        self,
        df: pl.DataFrame,
        table_name: str,
        description: str = "",
        replace: bool = True,
    ) -> None:
        """
        Save a polars DataFrame to DuckDB as a table.

        Args:
            df: DataFrame to save
            table_name: Name for the DuckDB table
            description: Description stored in the _tables catalog
            replace: If True, replace existing table; if False, append
        """
        if not isinstance(df, pl.DataFrame):
            raise ValueError("df must be a polars.DataFrame")

        if replace or not self.has_table(table_name):
            self.conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM df")
        else:
            self.conn.execute(f"INSERT INTO {table_name} SELECT * FROM df")

        row_count = self.conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]
        self.conn.execute("""
            INSERT OR REPLACE INTO _tables (table_name, row_count, description, created_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
        """, [table_name, row_count, description])

    def load_dataframe(self, table_name: str) -> Optional[pl.DataFrame]:
        """
        Load a table as a polars DataFrame.

        Returns:
            DataFrame or None if table doesn't exist
        """
        try:
            return self.conn.execute(f"SELECT * FROM {table_name}").pl()
        except duckdb.CatalogException:
            return None

    def has_table(self, table_name: str) -> bool:
        """True if the table exists in the database, registered or not."""
        result = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return result[0] > 0

    def list_tables(self) -> list[dict]:
        """
        List registered tables with metadata.

        Returns:
            List of dicts with keys table_name, created_at, row_count, description
        """
        result = self.conn.execute("""
            SELECT table_name, created_at, row_count, description
            FROM _tables
            ORDER BY table_name
        """).fetchall()

        return [
            {
                "table_name": row[0],
                "created_at": row[1],
                "row_count": row[2],
                "description": row[3],
            }
            for row in result
        ]

    def execute_query(self, query: str, params: Optional[list] = None) -> pl.DataFrame:
        """Execute a SQL query and return the result as a polars DataFrame."""
        if params:
            result = self.conn.execute(query, params)
        else:
            result = self.conn.execute(query)
        return result.pl()

    def close(self) -> None:
        """Close the DuckDB connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: "PipelineConfig", read_only: bool = False) -> "PipelineStore":
        """Create a PipelineStore on config.duckdb_path."""
        return cls(config.duckdb_path, read_only=read_only)
