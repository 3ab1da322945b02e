"""Result tables for prioritisation runs."""

from hiphive_pipeline.output.results import (
    RESULTS_TABLE_NAME,
    results_to_dataframe,
    save_results,
)

__all__ = ["RESULTS_TABLE_NAME", "results_to_dataframe", "save_results"]
