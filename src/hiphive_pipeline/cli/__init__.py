"""Command-line interface for hiphive-pipeline."""
