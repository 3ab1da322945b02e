"""HiPhive phenotype-driven gene prioritisation pipeline."""

__version__ = "0.1.0"
