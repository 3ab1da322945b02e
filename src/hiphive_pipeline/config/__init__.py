from .loader import load_config, load_config_with_overrides
from .schema import (
    DataVersions,
    ExecutionConfig,
    InvalidRunParameterError,
    PipelineConfig,
    PrioritiserConfig,
    parse_run_params,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "DataVersions",
    "PrioritiserConfig",
    "ExecutionConfig",
    "InvalidRunParameterError",
    "parse_run_params",
]
