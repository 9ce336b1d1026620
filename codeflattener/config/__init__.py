from .settings import FlattenConfig, DEFAULT_EXCLUDE_PATTERNS, parse_filter_list
from .loader import load_and_merge_configs, build_effective_options

__all__ = [
    "FlattenConfig",
    "DEFAULT_EXCLUDE_PATTERNS",
    "parse_filter_list",
    "load_and_merge_configs",
    "build_effective_options",
]
