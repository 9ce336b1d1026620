# codeflattener/core/discovery/__init__.py
"""
Path discovery and filtering for codeflattener.

Enumerates files under a scan root and applies include/exclude glob rules
(and, when requested, .gitignore rules).
"""
from .walker import enumerate_files, filter_paths, relative_posix_path
from .pattern_matching import should_include

__all__ = ["enumerate_files", "filter_paths", "relative_posix_path", "should_include"]
