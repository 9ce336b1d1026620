from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple
import structlog

log = structlog.get_logger(__name__)

DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (".git",)
EXTENSION_FILTER_PREFIX = "*."

@dataclass
class FlattenConfig:
    # holds all configuration parameters for a single run.
    input_path: Optional[Path] = None
    repository_url: Optional[str] = None
    include_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    language_overrides: Dict[str, str] = field(default_factory=dict)
    compress: bool = False
    respect_gitignore: bool = False
    follow_symlinks: bool = False
    output_file: Optional[Path] = None
    template_path: Optional[Path] = None

    # internal state, not set directly by user flags.
    base_dir: Path = field(init=False)

    def __post_init__(self):
        # the scan root is not required to exist yet; the pipeline reports a missing root.
        self.base_dir = Path(self.input_path or Path.cwd()).expanduser().resolve()

def parse_filter_list(raw_filters: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Splits comma-separated filter strings into (include_patterns, exclude_patterns).
    Entries starting with "*." are extension includes, anything else is a path exclude.
    """
    include_patterns: List[str] = []
    exclude_patterns: List[str] = []
    for raw in raw_filters:
        for item in raw.split(","):
            item = item.strip()
            if not item:
                continue
            if item.startswith(EXTENSION_FILTER_PREFIX):
                include_patterns.append(item)
                log.debug("extension_filter_added", pattern=item)
            else:
                exclude_patterns.append(item)
                log.debug("path_filter_added", pattern=item)
    return include_patterns, exclude_patterns
