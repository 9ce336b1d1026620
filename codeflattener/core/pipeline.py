# codeflattener/core/pipeline.py
import dataclasses
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from codeflattener.config.settings import FlattenConfig
from codeflattener.core.discovery.walker import enumerate_files, filter_paths
from codeflattener.core.metadata import collect_file_metadata
from codeflattener.core.models import FileRecord
from codeflattener.core.processing import prepare_file_element
from codeflattener.core.relations import find_related
from codeflattener.core.templating import TemplateRenderer, build_template_context
from codeflattener.core.vcs import VcsProvider, open_vcs_provider
from codeflattener.exceptions import DiscoveryError
from codeflattener.util import build_language_map


log = structlog.get_logger(__name__)


class PipelinePhase(Enum):
    # linear, never moves backwards.
    START = "start"
    DISCOVER = "discover"
    FILTER = "filter"
    COLLECT_ALL = "collect_all"
    RELATE_ALL = "relate_all"
    DONE = "done"


class Flattener:
    # orchestrates discovery, filtering, metadata collection, relation inference and rendering.
    def __init__(self, config: FlattenConfig, vcs_provider: Optional[VcsProvider] = None):
        self.config: FlattenConfig = config
        self.root_dir: Path = config.base_dir
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.phase: PipelinePhase = PipelinePhase.START
        self.records: List[FileRecord] = []
        self.language_map = build_language_map(config.language_overrides)
        self._vcs_provider = vcs_provider

    def _enter_phase(self, phase: PipelinePhase) -> None:
        self.log.info("pipeline_phase_entered", phase=phase.value, previous=self.phase.value)
        self.phase = phase

    def _make_progress(self) -> Progress:
        app_log_level = stdlib_logging.getLogger("codeflattener").getEffectiveLevel()
        progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty()
        return Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"), BarColumn(),
            transient=True, disable=progress_disabled, console=RichConsole(file=sys.stderr),
        )

    def _validate_root(self) -> None:
        if not self.root_dir.is_dir():
            self.log.error("scan_root_not_found", root=str(self.root_dir))
            raise DiscoveryError(f"Directory not found: {self.root_dir}")

    def _collect_all(self, paths: List[Path], progress: Progress) -> List[FileRecord]:
        vcs_provider = self._vcs_provider or open_vcs_provider(self.root_dir)
        collected: List[FileRecord] = []
        collect_task = progress.add_task("collecting metadata...", total=len(paths))
        for file_path in paths:
            try:
                collected.append(collect_file_metadata(self.root_dir, file_path, vcs_provider))
            except OSError as e:
                self.log.warning("file_metadata_collection_failed", path=str(file_path), error=str(e))
            progress.update(collect_task, advance=1, description=f"collecting {file_path.name}")
        return collected

    def _relate_all(self, collected: List[FileRecord], progress: Progress) -> List[FileRecord]:
        # every record sees the complete, already-collected set.
        relate_task = progress.add_task("finding related files...", total=len(collected))
        related_records: List[FileRecord] = []
        for record in collected:
            related = find_related(record, collected)
            related_records.append(dataclasses.replace(record, related_paths=tuple(related)))
            progress.update(relate_task, advance=1)
        return related_records

    def build_records(self) -> List[FileRecord]:
        # runs DISCOVER -> FILTER -> COLLECT_ALL -> RELATE_ALL and returns the final records.
        self._validate_root()

        with self._make_progress() as progress:
            self._enter_phase(PipelinePhase.DISCOVER)
            discover_task = progress.add_task("discovering files...", total=None)
            discovered = list(enumerate_files(self.root_dir, self.config.follow_symlinks))
            progress.update(discover_task, completed=True, description=f"discovered {len(discovered)} files.")

            self._enter_phase(PipelinePhase.FILTER)
            if not self.config.include_patterns and not self.config.exclude_patterns:
                self.log.warning("no_filters_specified_all_files_processed")
            kept = filter_paths(self.root_dir, discovered, self.config)

            self._enter_phase(PipelinePhase.COLLECT_ALL)
            collected = self._collect_all(kept, progress)

            self._enter_phase(PipelinePhase.RELATE_ALL)
            self.records = self._relate_all(collected, progress)

        self._enter_phase(PipelinePhase.DONE)
        self.log.info("pipeline_complete", discovered=len(discovered), records=len(self.records))
        return self.records

    def file_elements(self) -> List[Dict[str, Any]]:
        return [
            prepare_file_element(record, self.config.compress, self.language_map)
            for record in self.records
        ]

    def generate(self) -> str:
        # runs the full pipeline and returns the rendered document.
        self.build_records()
        renderer = TemplateRenderer(self.config.template_path)
        context = build_template_context(self.root_dir, self.file_elements())
        return renderer.render(context)
