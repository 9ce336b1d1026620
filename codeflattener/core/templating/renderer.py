# codeflattener/core/templating/renderer.py
"""
Contains the TemplateRenderer class responsible for loading, compiling,
and rendering Handlebars templates.
"""
from pathlib import Path
from typing import Any, Dict, Optional
import pybars  # type: ignore
import structlog

from codeflattener.exceptions import TemplateError

from .default_templates import DEFAULT_MARKDOWN_TEMPLATE

log = structlog.get_logger(__name__)


class TemplateRenderer:
    """Manages loading, compilation, and rendering of Handlebars templates."""
    def __init__(self, template_path: Optional[Path] = None):
        self.template_path = template_path
        self.handlebars_compiler = pybars.Compiler()
        self.template_source_name: str = "unknown_source"
        self.raw_template_string: str = self._determine_and_load_template_string()

        try:
            self.compiled_template_function = self.handlebars_compiler.compile(self.raw_template_string)
            log.debug("template_compiled_successfully", source=self.template_source_name)
        except Exception as e:
            log.error("template_compilation_failed", source=self.template_source_name, error=str(e))
            raise TemplateError(f"Failed to compile template from '{self.template_source_name}': {e}") from e

    def _determine_and_load_template_string(self) -> str:
        """Loads the custom template file when one is configured, else the built-in default."""
        if self.template_path:
            self.template_source_name = f"custom_file:{self.template_path}"
            log.info("loading_custom_template_from_path", path=str(self.template_path))
            try:
                return self.template_path.read_text(encoding="utf-8")
            except OSError as e:
                raise TemplateError(f"Failed to read custom template file {self.template_path}: {e}") from e

        self.template_source_name = "default_markdown"
        return DEFAULT_MARKDOWN_TEMPLATE

    def render(self, template_context_data: Dict[str, Any]) -> str:
        """Renders the compiled template with the given context data."""
        log.info("rendering_template_with_context", source=self.template_source_name,
                 context_keys=list(template_context_data.keys()))
        try:
            rendered_string = self.compiled_template_function(template_context_data)
        except Exception as e:
            log.error("template_rendering_error_occurred", source=self.template_source_name,
                      error_message=str(e))
            raise TemplateError(f"Template render failed for '{self.template_source_name}': {e}") from e
        log.debug("template_rendered_successfully", source=self.template_source_name)
        return str(rendered_string).strip() + "\n"
