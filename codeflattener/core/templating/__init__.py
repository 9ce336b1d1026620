# codeflattener/core/templating/__init__.py
"""
Templating for codeflattener.

Provides the TemplateRenderer for compiling and rendering the flattened document,
and build_template_context for preparing record data for the template.
"""
from .renderer import TemplateRenderer
from .context_builder import build_template_context, render_front_matter

__all__ = [
    "TemplateRenderer",
    "build_template_context",
    "render_front_matter",
]
