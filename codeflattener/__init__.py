"""codeflattener: flatten a source tree into one annotated markdown document."""

__version__ = "0.3.0"
