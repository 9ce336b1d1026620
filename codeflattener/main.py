# codeflattener/main.py
"""Main entry point for the codeflattener CLI application."""

from codeflattener.cli.interface import main_cli


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli(prog_name="codeflattener")

if __name__ == '__main__':
    entrypoint()
