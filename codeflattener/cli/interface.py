# codeflattener/cli/interface.py
import sys
from pathlib import Path
from typing import Any, Dict, List

import click
from click_option_group import optgroup
import structlog

from codeflattener import __version__ as app_version
from codeflattener.config.loader import load_and_merge_configs, build_effective_options
from codeflattener.config.settings import FlattenConfig, parse_filter_list
from codeflattener.core.output import write_to_stdout, write_to_file
from codeflattener.core.pipeline import Flattener
from codeflattener.core.repository import cloned_repository
from codeflattener.exceptions import FlattenerError
from codeflattener.logging_setup import configure_logging

log = structlog.get_logger(__name__)

# CLI parameter name -> FlattenConfig attribute, applied only when given on the command line.
_DIRECT_CLI_ATTRS = (
    "input_path", "repository_url", "output_file", "template_path",
    "compress", "respect_gitignore", "follow_symlinks",
)


def _given_on_command_line(ctx: click.Context, param_name: str) -> bool:
    return ctx.get_parameter_source(param_name) == click.core.ParameterSource.COMMANDLINE


def _apply_cli_options(ctx: click.Context, effective_options: Dict[str, Any], cli_params: Dict[str, Any]) -> None:
    for attr in _DIRECT_CLI_ATTRS:
        if _given_on_command_line(ctx, attr):
            effective_options[attr] = cli_params[attr]

    # a source given on the command line replaces the other source from configuration.
    input_given = _given_on_command_line(ctx, "input_path")
    repository_given = _given_on_command_line(ctx, "repository_url")
    if input_given and not repository_given:
        effective_options["repository_url"] = None
    elif repository_given and not input_given:
        effective_options["input_path"] = None

    filter_includes: List[str] = []
    filter_excludes: List[str] = []
    filters_given = _given_on_command_line(ctx, "filters")
    if filters_given:
        filter_includes, filter_excludes = parse_filter_list(cli_params["filters"])
        log.info("applying_custom_filters", include=filter_includes, exclude=filter_excludes)

    include_given = _given_on_command_line(ctx, "include_patterns")
    exclude_given = _given_on_command_line(ctx, "exclude_patterns")
    # --filter replaces both lists from configuration; --include/--exclude replace their own list.
    if filters_given or include_given:
        effective_options["include_patterns"] = filter_includes + list(cli_params["include_patterns"])
    if filters_given or exclude_given:
        effective_options["exclude_patterns"] = filter_excludes + list(cli_params["exclude_patterns"])


def _run_flatten_flow(effective_config: FlattenConfig) -> None:
    log.info("flatten_orchestration_started", root=str(effective_config.base_dir))
    generator = Flattener(effective_config)
    final_document = generator.generate()

    if effective_config.output_file:
        write_to_file(effective_config.output_file, final_document)
        click.echo(f"Info: Output written to: {effective_config.output_file}", err=True)
    else:
        log.info("writing_final_output_to_stdout")
        write_to_stdout(final_document)

    click.secho(f"{len(generator.records)} files flattened", fg="cyan", err=True)


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@optgroup.group("Input Source Options", help="Where to read the source tree from (exactly one).")
@optgroup.option("-i", "--input", "input_path", type=click.Path(path_type=Path), default=None, help="Root folder to flatten.")
@optgroup.option("-r", "--repository", "repository_url", default=None, metavar="URL", help="Git repository URL to clone and flatten.")
@optgroup.group("Filtering Options", help="Control which files are processed.")
@optgroup.option("-f", "--filter", "filters", multiple=True, metavar="LIST", help="Comma-separated filters, e.g. '*.cs,*.md,examples'. '*.ext' entries include, others exclude. Replaces configured patterns.")
@optgroup.option("--include", "include_patterns", multiple=True, help="Include glob pattern (repeatable).")
@optgroup.option("--exclude", "exclude_patterns", multiple=True, help="Exclude glob pattern matched against each path segment (repeatable).")
@optgroup.option("--respect-gitignore/--no-respect-gitignore", "respect_gitignore", default=False, help="Skip files ignored by .gitignore files under the root.")
@optgroup.option("-L", "--follow-symlinks", "follow_symlinks", is_flag=True, default=False, help="Follow symbolic links to directories.")
@optgroup.group("Output Options", help="Where and how the flattened document is written.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output file path. Default: stdout.")
@optgroup.option("-c", "--compress", "compress", is_flag=True, default=False, help="Compress whitespace in file contents.")
@optgroup.option("-t", "--template", "template_path", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path), default=None, help="Path to a custom Handlebars template file.")
@optgroup.group("Application Behavior", help="Configuration profiles and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="codeflattener", prog_name="codeflattener", help="Show version and exit.")
@click.pass_context
def main_cli(ctx: click.Context, **cli_params: Any):
    """codeflattener: flatten a source tree into a single annotated markdown
    document with per-file metadata, git provenance and related-file links."""

    log_level = "warning"
    if cli_params.get("verbosity_level", 0) == 1: log_level = "info"
    elif cli_params.get("verbosity_level", 0) >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=cli_params.get("force_json_logs_cli", False))

    log.debug("cli_command_invoked", params=cli_params)

    try:
        raw_configs_from_toml_files = load_and_merge_configs()
        effective_options = build_effective_options(
            raw_configs_from_toml_files, cli_params.get("active_config_profile_name")
        )
        _apply_cli_options(ctx, effective_options, cli_params)

        if effective_options.get("input_path") and effective_options.get("repository_url"):
            raise click.UsageError("Use either --input or --repository, not both.")
        if not effective_options.get("input_path") and not effective_options.get("repository_url"):
            raise click.UsageError("Either an input path (-i) or a repository URL (-r) must be specified.")

        final_config = FlattenConfig(**effective_options)

        if final_config.repository_url:
            click.echo(f"Cloning repository: {final_config.repository_url}", err=True)
            with cloned_repository(final_config.repository_url) as clone_path:
                final_config.base_dir = clone_path
                _run_flatten_flow(final_config)
        else:
            _run_flatten_flow(final_config)

    except click.exceptions.Exit as e: raise e
    except FlattenerError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)
