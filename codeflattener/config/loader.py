# codeflattener/config/loader.py
"""
Handles loading and merging of configuration from TOML files, including named profiles.
"""
import toml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import fields as dataclass_fields, MISSING
import structlog

from codeflattener.exceptions import ConfigError

from .settings import FlattenConfig

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".codeflattener.toml", "codeflattener.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "codeflattener"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_CONFIG_ATTR_MAP: Dict[str, str] = {
    "input_path": "input_path",
    "repository": "repository_url",
    "include_patterns": "include_patterns",
    "exclude_patterns": "exclude_patterns",
    "languages": "language_overrides",
    "compress": "compress",
    "respect_gitignore": "respect_gitignore",
    "follow_symlinks": "follow_symlinks",
    "output_file": "output_file",
    "template": "template_path",
}

_LIST_ATTRS = ("include_patterns", "exclude_patterns")
_BOOL_ATTRS = ("compress", "respect_gitignore", "follow_symlinks")
_PATH_ATTRS = ("input_path", "output_file", "template_path")


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
        return data.get("tool", {}).get("codeflattener", {}) if file_path.name == "pyproject.toml" else data
    except Exception as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        return {}


def load_and_merge_configs(search_dir: Optional[Path] = None) -> Dict[str, Any]:
    # merges the user-global config with the first project config found in `search_dir` (cwd by default).
    search_dir = search_dir or Path.cwd()
    merged_toml_data: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged_toml_data.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = search_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        user_profiles = merged_toml_data.get("profiles", {})
        project_profiles = project_settings.pop("profiles", {})
        if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
            user_profiles.update(project_profiles)
            merged_toml_data["profiles"] = user_profiles
        elif isinstance(project_profiles, dict):
            merged_toml_data["profiles"] = project_profiles
        merged_toml_data.update(project_settings)
        break

    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data


def _coerce_value(attr: str, value: Any, source: str) -> Any:
    # converts a raw TOML value to the type FlattenConfig expects, raising ConfigError on mismatch.
    if attr in _LIST_ATTRS:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{attr}' in {source} must be a list of strings, got {value!r}")
        return list(value)
    if attr in _BOOL_ATTRS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{attr}' in {source} must be true or false, got {value!r}")
        return value
    if attr in _PATH_ATTRS:
        if not isinstance(value, str):
            raise ConfigError(f"'{attr}' in {source} must be a path string, got {value!r}")
        return Path(value) if value else None
    if attr == "language_overrides":
        if not isinstance(value, dict):
            raise ConfigError(f"'languages' in {source} must be a table of extension = language")
        return {str(k): str(v) for k, v in value.items()}
    return value


def _apply_toml_section(effective_options: Dict[str, Any], section: Dict[str, Any], source: str) -> None:
    for toml_key, raw_value in section.items():
        attr = CONFIG_KEY_TO_CONFIG_ATTR_MAP.get(toml_key)
        if attr is None:
            if toml_key not in ("profiles", "description"):
                log.debug("unknown_config_key_ignored", key=toml_key, source=source)
            continue
        effective_options[attr] = _coerce_value(attr, raw_value, source)


def build_effective_options(
    raw_toml_data: Dict[str, Any], active_profile_name: Optional[str] = None
) -> Dict[str, Any]:
    """
    Layers dataclass defaults, merged TOML settings and an optional profile into
    a dict of FlattenConfig constructor arguments. Command line values are applied by the caller.
    """
    effective_options: Dict[str, Any] = {}
    for fd_init in dataclass_fields(FlattenConfig):
        if fd_init.init:
            effective_options[fd_init.name] = fd_init.default_factory() if fd_init.default_factory is not MISSING else fd_init.default

    _apply_toml_section(effective_options, raw_toml_data, "config file")

    if active_profile_name:
        profile_values_toml = raw_toml_data.get("profiles", {}).get(active_profile_name, {})
        if profile_values_toml:
            log.info("applying_profile_settings", profile=active_profile_name)
            _apply_toml_section(effective_options, profile_values_toml, f"profile '{active_profile_name}'")
        else:
            log.warning("profile_not_found_in_config_files", profile_name=active_profile_name)

    return effective_options
