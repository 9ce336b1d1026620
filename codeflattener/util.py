from pathlib import PurePath
from types import MappingProxyType
from typing import Mapping, Optional, Union
import structlog

log = structlog.get_logger(__name__)
utf8_bom = b"\xef\xbb\xbf"

# extension (lowercase, leading dot) -> code fence language identifier.
DEFAULT_LANGUAGE_MAP: Mapping[str, str] = MappingProxyType({
    ".cs": "csharp", ".py": "python", ".js": "javascript", ".ts": "typescript",
    ".java": "java", ".cpp": "cpp", ".c": "c", ".go": "go", ".rb": "ruby",
    ".php": "php", ".rs": "rust", ".swift": "swift", ".kt": "kotlin",
    ".scala": "scala", ".r": "r", ".md": "markdown", ".html": "html",
    ".xml": "xml", ".json": "json", ".yaml": "yaml", ".yml": "yaml",
    ".sh": "bash", ".bash": "bash", ".sql": "sql", ".css": "css",
    ".scss": "scss", ".less": "less", ".vue": "vue", ".jsx": "jsx",
    ".tsx": "tsx", ".dart": "dart", ".lua": "lua", ".pl": "perl",
    ".m": "matlab", ".f90": "fortran", ".f95": "fortran", ".f": "fortran",
    ".jl": "julia", ".ex": "elixir", ".exs": "elixir", ".erl": "erlang",
    ".hrl": "erlang", ".hs": "haskell", ".lhs": "haskell",
    ".ps1": "powershell", ".psm1": "powershell", ".psd1": "powershell",
    ".proto": "protobuf", ".gradle": "groovy", ".tf": "terraform",
    ".hcl": "hcl", ".dockerfile": "dockerfile", ".toml": "toml", ".ini": "ini",
    ".conf": "configuration", ".bat": "batch", ".cmd": "batch",
    ".tex": "latex", ".rst": "restructuredtext", ".org": "org",
    ".mk": "makefile", ".ada": "ada", ".adb": "ada", ".ads": "ada",
})

# files recognised by name when they carry no useful extension.
SPECIAL_FILE_NAMES: Mapping[str, str] = MappingProxyType({
    "dockerfile": "dockerfile",
    "makefile": "makefile",
})

FALLBACK_LANGUAGE = "plaintext"


def strip_utf8_bom(data: bytes) -> bytes:
    # removes the utf-8 byte order mark from byte data if present.
    if data.startswith(utf8_bom):
        return data[len(utf8_bom):]
    return data


def _normalize_extension_key(extension: str) -> str:
    ext = extension.strip().lower()
    if ext.startswith("*"):
        ext = ext[1:]
    if not ext.startswith("."):
        ext = f".{ext}"
    return ext


def build_language_map(overrides: Optional[Mapping[str, str]] = None) -> Mapping[str, str]:
    """
    Returns a read-only extension -> language mapping: the default table with
    `overrides` layered on top. Override keys may be given as "cs", ".cs" or "*.cs".
    """
    merged = dict(DEFAULT_LANGUAGE_MAP)
    for raw_ext, language in (overrides or {}).items():
        if not raw_ext or not str(raw_ext).strip(".* "):
            log.warning("ignoring_empty_language_override_key", key=raw_ext, language=language)
            continue
        merged[_normalize_extension_key(str(raw_ext))] = str(language)
    return MappingProxyType(merged)


def get_language_identifier(
    file_path: Union[str, PurePath],
    language_map: Mapping[str, str] = DEFAULT_LANGUAGE_MAP,
) -> str:
    # resolves the code fence language for a file from its extension or well-known name.
    path = PurePath(file_path)
    extension = path.suffix.lower()
    if extension and extension in language_map:
        return language_map[extension]
    special = SPECIAL_FILE_NAMES.get(path.name.lower())
    if special:
        return special
    return FALLBACK_LANGUAGE


def to_dotted_path(relative_path: str) -> str:
    # "src/app/main.py" -> "src.app.main.py", used for headings and wiki links.
    return relative_path.replace("\\", ".").replace("/", ".")
