# codeflattener/core/templating/context_builder.py
"""
Builds the context dictionary required for rendering the Handlebars template.
Includes the YAML front matter for each record and the project source tree.
"""
import datetime
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import structlog

from codeflattener.core.models import FileRecord
from codeflattener.exceptions import TemplateError
from codeflattener.util import to_dotted_path

log = structlog.get_logger(__name__)


def _quote(value: str) -> str:
    # JSON string literals are valid YAML double-quoted scalars.
    return json.dumps(value, ensure_ascii=False)


def render_front_matter(record: FileRecord) -> str:
    """Serializes a record's metadata as YAML (without the surrounding --- lines)."""
    lines = [
        f"relative_path: {_quote(record.relative_path)}",
        f"absolute_path: {_quote(str(record.absolute_path))}",
        f"last_modified: {_quote(record.last_modified.isoformat())}",
        f"size_bytes: {record.size_bytes}",
        f"extension: {_quote(record.extension)}",
    ]
    vcs = record.vcs_info
    if vcs is not None:
        lines.extend([
            "vcs:",
            f"  commit_id: {_quote(vcs.commit_id)}",
            f"  last_author: {_quote(vcs.last_author)}",
            f"  last_modified_at: {_quote(vcs.last_modified_at.isoformat())}",
            f"  branch: {_quote(vcs.branch)}",
            f"  remote_url: {_quote(vcs.remote_url)}",
        ])
        if vcs.contributors:
            lines.append("  contributors:")
            lines.extend(f"    - {_quote(name)}" for name in sorted(vcs.contributors))
        else:
            lines.append("  contributors: []")
    if record.related_paths:
        lines.append("related_files:")
        lines.extend(f"  - {_quote(path)}" for path in record.related_paths)
    else:
        lines.append("related_files: []")
    return "\n".join(lines)


def _build_tree_from_records(records: Sequence[FileRecord], root_display_name: str) -> str:
    """Generates a text-based directory tree string from record relative paths."""
    tree_structure_dict: Dict[str, Any] = {}
    for rel_path_obj in sorted((Path(r.relative_path) for r in records), key=lambda p: str(p).lower()):
        current_dict_level = tree_structure_dict
        parts = rel_path_obj.parts
        for i, part_name in enumerate(parts):
            is_last_part_of_path = (i == len(parts) - 1)
            node_data = current_dict_level.setdefault(part_name, {"_type_": "file" if is_last_part_of_path else "dir", "_children_": {}})
            if not is_last_part_of_path:
                node_data["_type_"] = "dir"
                current_dict_level = node_data["_children_"]

    def format_tree_nodes_recursively(node_dict_level: Dict[str, Any], indent_str: str = "") -> List[str]:
        output_lines: List[str] = []
        item_names_to_display = sorted(node_dict_level, key=str.lower)

        for i, item_name in enumerate(item_names_to_display):
            item_data = node_dict_level[item_name]
            is_last_item_at_this_level = i == len(item_names_to_display) - 1
            connector_str = "└── " if is_last_item_at_this_level else "├── "
            output_lines.append(f"{indent_str}{connector_str}{item_name}")

            if item_data["_type_"] == "dir" and item_data["_children_"]:
                new_indent_str = indent_str + ("    " if is_last_item_at_this_level else "│   ")
                output_lines.extend(format_tree_nodes_recursively(item_data["_children_"], new_indent_str))
        return output_lines

    final_tree_lines = [f"{root_display_name}/"]
    final_tree_lines.extend(format_tree_nodes_recursively(tree_structure_dict))
    return "\n".join(final_tree_lines)


def build_template_context(root_dir: Path, file_elements: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Constructs the context dictionary passed to the Handlebars template for rendering."""
    log.info("building_template_context_for_renderer", num_files=len(file_elements))
    if not root_dir.is_absolute():
        raise TemplateError(f"scan root {root_dir} is not absolute for template context.")

    project_root_name_for_display = root_dir.name or str(root_dir)
    records = [element["record"] for element in file_elements]

    files_context = []
    for element in file_elements:
        record: FileRecord = element["record"]
        files_context.append({
            "front_matter": render_front_matter(record),
            "heading": to_dotted_path(record.relative_path),
            "language": element["language"],
            "fence": element["fence"],
            "content": element["content"],
            "related_links": [to_dotted_path(p) for p in record.related_paths] or None,
        })

    raw_context_data: Dict[str, Any] = {
        "project_root_path_absolute": str(root_dir),
        "project_path_header_display": project_root_name_for_display,
        "generated_at": datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
        "file_count": len(files_context),
        "source_tree": _build_tree_from_records(records, project_root_name_for_display) if records else None,
        "files": files_context or None,
    }

    final_template_context = {k: v for k, v in raw_context_data.items() if v is not None}
    log.debug("template_context_prepared_with_keys", keys=list(final_template_context.keys()))
    return final_template_context
