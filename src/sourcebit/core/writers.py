"""Serializers for the fixed set of output file formats.

Each writer turns a file's content into the exact text that lands on disk.
The reconciler compares these strings against the previous run's to decide
whether a file needs writing at all.
"""

import json
from collections.abc import Callable
from typing import Any

import yaml

from sourcebit.contracts import FileFormat

FileWriter = Callable[[Any], str]


def _dump_yaml(value: Any) -> str:
    return yaml.safe_dump(
        value,
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=False,
    )


def write_json(content: Any) -> str:
    """Pretty-print content as JSON with 2-space indentation."""
    return json.dumps(content, indent=2, ensure_ascii=False)


def write_frontmatter_markdown(content: Any) -> str:
    """Render a Markdown document with a YAML frontmatter block.

    Content is a mapping with an optional ``frontmatter`` object and an
    optional ``body``. A body that is not a string is coerced with str().

    Example:
        >>> write_frontmatter_markdown({"frontmatter": {"name": "John Doe"}, "body": "Hi"})
        '---\\nname: John Doe\\n---\\nHi\\n'
    """
    content = content or {}
    frontmatter = content.get("frontmatter") or {}
    body = content.get("body")
    if body is None:
        body = ""
    elif not isinstance(body, str):
        body = str(body)

    lines = [
        "---",
        _dump_yaml(frontmatter).strip(),
        "---",
        body.strip(),
        "",
    ]
    return "\n".join(lines)


def write_yaml(content: Any) -> str:
    """Serialize content as plain YAML."""
    return _dump_yaml(content)


WRITERS: dict[str, FileWriter] = {
    FileFormat.JSON.value: write_json,
    FileFormat.FRONTMATTER_MD.value: write_frontmatter_markdown,
    FileFormat.YML.value: write_yaml,
}


def get_writer(file_format: str) -> FileWriter | None:
    """Look up the writer for a format, or None if unsupported."""
    if isinstance(file_format, FileFormat):
        file_format = file_format.value
    if not isinstance(file_format, str):
        return None
    return WRITERS.get(file_format)
