"""Tests for output file serializers."""

import json

import pytest
import yaml

from sourcebit.contracts import FileFormat
from sourcebit.core.writers import (
    get_writer,
    write_frontmatter_markdown,
    write_json,
    write_yaml,
)


class TestFrontmatterMarkdown:
    """frontmatter-md rendering."""

    def test_frontmatter_and_body(self) -> None:
        text = write_frontmatter_markdown(
            {"frontmatter": {"name": "John Doe"}, "body": "This is the body"}
        )

        assert text == "---\nname: John Doe\n---\nThis is the body\n"

    def test_body_is_stripped(self) -> None:
        text = write_frontmatter_markdown({"frontmatter": {"a": 1}, "body": "\n\n  Body  \n"})

        assert text == "---\na: 1\n---\nBody\n"

    def test_missing_body_renders_empty(self) -> None:
        text = write_frontmatter_markdown({"frontmatter": {"a": 1}})

        assert text == "---\na: 1\n---\n\n"

    def test_missing_frontmatter_renders_empty_mapping(self) -> None:
        text = write_frontmatter_markdown({"body": "Hello"})

        assert text == "---\n{}\n---\nHello\n"

    def test_non_string_body_is_coerced(self) -> None:
        text = write_frontmatter_markdown({"frontmatter": {"a": 1}, "body": 42})

        assert text.endswith("---\n42\n")

    def test_key_order_preserved(self) -> None:
        text = write_frontmatter_markdown({"frontmatter": {"z": 1, "a": 2}, "body": ""})

        assert text.index("z: 1") < text.index("a: 2")

    def test_non_mapping_content_raises(self) -> None:
        with pytest.raises(AttributeError):
            write_frontmatter_markdown(["not", "a", "mapping"])


class TestJson:
    """json rendering."""

    def test_two_space_indent(self) -> None:
        assert write_json({"a": [1]}) == '{\n  "a": [\n    1\n  ]\n}'

    def test_unicode_kept(self) -> None:
        assert "Ω" in write_json({"symbol": "Ω"})

    def test_parses_back(self) -> None:
        content = {"name": "Oxygen", "number": 8, "tags": ["gas"]}

        assert json.loads(write_json(content)) == content

    def test_unserializable_raises(self) -> None:
        with pytest.raises(TypeError):
            write_json({"v": object()})


class TestYaml:
    """yml rendering."""

    def test_block_style(self) -> None:
        assert write_yaml({"name": "Oxygen", "tags": ["gas"]}) == "name: Oxygen\ntags:\n- gas\n"

    def test_parses_back(self) -> None:
        content = {"b": 1, "a": {"nested": [True, None]}}

        assert yaml.safe_load(write_yaml(content)) == content


class TestGetWriter:
    """Format lookup."""

    @pytest.mark.parametrize(
        ("file_format", "writer"),
        [
            ("json", write_json),
            ("frontmatter-md", write_frontmatter_markdown),
            ("yml", write_yaml),
            (FileFormat.YML, write_yaml),
        ],
    )
    def test_known_formats(self, file_format, writer) -> None:
        assert get_writer(file_format) is writer

    @pytest.mark.parametrize("file_format", ["toml", "", None, 3])
    def test_unknown_formats(self, file_format) -> None:
        assert get_writer(file_format) is None
