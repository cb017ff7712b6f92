"""Tests for element name extraction."""

import pytest

from pyveloce.ui.metadata import extract_element_metadata, extract_name


class TestExtractElementMetadata:
    """Tests for extract_element_metadata."""

    def test_basic_decorator(self):
        """Test reading name and other string properties."""
        script = (
            "import { ElementDefinition } from '@veloce/sdk';\n"
            "\n"
            "@ElementDefinition({\n"
            "  name: 'Header',\n"
            "  selector: \"vl-header\",\n"
            "  type: 'REFERENCE',\n"
            "})\n"
            "export class HeaderComponent {}\n"
        )
        metadata = extract_element_metadata(script)
        assert metadata is not None
        assert metadata.name == "Header"
        assert metadata.decorator == "ElementDefinition"
        assert metadata.properties["selector"] == "vl-header"
        assert metadata.properties["type"] == "REFERENCE"

    def test_compact_decorator(self):
        """Test a decorator written on one line without spaces."""
        script = "@ElementDefinition({name:'Footer'})\nclass Footer {}"
        assert extract_name(script) == "Footer"

    def test_template_literal_and_quoted_key(self):
        """Test backtick values and quoted keys."""
        script = "@Element({ 'name': `Body` })\nexport default class Body {}"
        assert extract_name(script) == "Body"

    def test_nested_name_is_ignored(self):
        """Test that a name inside a nested object is not the element name."""
        script = (
            "@ElementDefinition({\n"
            "  inputs: { name: 'inner', other: ['a', { name: 'deeper' }] },\n"
            "  name: 'Outer',\n"
            "})\n"
            "export class Outer {}\n"
        )
        assert extract_name(script) == "Outer"

    def test_only_nested_name_returns_none(self):
        """Test a decorator with a name only in a nested object."""
        script = "@ElementDefinition({ inputs: { name: 'inner' } })\nclass X {}"
        assert extract_element_metadata(script) is None

    def test_braces_in_strings_and_comments(self):
        """Test that braces inside strings and comments do not end the block."""
        script = (
            "@ElementDefinition({\n"
            "  // closing } in a comment\n"
            "  /* and { here */\n"
            "  description: 'a } b { c',\n"
            "  name: 'Tricky',\n"
            "})\n"
            "export class Tricky {}\n"
        )
        assert extract_name(script) == "Tricky"

    def test_escaped_quote_in_value(self):
        """Test values containing escaped and foreign quotes."""
        script = "@ElementDefinition({ name: \"It's\", title: 'a\\'b' })\nclass A {}"
        metadata = extract_element_metadata(script)
        assert metadata.name == "It's"
        assert metadata.properties["title"] == "a\\'b"

    def test_stacked_decorators(self):
        """Test another decorator between the definition and the class."""
        script = (
            "@ElementDefinition({ name: 'Stacked' })\n"
            "@Injectable()\n"
            "export class Stacked {}\n"
        )
        assert extract_name(script) == "Stacked"

    def test_decorator_not_on_class_is_ignored(self):
        """Test that property decorators are not element definitions."""
        script = (
            "export class Plain {\n"
            "  @Input({ name: 'value' })\n"
            "  value: string;\n"
            "}\n"
        )
        assert extract_element_metadata(script) is None

    def test_first_class_decorator_wins(self):
        """Test that the first class decorator with a name is used."""
        script = (
            "@ElementDefinition({ name: 'First' })\nclass A {}\n"
            "@ElementDefinition({ name: 'Second' })\nclass B {}\n"
        )
        assert extract_name(script) == "First"

    @pytest.mark.parametrize(
        "script",
        [
            "",
            "export class NoDecorator {}",
            "@ElementDefinition({ name: '' })\nclass Empty {}",
            "@ElementDefinition({ name: '   ' })\nclass Blank {}",
            "@ElementDefinition({ name: 'Unbalanced' \nclass X {}",
        ],
    )
    def test_no_name(self, script):
        """Test scripts without a usable declaration."""
        assert extract_name(script) is None


class TestExtractName:
    """Tests for extract_name."""

    @pytest.mark.parametrize("name", ["..", ".", "a/b", "a\\b"])
    def test_unsafe_names_are_rejected(self, name):
        """Test that names unusable as directory names are treated as absent."""
        script = f"@ElementDefinition({{ name: \"{name}\" }})\nclass X {{}}"
        assert extract_element_metadata(script) is not None
        assert extract_name(script) is None
