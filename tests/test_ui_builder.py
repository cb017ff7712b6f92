"""Tests for packing a source tree back into UI definitions."""

import pytest

from pyveloce.exceptions import VeloceBuildError
from pyveloce.ui import RecordTreeWriter, UiDefinitionsBuilder, build_definition
from pyveloce.utils import encode_blob, from_base64, to_base64


def element(name, children=(), styles=None, template=None, **extra):
    """Build a modern element whose script declares ``name``."""
    script = f"@ElementDefinition({{ name: '{name}' }})\nexport class {name}Component {{}}\n"
    el = {"script": to_base64(script), "children": list(children), **extra}
    if styles is not None:
        el["styles"] = to_base64(styles)
    if template is not None:
        el["template"] = to_base64(template)
    return el


def write_record(record_dir, definitions):
    writer = RecordTreeWriter(record_dir)
    for ui in definitions:
        writer.write_definition(ui)
    writer.finish()


def modern_definition():
    return {
        "name": "Main",
        "title": "Main page",
        "layout": {"columns": 12},
        "children": [
            element(
                "Zeta",
                styles=":host { display: block; }",
                template="<div>{{ value }}</div>",
                children=[element("Inner", kind="list"), element("Alpha")],
            ),
            element("Alpha", template="<span>α</span>", order=2),
        ],
    }


def legacy_definition():
    return {
        "name": "Legacy",
        "tabs": [{"id": "t1", "name": "General"}],
        "sections": [
            {
                "id": 1,
                "parentId": None,
                "page": "t1",
                "label": "A",
                "script": to_base64("a();"),
                "properties": {"columns": 2, "flags": [True, None]},
            },
            {
                "id": 2,
                "parentId": 1,
                "page": "t1",
                "label": "B",
                "styles": to_base64(".b {}"),
                "template": to_base64("<b></b>"),
            },
            {"id": 3, "parentId": 2, "page": "t1", "label": "C"},
        ],
    }


class TestRoundTrip:
    """Serialize then build reproduces the definitions."""

    def test_modern_round_trip(self, tmp_path):
        """Test a nested modern definition survives a round trip."""
        original = modern_definition()
        write_record(tmp_path / "Model", [original])

        assert build_definition(tmp_path / "Model" / "Main") == original

    def test_child_order_follows_metadata(self, tmp_path):
        """Test that children keep metadata order, not directory order."""
        write_record(tmp_path / "Model", [modern_definition()])

        built = build_definition(tmp_path / "Model" / "Main")
        scripts = [from_base64(c["script"]) for c in built["children"]]
        assert "ZetaComponent" in scripts[0]
        assert "AlphaComponent" in scripts[1]
        assert built["children"][0]["children"][0]["kind"] == "list"

    def test_legacy_round_trip(self, tmp_path):
        """Test a legacy definition survives a round trip."""
        original = legacy_definition()
        write_record(tmp_path / "Model", [original])

        packed = UiDefinitionsBuilder(tmp_path, "Model").pack()
        assert packed == [original]

    def test_mixed_record_keeps_document_order(self, tmp_path):
        """Test that a mixed record packs in the order it was written."""
        second = {"name": "Another", "children": [element("Solo")]}
        write_record(
            tmp_path / "Model", [modern_definition(), legacy_definition(), second]
        )

        packed = UiDefinitionsBuilder(tmp_path, "Model").pack()
        assert [ui["name"] for ui in packed] == ["Main", "Legacy", "Another"]
        assert packed == [modern_definition(), legacy_definition(), second]

    def test_mixed_record_without_order_file(self, tmp_path):
        """Test that legacy definitions come first, then modern by name."""
        second = {"name": "Another", "children": [element("Solo")]}
        write_record(
            tmp_path / "Model", [modern_definition(), legacy_definition(), second]
        )
        (tmp_path / "Model" / "definitions.json").unlink()

        packed = UiDefinitionsBuilder(tmp_path, "Model").pack()
        assert [ui["name"] for ui in packed] == ["Legacy", "Another", "Main"]

    def test_crlf_and_binary_blobs_round_trip(self, tmp_path):
        """Test that line endings and non-UTF-8 bytes are kept byte for byte."""
        script = "@ElementDefinition({ name: 'A' })\r\nexport class AComponent {}\r\n"
        modern = {
            "name": "Main",
            "children": [
                {
                    "script": to_base64(script),
                    "styles": to_base64(".a {}\r.b {}\r\n"),
                    "template": encode_blob(b"<p>\xe9t\xe9</p>\r\n"),
                    "children": [],
                }
            ],
        }
        legacy = legacy_definition()
        legacy["sections"][1]["template"] = to_base64("<a>\r\n</a>")
        legacy["sections"][0]["script"] = encode_blob(b"x = \xff;\r\n")
        write_record(tmp_path / "Model", [modern, legacy])

        packed = UiDefinitionsBuilder(tmp_path, "Model").pack()
        assert packed == [modern, legacy]
        assert packed[1]["sections"][1]["template"] == "PGE+DQo8L2E+"

    def test_unnamed_elements_are_dropped(self, tmp_path):
        """Test that skipped elements are absent after a round trip."""
        ui = {
            "name": "Main",
            "children": [
                element("Kept"),
                {"script": to_base64("class Anonymous {}"), "children": []},
            ],
        }
        write_record(tmp_path / "Model", [ui])

        built = build_definition(tmp_path / "Model" / "Main")
        assert built == {"name": "Main", "children": [element("Kept")]}


class TestUiDefinitionsBuilder:
    """Tests for UiDefinitionsBuilder edge cases."""

    def test_missing_record_directory(self, tmp_path):
        """Test that a missing record directory raises."""
        with pytest.raises(VeloceBuildError, match="not found"):
            UiDefinitionsBuilder(tmp_path, "Nope").pack()

    def test_missing_referenced_file(self, tmp_path):
        """Test that a URL pointing to a missing file raises."""
        write_record(tmp_path / "Model", [legacy_definition()])
        (tmp_path / "Model" / "Legacy" / "General" / "A" / "A.js").unlink()

        with pytest.raises(VeloceBuildError, match="Cannot read"):
            UiDefinitionsBuilder(tmp_path, "Model").pack()

    def test_invalid_metadata(self, tmp_path):
        """Test that malformed metadata raises."""
        (tmp_path / "Model" / "Main").mkdir(parents=True)
        (tmp_path / "Model" / "Main" / "metadata.json").write_text("{not json")

        with pytest.raises(VeloceBuildError, match="Invalid JSON"):
            UiDefinitionsBuilder(tmp_path, "Model").pack()

    def test_missing_element_directory(self, tmp_path):
        """Test that a child listed in metadata but absent raises."""
        write_record(tmp_path / "Model", [modern_definition()])
        for path in sorted((tmp_path / "Model" / "Main" / "Alpha").iterdir()):
            if path.is_file():
                path.unlink()

        with pytest.raises(VeloceBuildError, match="script not found"):
            UiDefinitionsBuilder(tmp_path, "Model").pack()

    def test_elements_without_metadata_use_sorted_directories(self, tmp_path):
        """Test trees written without element metadata files."""
        main = tmp_path / "Model" / "Main"
        (main / "Card" / "Beta").mkdir(parents=True)
        (main / "Card" / "Alpha").mkdir()
        (main / "Card" / "assets").mkdir()
        (main / "metadata.json").write_text('{"name": "Main", "children": ["Card"]}')
        (main / "Card" / "script.ts").write_text("card")
        (main / "Card" / "Beta" / "script.ts").write_text("beta")
        (main / "Card" / "Alpha" / "script.ts").write_text("alpha")

        built = build_definition(main)

        card = built["children"][0]
        assert card["script"] == to_base64("card")
        assert [c["script"] for c in card["children"]] == [
            to_base64("alpha"),
            to_base64("beta"),
        ]

    def test_ignores_non_definition_entries(self, tmp_path):
        """Test that PML files and plain directories are not definitions."""
        write_record(tmp_path / "Model", [modern_definition()])
        (tmp_path / "Model" / "Model.pml").write_text("pml")
        (tmp_path / "Model" / "notes").mkdir()

        packed = UiDefinitionsBuilder(tmp_path, "Model").pack()
        assert [ui["name"] for ui in packed] == ["Main"]
