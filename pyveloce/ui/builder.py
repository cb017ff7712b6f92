"""Pack a record directory back into its list of UI definitions."""

import logging
from pathlib import Path
from typing import Any

from ..exceptions import VeloceBuildError
from ..utils import METADATA_FILE, encode_blob, read_json
from .layout import DEFINITIONS_FILE, ELEMENT_FILES, LEGACY_FILES

logger = logging.getLogger(__name__)


class UiDefinitionsBuilder:
    """Rebuilds the UI definitions of one record from ``{source}/{name}``.

    Definitions come in the order of ``definitions.json``. Without it, or
    for names it does not list, legacy definitions come first in the order
    of the record metadata, followed by modern definitions sorted by
    directory name.

    Examples:
        >>> builder = UiDefinitionsBuilder(Path("source"), "MyModel")
        >>> definitions = builder.pack()
        >>> body = json.dumps(definitions, indent=2)
    """

    def __init__(self, source_path: Path, name: str):
        self.source_path = source_path
        self.name = name
        self.record_dir = source_path / name

    def pack(self) -> list[dict[str, Any]]:
        """Build all definitions of the record.

        Raises:
            VeloceBuildError: If the record directory is missing or a file
                referenced by metadata cannot be read
        """
        if not self.record_dir.is_dir():
            raise VeloceBuildError(f"Record directory not found: {self.record_dir}")

        legacy = self._pack_legacy()
        legacy_names = {ui.get("name") for ui in legacy}

        modern = []
        for child in sorted(self.record_dir.iterdir()):
            if not (child / METADATA_FILE).is_file():
                continue
            if child.name in legacy_names:
                logger.warning("Ignoring '%s', already a legacy definition", child)
                continue
            modern.append(build_definition(child))

        logger.debug(
            "Packed %s: %d legacy, %d modern definition(s)",
            self.name,
            len(legacy),
            len(modern),
        )
        definitions = legacy + modern
        order = self._definition_order()
        if order:
            position = {name: i for i, name in enumerate(order)}
            definitions.sort(key=lambda ui: position.get(ui.get("name"), len(position)))
        return definitions

    def _definition_order(self) -> list[str]:
        path = self.record_dir / DEFINITIONS_FILE
        if not path.is_file():
            return []
        order = _read_json(path)
        if not isinstance(order, list):
            raise VeloceBuildError(f"Expected a list in {path}")
        return [name for name in order if isinstance(name, str)]

    def _pack_legacy(self) -> list[dict[str, Any]]:
        metadata_path = self.record_dir / METADATA_FILE
        if not metadata_path.is_file():
            return []

        metadata = _read_json(metadata_path)
        if not isinstance(metadata, list):
            raise VeloceBuildError(f"Expected a list in {metadata_path}")

        return [
            {
                **ui,
                "sections": [
                    self._inline_section(section) for section in ui.get("sections", [])
                ],
            }
            for ui in metadata
        ]

    def _inline_section(self, section: dict[str, Any]) -> dict[str, Any]:
        result = dict(section)
        for field, url_field, _ in LEGACY_FILES:
            url = result.pop(url_field, None)
            if not url:
                continue
            path = self.record_dir / url
            if field == "properties":
                result[field] = _read_json(path)
            else:
                result[field] = encode_blob(_read_bytes(path))
        return result


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise VeloceBuildError(f"Cannot read {path}: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        return read_json(path)
    except OSError as e:
        raise VeloceBuildError(f"Cannot read {path}: {e}") from e
    except ValueError as e:
        raise VeloceBuildError(f"Invalid JSON in {path}: {e}") from e


def build_definition(path: Path) -> dict[str, Any]:
    """Build a modern definition from its directory.

    Children are read in the order listed by ``metadata.json``.
    """
    metadata = _read_json(path / METADATA_FILE)
    if not isinstance(metadata, dict):
        raise VeloceBuildError(f"Expected an object in {path / METADATA_FILE}")

    names = metadata.pop("children", [])
    return {**metadata, "children": [build_element(path / n) for n in names]}


def _child_names(el_dir: Path) -> list[str]:
    # Trees without element metadata: every subdirectory holding a script
    return sorted(
        d.name
        for d in el_dir.iterdir()
        if d.is_dir() and (d / ELEMENT_FILES["script"]).is_file()
    )


def build_element(el_dir: Path) -> dict[str, Any]:
    """Build an element and its subtree from its directory."""
    script_path = el_dir / ELEMENT_FILES["script"]
    if not script_path.is_file():
        raise VeloceBuildError(f"Element script not found: {script_path}")

    metadata_path = el_dir / METADATA_FILE
    if metadata_path.is_file():
        element = _read_json(metadata_path)
        names = element.pop("children", [])
    else:
        element = {}
        names = _child_names(el_dir)

    for field, file_name in ELEMENT_FILES.items():
        file_path = el_dir / file_name
        if file_path.is_file():
            element[field] = encode_blob(_read_bytes(file_path))

    element["children"] = [build_element(el_dir / n) for n in names]
    return element
