"""Write UI definitions out as a directory tree.

Modern definitions become one directory per named element::

    {record}/{definition}/metadata.json
    {record}/{definition}/{element}/script.ts
    {record}/{definition}/{element}/styles.css
    {record}/{definition}/{element}/template.html
    {record}/{definition}/{element}/metadata.json
    {record}/{definition}/{element}/{child}/...

Legacy definitions become one directory per tab with nested section
directories, and share a single ``{record}/metadata.json`` listing all
legacy definitions of the record. ``{record}/definitions.json`` keeps the
document order of every definition.

Blobs are written byte for byte.
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import UnrecognizedDefinitionError
from ..utils import METADATA_FILE, decode_blob, dump_json, read_json, write_file_safe
from .detector import is_legacy_definition
from .layout import DEFINITIONS_FILE, ELEMENT_FILES, LEGACY_FILES
from .metadata import extract_name

logger = logging.getLogger(__name__)


class RecordTreeWriter:
    """Serializes the UI definitions of one record into its directory.

    Record-scoped files are written by ``finish`` once all definitions of
    the record have been written: ``metadata.json`` lists the legacy
    definitions and ``definitions.json`` keeps the order of all of them.

    With ``merge`` set, the written definitions replace the entries of the
    same name in the existing record files and all other entries are kept.
    Use it when only some definitions of the record are pulled.

    Examples:
        >>> writer = RecordTreeWriter(Path("source/MyModel"))
        >>> for ui in definitions:
        ...     writer.write_definition(ui)
        >>> writer.finish()
    """

    def __init__(self, record_dir: Path, merge: bool = False):
        self.record_dir = record_dir
        self.merge = merge
        self.legacy_metadata: list[dict[str, Any]] = []
        self.definition_names: list[str] = []

    def write_definition(self, ui: dict[str, Any]) -> Path:
        """Write one definition under ``{record_dir}/{name}``.

        Raises:
            UnrecognizedDefinitionError: If the definition has no usable
                name or matches neither format
        """
        legacy = is_legacy_definition(ui)

        name = ui.get("name")
        if not isinstance(name, str) or not name.strip():
            raise UnrecognizedDefinitionError("Definition has no name")

        ui_dir = self.record_dir / name
        if legacy:
            self.legacy_metadata.append(save_legacy_definition(ui, ui_dir, self.record_dir))
        else:
            save_definition(ui, ui_dir)
        if name not in self.definition_names:
            self.definition_names.append(name)
        return ui_dir

    def finish(self) -> Optional[Path]:
        """Write the record files.

        Returns:
            Path of the legacy metadata, or None if the record has no
            legacy definition
        """
        legacy = self.legacy_metadata
        order = self.definition_names
        if self.merge:
            legacy = _merge_legacy(
                self._read_list(METADATA_FILE), legacy, self.definition_names
            )
            order = _merge_names(self._read_list(DEFINITIONS_FILE), order)

        self._write_list(DEFINITIONS_FILE, order)
        return self._write_list(METADATA_FILE, legacy)

    def _read_list(self, file_name: str) -> list[Any]:
        path = self.record_dir / file_name
        if not path.is_file():
            return []
        try:
            data = read_json(path)
        except ValueError as e:
            logger.warning("Replacing invalid %s: %s", path, e)
            return []
        return data if isinstance(data, list) else []

    def _write_list(self, file_name: str, data: list[Any]) -> Optional[Path]:
        path = self.record_dir / file_name
        if not data:
            # Left over from an earlier pull
            if path.is_file():
                path.unlink()
            return None
        return write_file_safe(self.record_dir, file_name, dump_json(data))


def _merge_legacy(
    existing: list[Any], written: list[dict[str, Any]], written_names: list[str]
) -> list[dict[str, Any]]:
    """Replace or drop the existing entries rewritten in this run, keep the rest."""
    by_name = {ui["name"]: ui for ui in written}
    merged = []
    for ui in existing:
        name = ui.get("name") if isinstance(ui, dict) else None
        if name in by_name:
            merged.append(by_name.pop(name))
        elif name not in written_names:
            merged.append(ui)
    merged.extend(by_name.values())
    return merged


def _merge_names(existing: list[Any], written: list[str]) -> list[str]:
    merged = [n for n in existing if isinstance(n, str)]
    merged.extend(n for n in written if n not in merged)
    return merged


# =============================================================================
# Modern definitions
# =============================================================================


def save_definition(ui: dict[str, Any], path: Path) -> list[str]:
    """Write a modern definition and its elements.

    Args:
        ui: Definition with a ``children`` element list
        path: Definition directory

    Returns:
        Names of the persisted top-level elements, in order
    """
    path.mkdir(parents=True, exist_ok=True)
    children_names = _save_children(ui.get("children", []), path)

    metadata = {k: v for k, v in ui.items() if k != "children"}
    metadata["children"] = children_names
    write_file_safe(path, METADATA_FILE, dump_json(metadata))
    return children_names


def _save_children(children: list[dict[str, Any]], path: Path) -> list[str]:
    names: list[str] = []
    for child in children:
        name = save_element(child, path, taken=names)
        if name:
            names.append(name)
    return names


def _decode_blobs(el: dict[str, Any]) -> Optional[dict[str, bytes]]:
    """Decode all blobs of an element, or None if any of them is corrupt."""
    blobs: dict[str, bytes] = {}
    for field in ELEMENT_FILES:
        value = el.get(field)
        if not value:
            continue
        try:
            blobs[field] = decode_blob(value)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping element with undecodable %s: %s", field, e)
            return None
    return blobs


def save_element(
    el: dict[str, Any], path: Path, taken: Optional[list[str]] = None
) -> Optional[str]:
    """Write an element and its subtree under ``path``.

    The element directory is named after the name declared in its script.
    Elements without a declared name, or with a blob that is not valid
    base64, are skipped together with their subtree before anything is
    written.

    Args:
        el: Element
        path: Parent directory
        taken: Names already used by earlier siblings

    Returns:
        The element name, or None if nothing was written
    """
    blobs = _decode_blobs(el)
    if blobs is None:
        return None
    if "script" not in blobs:
        logger.debug("Skipping element without script in %s", path)
        return None

    name = extract_name(blobs["script"].decode("utf-8", errors="replace"))
    if not name:
        logger.warning("Skipping element without declared name in %s", path)
        return None
    if taken and name in taken:
        logger.warning("Skipping duplicate element '%s' in %s", name, path)
        return None

    el_dir = path / name
    for field, data in blobs.items():
        write_file_safe(el_dir, ELEMENT_FILES[field], data)

    children_names = _save_children(el.get("children", []), el_dir)

    written = set(blobs) | {"children"}
    metadata = {k: v for k, v in el.items() if k not in written}
    metadata["children"] = children_names
    write_file_safe(el_dir, METADATA_FILE, dump_json(metadata))
    return name


# =============================================================================
# Legacy definitions
# =============================================================================


def _is_root(section: dict[str, Any]) -> bool:
    return section.get("parentId") is None


def save_legacy_definition(
    ui: dict[str, Any], path: Path, record_dir: Path
) -> dict[str, Any]:
    """Write the sections of a legacy definition, one directory tree per tab.

    Args:
        ui: Definition with ``tabs`` and ``sections``
        path: Definition directory
        record_dir: Record directory; file URLs are relative to it

    Returns:
        The definition metadata, with section blobs replaced by URLs
    """
    metadata: dict[str, Any] = {**ui, "sections": []}
    visited: set[int] = set()

    for tab in ui["tabs"]:
        tab_sections = [s for s in ui["sections"] if s.get("page") == tab.get("id")]

        # parentId -> children, keeping list order
        index: dict[Any, list[dict[str, Any]]] = defaultdict(list)
        for section in tab_sections:
            if not _is_root(section):
                index[section["parentId"]].append(section)
        roots = [s for s in tab_sections if _is_root(s)]

        _save_legacy_sections(
            roots, index, path / str(tab["name"]), record_dir, metadata, visited
        )

    # Sections outside any tab tree are kept as they are
    for section in ui["sections"]:
        if id(section) not in visited:
            logger.warning(
                "Section '%s' of '%s' is not reachable from any tab",
                section.get("label"),
                ui.get("name"),
            )
            metadata["sections"].append(dict(section))

    return metadata


def _save_legacy_sections(
    sections: list[dict[str, Any]],
    index: dict[Any, list[dict[str, Any]]],
    path: Path,
    record_dir: Path,
    metadata: dict[str, Any],
    visited: set[int],
) -> None:
    for section in sections:
        if id(section) in visited:
            continue
        visited.add(id(section))

        section_dir = path / str(section["label"])
        metadata["sections"].append(
            _save_legacy_section_files(section, section_dir, record_dir)
        )

        if "id" in section:
            _save_legacy_sections(
                index.get(section["id"], []),
                index,
                section_dir,
                record_dir,
                metadata,
                visited,
            )


def _save_legacy_section_files(
    section: dict[str, Any], section_dir: Path, record_dir: Path
) -> dict[str, Any]:
    section_meta = dict(section)
    label = section["label"]

    for field, url_field, extension in LEGACY_FILES:
        value = section.get(field)
        if not value:
            continue

        if field == "properties":
            content: Union[str, bytes] = dump_json(value)
        else:
            try:
                content = decode_blob(value)
            except (TypeError, ValueError) as e:
                logger.warning(
                    "Keeping undecodable %s of section '%s' inline: %s", field, label, e
                )
                continue
        file_path = write_file_safe(section_dir, f"{label}.{extension}", content)

        del section_meta[field]
        section_meta[url_field] = file_path.relative_to(record_dir).as_posix()

    section_dir.mkdir(parents=True, exist_ok=True)
    return section_meta
