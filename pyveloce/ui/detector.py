"""Format detection for UI definitions."""

from typing import Any

from ..exceptions import UnrecognizedDefinitionError


def is_legacy_definition(ui: Any) -> bool:
    """Tell legacy (tabs + sections) definitions from modern (children) ones.

    Args:
        ui: Parsed UI definition

    Returns:
        True for a legacy definition, False for a modern one

    Raises:
        UnrecognizedDefinitionError: If the object matches neither shape,
            or both
    """
    if not isinstance(ui, dict):
        raise UnrecognizedDefinitionError(
            f"Unrecognized definition shape: expected an object, got {type(ui).__name__}"
        )

    legacy = isinstance(ui.get("tabs"), list) and isinstance(ui.get("sections"), list)
    modern = isinstance(ui.get("children"), list)

    if legacy != modern:
        return legacy
    raise UnrecognizedDefinitionError(
        f"Unrecognized definition shape: {ui.get('name', '<unnamed>')!r}"
    )
