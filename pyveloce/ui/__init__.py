"""UI definition tree serialization: filesystem layout <-> definitions."""

from .builder import UiDefinitionsBuilder, build_definition, build_element
from .detector import is_legacy_definition
from .metadata import ElementMetadata, extract_element_metadata, extract_name
from .serializer import (
    RecordTreeWriter,
    save_definition,
    save_element,
    save_legacy_definition,
)

__all__ = [
    "UiDefinitionsBuilder",
    "build_definition",
    "build_element",
    "is_legacy_definition",
    "ElementMetadata",
    "extract_element_metadata",
    "extract_name",
    "RecordTreeWriter",
    "save_definition",
    "save_element",
    "save_legacy_definition",
]
