"""Data models for remote records."""

from dataclasses import dataclass
from typing import Any, Optional

PRODUCT_MODEL_OBJECT = "VELOCPQ__ProductModel__c"
PRODUCT_MODEL_FIELDS = (
    "Id",
    "Name",
    "VELOCPQ__ContentId__c",
    "VELOCPQ__Version__c",
    "VELOCPQ__ReferenceId__c",
    "VELOCPQ__UiDefinitionsId__c",
)


@dataclass
class ProductModel:
    """A product model record, the unit of synchronization."""

    id: str
    """Record id"""

    name: str
    """Record name, used as the top-level directory name"""

    content_id: Optional[str] = None
    """Id of the document holding the PML content"""

    ui_definitions_id: Optional[str] = None
    """Id of the document holding the UI definitions"""

    version: Optional[Any] = None
    reference_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductModel":
        """Create a ProductModel from a query result record."""
        return cls(
            id=data.get("Id", ""),
            name=data.get("Name", ""),
            content_id=data.get("VELOCPQ__ContentId__c"),
            ui_definitions_id=data.get("VELOCPQ__UiDefinitionsId__c"),
            version=data.get("VELOCPQ__Version__c"),
            reference_id=data.get("VELOCPQ__ReferenceId__c"),
        )

    def to_pml_dict(self) -> dict[str, Any]:
        """Record attributes stored next to the pulled PML content."""
        return {
            "Id": self.id,
            "Name": self.name,
            "VELOCPQ__ContentId__c": self.content_id,
            "VELOCPQ__Version__c": self.version,
            "VELOCPQ__ReferenceId__c": self.reference_id,
        }
