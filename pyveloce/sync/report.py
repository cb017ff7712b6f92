"""Per-record outcomes of a pull or push run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RecordStatus(str, Enum):
    """Outcome of processing one record."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RecordResult:
    """Outcome of processing one record."""

    name: str
    """Record name"""

    status: RecordStatus = RecordStatus.SUCCESS

    definitions_written: int = 0
    """Definitions written locally (pull) or uploaded (push)"""

    definitions_skipped: int = 0
    """Definitions excluded by the filter or with an unrecognized shape"""

    pml_written: bool = False

    action: Optional[str] = None
    """Remote action taken on push: ``created`` or ``updated``"""

    error: Optional[str] = None

    elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "definitions_written": self.definitions_written,
            "definitions_skipped": self.definitions_skipped,
            "pml_written": self.pml_written,
            "action": self.action,
            "error": self.error,
        }


@dataclass
class SyncReport:
    """Aggregate outcome of a batch, one result per record."""

    direction: str
    results: list[RecordResult] = field(default_factory=list)

    def count(self, status: RecordStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def failed(self) -> list[RecordResult]:
        return [r for r in self.results if r.status == RecordStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed

    def get(self, name: str) -> Optional[RecordResult]:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.direction,
            "success": self.count(RecordStatus.SUCCESS),
            "skipped": self.count(RecordStatus.SKIPPED),
            "failed": self.count(RecordStatus.FAILED),
            "records": [r.to_dict() for r in self.results],
        }
