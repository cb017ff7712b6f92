"""Member filters selecting which records and definitions to sync."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MemberType(str, Enum):
    """Kinds of content a member can select."""

    UI = "ui"
    """UI definitions of a product model"""

    PML = "pml"
    """PML content of a product model"""


@dataclass(frozen=True)
class Member:
    """One entry of a member list, e.g. ``ui:MyModel:Main``."""

    type: MemberType
    model: str
    definition: Optional[str] = None

    @classmethod
    def parse(cls, value: str) -> "Member":
        """Parse ``type:model[:definition]``.

        A value whose first part is not a member type is read as
        ``model[:definition]`` of type ``ui``.

        Raises:
            ValueError: If the entry is empty or malformed
        """
        parts = [p.strip() for p in value.strip().split(":")]
        types = {t.value for t in MemberType}

        if parts[0] in types:
            member_type = MemberType(parts[0])
            parts = parts[1:]
        elif len(parts) > 2:
            raise ValueError(f"Unknown member type '{parts[0]}' in '{value}'")
        else:
            member_type = MemberType.UI

        if not parts or not parts[0] or len(parts) > 2:
            raise ValueError(f"Invalid member '{value}'")
        if member_type == MemberType.PML and len(parts) > 1:
            raise ValueError(f"PML members take no definition name: '{value}'")

        definition = parts[1] if len(parts) > 1 and parts[1] else None
        return cls(type=member_type, model=parts[0], definition=definition)


class MemberFilter:
    """Selects records and definitions from a member list.

    An empty filter selects everything.

    Examples:
        >>> members = MemberFilter.parse("ui:Cato:Main,pml:Cato")
        >>> members.includes_definition("Cato", "Main")
        True
        >>> members.includes_definition("Cato", "Other")
        False
    """

    def __init__(self, members: Optional[list[Member]] = None):
        self.members = list(members or [])

    @classmethod
    def parse(cls, value: Optional[str]) -> "MemberFilter":
        """Parse a comma-separated member list."""
        if not value or not value.strip():
            return cls()
        return cls([Member.parse(v) for v in value.split(",") if v.strip()])

    @property
    def selects_all(self) -> bool:
        return not self.members

    def model_names(self, member_type: Optional[MemberType] = None) -> list[str]:
        """Names of the selected models, in order, without duplicates."""
        names: list[str] = []
        for member in self.members:
            if member_type and member.type != member_type:
                continue
            if member.model not in names:
                names.append(member.model)
        return names

    def includes_model(self, name: str, member_type: MemberType) -> bool:
        return self.selects_all or name in self.model_names(member_type)

    def includes_definition(self, model: str, definition: str) -> bool:
        """Whether a UI definition of a model is selected."""
        if self.selects_all:
            return True
        return any(
            m.type == MemberType.UI
            and m.model == model
            and (m.definition is None or m.definition == definition)
            for m in self.members
        )

    def selects_all_definitions(self, model: str) -> bool:
        """Whether every UI definition of a model is selected."""
        if self.selects_all:
            return True
        return any(
            m.type == MemberType.UI and m.model == model and m.definition is None
            for m in self.members
        )
