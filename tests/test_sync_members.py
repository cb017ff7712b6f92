"""Tests for member filters."""

import pytest

from pyveloce.sync import Member, MemberFilter, MemberType


class TestMember:
    """Tests for parsing single members."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("ui:Cato", Member(MemberType.UI, "Cato")),
            ("ui:Cato:Main", Member(MemberType.UI, "Cato", "Main")),
            ("pml:Cato", Member(MemberType.PML, "Cato")),
            ("Cato", Member(MemberType.UI, "Cato")),
            ("Cato:Main", Member(MemberType.UI, "Cato", "Main")),
            (" ui : Cato : Main ", Member(MemberType.UI, "Cato", "Main")),
            ("ui:Cato:", Member(MemberType.UI, "Cato")),
        ],
    )
    def test_parse(self, value, expected):
        """Test the accepted member forms."""
        assert Member.parse(value) == expected

    @pytest.mark.parametrize(
        "value,message",
        [
            ("config-ui:Cato:Main", "Unknown member type"),
            ("ui:", "Invalid member"),
            ("ui", "Invalid member"),
            ("ui:a:b:c", "Invalid member"),
            ("pml:Cato:Main", "no definition"),
        ],
    )
    def test_parse_errors(self, value, message):
        """Test malformed members."""
        with pytest.raises(ValueError, match=message):
            Member.parse(value)


class TestMemberFilter:
    """Tests for MemberFilter selection."""

    def test_empty_filter_selects_everything(self):
        """Test that no members means everything."""
        members = MemberFilter.parse(None)
        assert members.selects_all
        assert members.includes_model("Any", MemberType.PML)
        assert members.includes_definition("Any", "Thing")
        assert MemberFilter.parse("  ").selects_all

    def test_model_names_by_type(self):
        """Test model names grouped by member type."""
        members = MemberFilter.parse("ui:A:Main,pml:B,ui:A:Other,C")
        assert members.model_names() == ["A", "B", "C"]
        assert members.model_names(MemberType.UI) == ["A", "C"]
        assert members.model_names(MemberType.PML) == ["B"]

    def test_includes_definition(self):
        """Test definition selection with and without definition names."""
        members = MemberFilter.parse("ui:A:Main,ui:B,pml:C")
        assert members.includes_definition("A", "Main")
        assert not members.includes_definition("A", "Other")
        assert members.includes_definition("B", "Anything")
        assert not members.includes_definition("C", "Main")

    def test_selects_all_definitions(self):
        """Test whether a whole model or only some definitions are selected."""
        members = MemberFilter.parse("ui:A:Main,ui:B,ui:B:Main,pml:C")
        assert not members.selects_all_definitions("A")
        assert members.selects_all_definitions("B")
        assert not members.selects_all_definitions("C")
        assert MemberFilter().selects_all_definitions("Any")

    def test_includes_model(self):
        """Test model selection per member type."""
        members = MemberFilter.parse("ui:A,pml:B")
        assert members.includes_model("A", MemberType.UI)
        assert not members.includes_model("A", MemberType.PML)
        assert members.includes_model("B", MemberType.PML)

    def test_empty_entries_are_ignored(self):
        """Test trailing commas."""
        members = MemberFilter.parse("ui:A,,")
        assert members.members == [Member(MemberType.UI, "A")]
