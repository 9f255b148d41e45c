import pytest

from typeref.checkers.graph_checker import TypeGraphBuilder
from typeref.resolver.desugar import (
    get_auto_generated_enum_union,
    is_auto_generated_type_union,
    last_real_member,
)


@pytest.fixture(scope="module")
def graph():
    b = TypeGraphBuilder()
    t = {}
    t["undefined"] = b.add_type("undefined", "undefined")
    t["user"] = b.add_type("class", "User")
    t["string"] = b.add_type("string", "string")

    status_symbol = b.add_symbol("Status", ["Enum"])
    a = b.add_symbol("A", ["EnumMember"], parent=status_symbol)
    c = b.add_symbol("C", ["EnumMember"], parent=status_symbol)
    orphan = b.add_symbol("Orphan", ["EnumMember"])
    flagged = b.add_symbol("Flagged", ["EnumMember", "Property"], parent=status_symbol)
    t["a"] = b.add_type("enum_literal", "Status.A", symbol=a)
    t["c"] = b.add_type("enum_literal", "Status.C", symbol=c)
    t["orphan"] = b.add_type("enum_literal", "Orphan", symbol=orphan)
    t["flagged"] = b.add_type("enum_literal", "Status.Flagged", symbol=flagged)
    t["status"] = b.add_type("enum", "Status", members=[t["a"], t["c"]], symbol=status_symbol)
    b.declare(status_symbol, t["status"])

    other_symbol = b.add_symbol("Other", ["Enum"])
    x = b.add_symbol("X", ["EnumMember"], parent=other_symbol)
    t["x"] = b.add_type("enum_literal", "Other.X", symbol=x)
    t["other"] = b.add_type("enum", "Other", members=[t["x"]], symbol=other_symbol)
    b.declare(other_symbol, t["other"])

    def union(name, *members, kind="union"):
        t[name] = b.add_type(kind, name, members=[t[m] for m in members])

    union("optional_user", "undefined", "user")
    union("optional_user_last", "user", "undefined")
    union("user_or_string", "user", "string")
    union("three", "undefined", "user", "string")
    union("only_undefined", "undefined")
    union("optional_status", "undefined", "a", "c")
    union("optional_single_member", "a", "undefined")
    union("status_without_undefined", "a", "c")
    union("mixed_parents", "undefined", "a", "x")
    union("with_class", "undefined", "a", "user")
    union("with_orphan", "undefined", "a", "orphan")
    union("with_extra_flags", "undefined", "a", "flagged")
    union("optional_intersection", "undefined", "user", kind="intersection")
    return b.build(), t


@pytest.mark.parametrize("name,expected", [
    ("optional_user", True),
    ("optional_user_last", True),
    ("optional_intersection", True),
    ("user_or_string", False),
    ("three", False),
    ("only_undefined", False),
    ("status", False),
    ("user", False),
])
def test_optional_union_detection(graph, name, expected):
    checker, t = graph
    assert is_auto_generated_type_union(t[name], checker) is expected


def test_enum_union_returns_common_enum(graph):
    checker, t = graph
    assert get_auto_generated_enum_union(t["optional_status"], checker) == t["status"]
    assert get_auto_generated_enum_union(t["optional_single_member"], checker) == t["status"]


@pytest.mark.parametrize("name", [
    "status_without_undefined",
    "mixed_parents",
    "with_class",
    "with_orphan",
    "with_extra_flags",
    "only_undefined",
    "optional_user",
    "status",
    "user",
])
def test_enum_union_no_match(graph, name):
    checker, t = graph
    assert get_auto_generated_enum_union(t[name], checker) is None


def test_last_real_member_skips_marker(graph):
    checker, t = graph
    assert last_real_member(t["optional_user"], checker) == t["user"]
    assert last_real_member(t["optional_user_last"], checker) == t["user"]
    assert last_real_member(t["only_undefined"], checker) is None
