"""
Tests for VariableStore and the case folding policy.

These tests verify:
    - Case-insensitive, case-preserving names
    - Iteration in case-insensitive order
    - Null rejection and removal semantics
    - Append key (PATH+XYZ) merging
    - NAME=VALUE line parsing
"""

import pytest

from envoverride.casefold import fold, same, compare, sort_names
from envoverride.store import (
    VariableStore,
    InvalidValue,
    MalformedOverrideInput,
    is_append_key,
    split_append_key,
)


class TestCaseFold:
    """Test the name identity policy in isolation."""

    def test_fold_ignores_case(self):
        assert fold("Path") == fold("PATH") == fold("path")

    def test_length_changing_mappings_stay_distinct(self):
        assert not same("stra\u00dfe", "STRASSE")
        assert same("Stra\u00dfe", "STRA\u00dfE")

    def test_same(self):
        assert same("JAVA_HOME", "java_home")
        assert not same("JAVA_HOME", "JAVA_HOME2")

    def test_compare_is_three_way(self):
        assert compare("a", "B") < 0
        assert compare("b", "A") > 0
        assert compare("Path", "PATH") == 0

    def test_sort_names_case_insensitive(self):
        assert sort_names(["b", "A", "C"]) == ["A", "b", "C"]


class TestCaseInsensitivity:
    """Names are case-insensitive but case-preserving."""

    def test_lookup_any_case(self):
        store = VariableStore({"Path": "A:B:C"})
        assert "PATH" in store
        assert store.get("PATH") == "A:B:C"
        assert store.get("path") == "A:B:C"

    def test_upper_and_lower_agree(self):
        store = VariableStore()
        store.put("java_home", "/opt/jdk")
        assert store.get("JAVA_HOME") == store.get("java_home")

    def test_display_casing_follows_last_write(self):
        store = VariableStore()
        store.put("Path", "a")
        store.put("PATH", "b")
        assert store.keys() == ["PATH"]
        assert store.get("path") == "b"

    def test_override_updates_casing(self):
        store = VariableStore({"path": "a"})
        store.override("PaTh", "b")
        assert store.keys() == ["PaTh"]

    def test_iteration_order_is_case_insensitive_lexical(self):
        store = VariableStore()
        store.put("b", "2")
        store.put("C", "3")
        store.put("A", "1")
        assert list(store) == ["A", "b", "C"]
        assert store.items() == [("A", "1"), ("b", "2"), ("C", "3")]

    def test_len_counts_case_variants_once(self):
        store = VariableStore()
        store.put("X", "1")
        store.put("x", "2")
        assert len(store) == 1


class TestNullValues:
    """A value is never None."""

    def test_put_none_raises(self):
        store = VariableStore()
        with pytest.raises(InvalidValue, match="FOO"):
            store.put("FOO", None)

    def test_setitem_none_raises(self):
        store = VariableStore()
        with pytest.raises(InvalidValue):
            store["FOO"] = None

    def test_constructor_with_none_raises(self):
        with pytest.raises(InvalidValue):
            VariableStore({"FOO": None})

    def test_put_if_not_none(self):
        store = VariableStore()
        store.put_if_not_none("A", None)
        store.put_if_not_none("B", "x")
        assert "A" not in store
        assert store["B"] == "x"

    def test_empty_string_is_a_value(self):
        store = VariableStore()
        store.put("EMPTY", "")
        assert store.get("EMPTY") == ""


class TestConstruction:
    """Alternate constructors."""

    def test_from_pairs(self):
        store = VariableStore.from_pairs("A", "1", "b", "2")
        assert store.to_dict() == {"A": "1", "b": "2"}

    def test_from_pairs_odd_count_raises(self):
        with pytest.raises(MalformedOverrideInput):
            VariableStore.from_pairs("A", "1", "B")

    def test_copy_is_independent(self):
        store = VariableStore({"A": "1"}, path_separator=";")
        clone = store.copy()
        clone.put("A", "2")
        assert store["A"] == "1"
        assert clone.path_separator == ";"

    def test_get_default(self):
        store = VariableStore()
        assert store.get("MISSING") is None
        assert store.get("MISSING", "fallback") == "fallback"

    def test_getitem_missing_raises(self):
        with pytest.raises(KeyError):
            VariableStore()["MISSING"]

    def test_equality_ignores_case(self):
        assert VariableStore({"Path": "x"}) == VariableStore({"PATH": "x"})
        assert VariableStore({"Path": "x"}) == {"path": "x"}
        assert VariableStore({"Path": "x"}) != {"path": "y"}


class TestOverride:
    """override() semantics: removal, append merge, plain put."""

    def test_plain_override(self):
        store = VariableStore({"A": "old"})
        store.override("A", "new")
        assert store["A"] == "new"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_or_none_removes(self, value):
        store = VariableStore({"A": "old"})
        store.override("a", value)
        assert "A" not in store

    def test_append_prepends_to_existing(self):
        store = VariableStore({"PATH": "b"}, path_separator=":")
        store.override("PATH+X", "a")
        assert store["PATH"] == "a:b"

    def test_append_without_existing(self):
        store = VariableStore(path_separator=":")
        store.override("PATH+X", "a")
        assert store["PATH"] == "a"
        assert "PATH+X" not in store

    def test_append_uses_injected_separator(self):
        store = VariableStore({"Path": "C:\\bin"}, path_separator=";")
        store.override("PATH+JDK", "C:\\jdk\\bin")
        assert store["PATH"] == "C:\\jdk\\bin;C:\\bin"

    def test_multiple_appenders_stack(self):
        store = VariableStore({"PATH": "base"}, path_separator=":")
        store.override("PATH+A", "a")
        store.override("PATH+B", "b")
        assert store["PATH"] == "b:a:base"

    def test_append_with_empty_value_removes_base(self):
        store = VariableStore({"PATH": "base"})
        store.override("PATH+A", "")
        assert "PATH" not in store

    def test_leading_plus_is_not_append(self):
        store = VariableStore()
        store.override("+X", "v")
        assert store["+X"] == "v"

    def test_override_all_applies_in_order(self):
        store = VariableStore({"PATH": "base"}, path_separator=":")
        store.override_all({"PATH+A": "a", "B": "b", "PATH+C": "c"})
        assert store["PATH"] == "c:a:base"
        assert store["B"] == "b"

    def test_override_all_does_not_expand(self):
        store = VariableStore({"A": "1"})
        store.override_all({"B": "${A}"})
        assert store["B"] == "${A}"


class TestAppendKeys:
    """Append key helpers."""

    def test_is_append_key(self):
        assert is_append_key("PATH+X")
        assert not is_append_key("PATH")
        assert not is_append_key("+X")

    def test_split_at_first_plus(self):
        assert split_append_key("PATH+A+B") == ("PATH", "A+B")
        assert split_append_key("PATH") == ("PATH", None)


class TestAddLine:
    """NAME=VALUE parsing."""

    def test_add_line(self):
        store = VariableStore()
        store.add_line("FOO=bar")
        assert store["FOO"] == "bar"

    def test_split_at_first_equals(self):
        store = VariableStore()
        store.add_line("OPTS=-Da=b")
        assert store["OPTS"] == "-Da=b"

    def test_empty_value(self):
        store = VariableStore()
        store.add_line("FOO=")
        assert store["FOO"] == ""

    @pytest.mark.parametrize("line", ["no separator", "=value", ""])
    def test_noop_without_name(self, line):
        store = VariableStore()
        store.add_line(line)
        assert len(store) == 0

    def test_add_lines(self):
        store = VariableStore()
        store.add_lines(["A=1", "junk", "B=2"])
        assert store.to_dict() == {"A": "1", "B": "2"}


class TestExpand:
    """The store acts as a resolver for its own expand()."""

    def test_expand_against_store(self):
        store = VariableStore({"HOME": "/home/u"})
        assert store.expand("${home}/bin") == "/home/u/bin"

    def test_expand_none(self):
        assert VariableStore().expand(None) is None
