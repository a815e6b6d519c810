"""
Tests for content items and collections (tabnest/items.py, tabnest/collection.py)

Run: python -m pytest tests/test_collection.py -q
"""

import pytest

from tabnest.collection import (
    Collection,
    append,
    combine,
    create_collection,
    is_collection,
    is_item,
    text_item,
)
from tabnest.errors import InvalidCombination, MalformedPath
from tabnest.items import PAGINATION, ContentItem, parse_tab_path, validate_tab_path


def _collection(*titles, labels=None, **defaults):
    coll = create_collection(labels=labels, **defaults)
    for title in titles:
        coll.add(title=title)
    return coll


def _titles(coll):
    return [item.payload.get("title") for item in coll.items]


# ---------------------------------------------------------------------------
# append
# ---------------------------------------------------------------------------

class TestAppend:
    def test_assigns_increasing_indices(self):
        coll = _collection("a", "b", "c")
        assert [i.insertion_index for i in coll.items] == [1, 2, 3]
        assert coll.next_index == 4

    def test_defaults_overlay_payload(self):
        coll = create_collection(type="bar", color="red")
        coll.add(x_var="age", color="blue")
        assert coll.items[0].payload == {"type": "bar", "color": "blue", "x_var": "age"}

    def test_defaults_fill_empty_payload(self):
        coll = create_collection(type="bar")
        append(coll, ContentItem(tab_path=("demo",)))
        assert coll.items[0].payload == {"type": "bar"}

    def test_non_dict_payload_kept(self):
        coll = create_collection(type="bar")
        coll.add("raw html")
        assert coll.items[0].payload == "raw html"

    def test_keyword_params_need_dict_payload(self):
        with pytest.raises(TypeError):
            create_collection().add("raw", title="x")

    def test_marker_skips_overlay(self):
        coll = create_collection(type="bar").add_pagination()
        marker = coll.items[0]
        assert marker.kind == PAGINATION
        assert marker.pagination_break
        assert marker.payload == {"position": "bottom", "separator": None}

    def test_rejects_non_item(self):
        with pytest.raises(InvalidCombination):
            append(create_collection(), {"title": "not an item"})

    def test_rejects_non_collection(self):
        with pytest.raises(InvalidCombination):
            append([], ContentItem())

    def test_invalid_combination_is_type_error(self):
        with pytest.raises(TypeError):
            append(create_collection(), "nope")

    def test_caller_item_not_mutated(self):
        item = ContentItem(payload={"title": "x"})
        coll = create_collection(type="bar")
        append(coll, item)
        assert item.insertion_index == 0
        assert item.payload == {"title": "x"}

    def test_string_path_on_item_is_slash_notation(self):
        coll = create_collection()
        append(coll, ContentItem(tab_path="sis"))
        append(coll, ContentItem(tab_path="sis/age"))
        assert [i.tab_path for i in coll.items] == [("sis",), ("sis", "age")]

    def test_malformed_path_rejected_without_append(self):
        coll = _collection("a")
        with pytest.raises(MalformedPath):
            append(coll, ContentItem(tab_path=("demo", "")))
        assert len(coll) == 1
        assert coll.next_index == 2


# ---------------------------------------------------------------------------
# combine and +
# ---------------------------------------------------------------------------

class TestCombine:
    def test_order_and_renumbering(self):
        a = _collection("a1", "a2")
        b = _collection("b1", "b2", "b3")
        combined = combine(a, b)
        assert _titles(combined) == ["a1", "a2", "b1", "b2", "b3"]
        assert [i.insertion_index for i in combined.items] == [1, 2, 3, 4, 5]
        assert combined.next_index == 6

    def test_inputs_untouched(self):
        a = _collection("a1")
        b = _collection("b1", "b2")
        combine(a, b)
        assert [i.insertion_index for i in b.items] == [1, 2]
        assert len(a) == 1

    def test_later_labels_win(self):
        x = _collection("x", labels={"g": "From X", "only_x": "X"})
        y = _collection("y", labels={"g": "From Y"})
        combined = combine(x, y)
        assert combined.labels["g"] == "From Y"
        assert combined.labels["only_x"] == "X"

    def test_later_defaults_win(self):
        x = create_collection(type="bar", color="red")
        y = create_collection(color="blue")
        assert combine(x, y).defaults == {"type": "bar", "color": "blue"}

    def test_plus_operator_matches_combine(self):
        a = _collection("a")
        b = _collection("b")
        c = _collection("c")
        chained = a + b + c
        assert _titles(chained) == _titles(combine(a, b, c))
        assert [i.insertion_index for i in chained.items] == [1, 2, 3]

    def test_associative_not_commutative(self):
        a = _collection("a", labels={"g": "A"})
        b = _collection("b", labels={"g": "B"})
        c = _collection("c")
        left = (a + b) + c
        right = a + (b + c)
        assert _titles(left) == _titles(right)
        assert left.labels == right.labels
        swapped = b + a
        assert _titles(swapped) == ["b", "a"]
        assert swapped.labels["g"] == "A"

    def test_bare_item_string_path_normalized(self):
        combined = combine(_collection("a"), ContentItem(tab_path="sis/age"))
        assert combined.items[1].tab_path == ("sis", "age")

    def test_bare_items_accepted(self):
        combined = combine(_collection("a"), text_item("hello"))
        assert len(combined) == 2
        assert combined.items[1].payload == {"type": "text", "content": "hello"}
        assert combined.items[1].insertion_index == 2

    def test_rejects_unknown_argument(self):
        with pytest.raises(InvalidCombination, match="argument 2"):
            combine(_collection("a"), ["not", "a", "collection"])

    def test_plus_rejects_unknown_operand(self):
        with pytest.raises(InvalidCombination):
            _collection("a") + 5

    def test_empty_combine(self):
        combined = combine()
        assert isinstance(combined, Collection)
        assert len(combined) == 0
        assert combined.next_index == 1

    def test_markers_survive_combine(self):
        a = _collection("a").add_pagination()
        combined = a + _collection("b")
        assert [i.pagination_break for i in combined.items] == [False, True, False]

    def test_append_after_combine_continues_numbering(self):
        combined = _collection("a", "b") + _collection("c")
        combined.add(title="d")
        assert combined.items[-1].insertion_index == 4


# ---------------------------------------------------------------------------
# Authoring helpers
# ---------------------------------------------------------------------------

class TestAuthoringHelpers:
    def test_predicates(self):
        assert is_collection(create_collection())
        assert not is_collection(ContentItem())
        assert is_item(ContentItem())
        assert not is_item({})

    def test_add_text_joins_lines(self):
        coll = create_collection().add_text("line one", "line two", tab_path="intro")
        item = coll.items[0]
        assert item.payload == {"type": "text", "content": "line one\nline two"}
        assert item.tab_path == ("intro",)

    def test_add_many_expands_vectors(self):
        coll = create_collection(type="histogram").add_many(
            x_var=["age", "income"], tab_path_template="demo/{x_var}", color="red"
        )
        assert [i.tab_path for i in coll.items] == [("demo", "age"), ("demo", "income")]
        assert coll.items[0].payload == {"type": "histogram", "x_var": "age", "color": "red"}

    def test_add_many_title_template(self):
        coll = create_collection().add_many(x_var=["age", "income"], title_template="{i}: {x_var}")
        assert _titles(coll) == ["1: age", "2: income"]

    def test_add_many_tab_paths(self):
        coll = create_collection().add_many(x_var=["a", "b"], tab_paths=["g/one", "g/two"])
        assert [i.tab_path for i in coll.items] == [("g", "one"), ("g", "two")]

    def test_add_many_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            create_collection().add_many(x_var=["a", "b"], y_var=["c", "d", "e"])

    def test_add_many_needs_vector(self):
        with pytest.raises(ValueError, match="No expandable parameters"):
            create_collection().add_many(x_var="a")

    def test_set_labels_merges(self):
        coll = create_collection(labels={"a": "A"}).set_labels({"b": "B"})
        assert coll.labels == {"a": "A", "b": "B"}

    def test_add_pagination_position_checked(self):
        with pytest.raises(ValueError):
            create_collection().add_pagination(position="middle")


# ---------------------------------------------------------------------------
# Tab path parsing
# ---------------------------------------------------------------------------

class TestParseTabPath:
    def test_none_is_top_level(self):
        assert parse_tab_path(None) == ()

    def test_slash_notation(self):
        assert parse_tab_path("sis/age/item1") == ("sis", "age", "item1")
        assert parse_tab_path(" sis / age ") == ("sis", "age")

    def test_sequence(self):
        assert parse_tab_path(["sis", "age"]) == ("sis", "age")

    def test_level_mapping_sorted_numerically(self):
        assert parse_tab_path({"2": "age", "10": "deep", "1": "sis"}) == ("sis", "age", "deep")

    @pytest.mark.parametrize("bad", ["", "a//b", "a/", ["a", " "], ["a", 3], {"x": "a"}, 12])
    def test_malformed(self, bad):
        with pytest.raises(MalformedPath):
            parse_tab_path(bad)

    def test_validate_rejects_bare_string(self):
        with pytest.raises(MalformedPath, match="bare string"):
            validate_tab_path("sis")

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            parse_tab_path("a//b")
