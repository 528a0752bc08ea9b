"""Tests for marker ownership and bulk removal."""

import pytest

from columnmark.markers import Marker, MarkerSet
from columnmark.model import Document, Highlight


def make_doc():
    # Lines: 0..20, 21..41, 42..62
    return Document("a" * 20 + "\n" + "b" * 20 + "\n" + "c" * 20)


def test_add_and_list_markers():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    marker = Marker(21, 41, 31, 41)
    marker_set.add_marker(marker)
    assert marker_set.markers == [marker]
    assert doc.overlays == [marker]


def test_add_marker_with_foreign_tag_rejected():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    with pytest.raises(ValueError):
        marker_set.add_marker(Marker(0, 20, 10, 20, tag="someone-else"))


def test_remove_markers_in_line_range_only_touches_that_line():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    first = Marker(0, 20, 10, 20)
    second = Marker(21, 41, 31, 41)
    third = Marker(42, 62, 52, 62)
    for m in (first, second, third):
        marker_set.add_marker(m)
    assert marker_set.remove_markers_in_line_range(21, 41) == 1
    assert marker_set.markers == [first, third]


def test_remove_all_leaves_unrelated_overlays():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    other_set = MarkerSet(doc, tag="other-tool")
    search_hit = Highlight(2, 8, tag="search")
    doc.add_overlay(search_hit)
    foreign = Marker(0, 20, 5, 20, tag="other-tool")
    other_set.add_marker(foreign)
    marker_set.add_marker(Marker(0, 20, 10, 20))
    marker_set.add_marker(Marker(21, 41, 31, 41))

    assert marker_set.remove_all_markers() == 2
    assert len(marker_set) == 0
    assert search_hit in doc.overlays
    assert other_set.markers == [foreign]


def test_line_range_removal_leaves_unrelated_overlays():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    search_hit = Highlight(22, 30, tag="search")
    doc.add_overlay(search_hit)
    marker_set.add_marker(Marker(21, 41, 31, 41))
    marker_set.remove_markers_in_line_range(21, 41)
    assert doc.overlays == [search_hit]


def test_markers_in_range():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    first = Marker(0, 20, 10, 20)
    third = Marker(42, 62, 52, 62)
    marker_set.add_marker(third)
    marker_set.add_marker(first)
    assert marker_set.markers_in_range(0, 62) == [first, third]
    assert marker_set.markers_in_range(15, 16) == [first]
    assert marker_set.markers_in_range(21, 41) == []


def test_marker_equality_is_positional():
    assert Marker(0, 20, 10, 20) == Marker(0, 20, 10, 20)
    assert Marker(0, 20, 10, 20) != Marker(0, 20, 11, 20)
    assert Marker(0, 20, 10, 20) != Marker(0, 20, 10, 20, tag="other")


def test_markers_follow_edits():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    marker = Marker(21, 41, 31, 41)
    marker_set.add_marker(marker)
    doc.insert(0, "zz")
    assert marker.key() == (23, 43, 33, 43)


def test_markers_stay_ordered_after_edits():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    first = Marker(0, 20, 10, 20)
    third = Marker(42, 62, 52, 62)
    marker_set.add_marker(third)
    marker_set.add_marker(first)
    # Deleting the middle line collapses nothing but shifts the last marker
    doc.delete(21, 42)
    assert third.key() == (21, 41, 31, 41)
    assert marker_set.markers_in_range(30, 35) == [third]
    assert marker_set.remove_markers_in_line_range(21, 41) == 1
    assert marker_set.markers == [first]
    assert doc.overlays == [first]


def test_markers_in_range_is_inclusive_at_both_ends():
    doc = make_doc()
    marker_set = MarkerSet(doc)
    second = Marker(21, 41, 31, 41)
    marker_set.add_marker(second)
    assert marker_set.markers_in_range(41, 50) == [second]
    assert marker_set.markers_in_range(0, 31) == [second]
    assert marker_set.markers_in_range(0, 30) == []
