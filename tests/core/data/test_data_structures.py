"""
Unit tests for the spatial data structures and mission enums.

Covers Vector2 (y, x) ordering, inclusive Rect containment, batch
containment through VectorArray, and faction parsing.
"""

import numpy as np
import pytest

from src.core.data import Faction, Rect, Vector2, VectorArray, parse_faction


class TestVector2:
    """Test Vector2 functionality."""

    def test_yx_ordering(self):
        vec = Vector2(3, 7)
        assert vec.y == 3
        assert vec.x == 7
        assert vec.to_tuple() == (3, 7)

    def test_from_xy_swaps_to_yx(self):
        vec = Vector2.from_xy(11, 52)
        assert vec == Vector2(52, 11)
        assert vec.x == 11

    def test_arithmetic(self):
        assert Vector2(1, 2) + Vector2(3, 4) == Vector2(4, 6)
        assert Vector2(5, 5) - Vector2(2, 3) == Vector2(3, 2)

    def test_manhattan_distance(self):
        assert Vector2(0, 0).manhattan_distance_to(Vector2(3, 4)) == 7

    def test_unpacking(self):
        y, x = Vector2(8, 9)
        assert (y, x) == (8, 9)

    def test_immutable(self):
        vec = Vector2(1, 1)
        with pytest.raises(AttributeError):
            vec.x = 5  # type: ignore[misc]

    def test_to_numpy(self):
        arr = Vector2(2, 3).to_numpy()
        assert arr.dtype == np.int32
        assert list(arr) == [2, 3]


class TestRect:
    """Test inclusive rectangles."""

    def test_from_corners_uses_label_order(self):
        rect = Rect.from_corners(10, 51, 12, 53)
        assert (rect.min_x, rect.min_y, rect.max_x, rect.max_y) == (10, 51, 12, 53)

    def test_corners_are_inclusive(self):
        rect = Rect.from_corners(10, 51, 12, 53)
        assert rect.contains(Vector2.from_xy(10, 51))
        assert rect.contains(Vector2.from_xy(12, 53))
        assert rect.contains(Vector2.from_xy(11, 52))
        assert not rect.contains(Vector2.from_xy(13, 52))
        assert not rect.contains(Vector2.from_xy(11, 50))

    def test_single_cell_rect(self):
        rect = Rect.from_corners(4, 4, 4, 4)
        assert rect.width == 1
        assert rect.height == 1
        assert rect.contains(Vector2(4, 4))

    def test_dimensions_and_center(self):
        rect = Rect.from_corners(86, 99, 88, 101)
        assert rect.width == 3
        assert rect.height == 3
        assert rect.center == Vector2.from_xy(87, 100)

    def test_inverted_corners_are_not_well_formed(self):
        assert Rect.from_corners(0, 0, 5, 5).is_well_formed
        assert not Rect.from_corners(5, 0, 0, 5).is_well_formed
        assert not Rect.from_corners(0, 5, 5, 0).is_well_formed


class TestVectorArray:
    """Test batch containment."""

    def test_empty(self):
        assert len(VectorArray()) == 0
        assert len(VectorArray([])) == 0

    def test_within_rect_mask(self):
        points = VectorArray([Vector2(0, 0), Vector2(2, 2), Vector2(5, 5)])
        mask = points.within_rect(Rect(1, 1, 5, 5))
        assert list(mask) == [False, True, True]

    def test_filter_by_rect(self):
        points = VectorArray([Vector2(0, 0), Vector2(2, 2), Vector2(9, 9)])
        inside = points.filter_by_rect(Rect(0, 0, 3, 3))
        assert inside.to_vector_list() == [Vector2(0, 0), Vector2(2, 2)]

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            VectorArray(np.zeros((3, 3), dtype=np.int32))

    def test_iteration_yields_vectors(self):
        points = VectorArray(np.array([[1, 2], [3, 4]]))
        assert list(points) == [Vector2(1, 2), Vector2(3, 4)]


class TestParseFaction:
    """Test faction parsing from configuration values."""

    def test_enum_passthrough(self):
        assert parse_faction(Faction.ENEMY) is Faction.ENEMY

    def test_names_are_case_insensitive(self):
        assert parse_faction("enemy") == Faction.ENEMY
        assert parse_faction(" Ally ") == Faction.ALLY

    def test_campaign_alias(self):
        assert parse_faction("CAM_HUMAN_PLAYER") == Faction.PLAYER

    def test_player_slot(self):
        assert parse_faction(0) == Faction.PLAYER
        assert parse_faction(1) == Faction.ENEMY

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            parse_faction("martians")
        with pytest.raises(ValueError):
            parse_faction(17)
        with pytest.raises(ValueError):
            parse_faction(True)
