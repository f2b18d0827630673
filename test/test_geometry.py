#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
测试多边形包含判断
"""

import numpy as np
import pytest

from euclid_tiles.core.geometry import point_in_polygon, vertices_from_flat

SQUARE = [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]

# L 形凹多边形，(1.5, 1.5) 位于缺口内
L_SHAPE = [(0.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0), (1.0, 2.0), (0.0, 2.0)]


def test_point_inside_square():
    assert point_in_polygon(1.0, 1.0, SQUARE)
    assert point_in_polygon(0.1, 1.9, SQUARE)


def test_point_outside_square():
    assert not point_in_polygon(3.0, 1.0, SQUARE)
    assert not point_in_polygon(-0.5, 1.0, SQUARE)
    assert not point_in_polygon(1.0, 2.5, SQUARE)


def test_vertex_order_does_not_matter():
    clockwise = list(reversed(SQUARE))
    assert point_in_polygon(1.0, 1.0, clockwise)
    assert not point_in_polygon(3.0, 1.0, clockwise)


def test_concave_polygon():
    assert point_in_polygon(0.5, 1.5, L_SHAPE)
    assert point_in_polygon(1.5, 0.5, L_SHAPE)
    assert not point_in_polygon(1.5, 1.5, L_SHAPE)


def test_rotated_tile_in_degrees():
    # 倾斜的四边形，类似实际 TILE 的 fov
    fov = vertices_from_flat([74.6, -49.3, 75.3, -49.4, 75.4, -48.7, 74.7, -48.6])
    assert point_in_polygon(75.0, -49.0, fov)
    assert not point_in_polygon(75.5, -49.0, fov)


def test_degenerate_polygon():
    assert not point_in_polygon(0.0, 0.0, [])
    assert not point_in_polygon(0.5, 0.0, [(0.0, 0.0), (1.0, 0.0)])


def test_deterministic():
    results = {point_in_polygon(1.0, 1.0, SQUARE) for _ in range(10)}
    assert results == {True}


def test_vertices_from_flat():
    vertices = vertices_from_flat([1, 2, 3, 4, 5, 6])
    assert vertices.shape == (3, 2)
    assert vertices.dtype == float
    np.testing.assert_array_equal(vertices[1], [3.0, 4.0])


def test_vertices_from_flat_copies_input():
    values = np.array([0.0, 0.0, 1.0, 0.0, 1.0, 1.0])
    vertices = vertices_from_flat(values)
    values[0] = 99.0
    assert vertices[0, 0] == 0.0


def test_vertices_from_flat_odd_length():
    with pytest.raises(ValueError):
        vertices_from_flat([1.0, 2.0, 3.0])
