#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
几何判断模块
判断天球坐标是否落在TILE的多边形视场（fov）内

坐标 (RA, DEC) 直接作为平面坐标处理，不做球面修正。
跨越 RA=0/360 的多边形以及靠近天极的多边形判断结果不可靠，
当前 Euclid TILE 布局下没有这种情况。
"""

from typing import Sequence, Union

import numpy as np

VertexArray = Union[np.ndarray, Sequence[Sequence[float]]]


def vertices_from_flat(values: Sequence[float]) -> np.ndarray:
    """
    将 fov 列的一维数组 [x1, y1, x2, y2, ...] 转换为 (n, 2) 顶点数组

    Args:
        values: 交替排列的 x/y 值（度）

    Returns:
        形状为 (n, 2) 的浮点数组
    """
    flat = np.array(values, dtype=float).ravel()
    if flat.size % 2 != 0:
        raise ValueError(f"fov 数组长度必须为偶数: {flat.size}")
    return flat.reshape(-1, 2)


def point_in_polygon(x: float, y: float, vertices: VertexArray) -> bool:
    """
    射线法判断点是否在多边形内（奇偶规则）

    Args:
        x: 点的 x 坐标（RA，度）
        y: 点的 y 坐标（DEC，度）
        vertices: 多边形顶点，形状 (n, 2)

    Returns:
        点在多边形内返回 True
    """
    poly = np.asarray(vertices, dtype=float)
    if poly.ndim != 2 or poly.shape[0] < 3:
        return False

    xi, yi = poly[:, 0], poly[:, 1]
    # 每条边 (j -> i)，j 为前一个顶点
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    straddles = (yi > y) != (yj > y)
    with np.errstate(divide='ignore', invalid='ignore'):
        x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
    crossings = np.count_nonzero(straddles & (x < x_cross))
    return bool(crossings % 2)
