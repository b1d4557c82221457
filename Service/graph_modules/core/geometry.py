"""
Service/graph_modules/core/geometry.py

그래프 간선 형상(LineString)의 좌표 정규화, 길이 계산, 이어붙이기를 담당하는 보조 모듈입니다.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely.geometry import LineString

Coord = Tuple[float, float, float]


def to_xyz(coord: Sequence[float]) -> Coord:
    """2D/3D 좌표를 3D 튜플로 정규화합니다. Z가 없으면 0.0으로 채웁니다."""
    if len(coord) >= 3:
        return float(coord[0]), float(coord[1]), float(coord[2])
    return float(coord[0]), float(coord[1]), 0.0


def round_xyz(coord: Sequence[float], precision: int) -> Coord:
    x, y, z = to_xyz(coord)
    return round(x, precision), round(y, precision), round(z, precision)


def polyline_length(coords: Sequence[Coord]) -> float:
    """연속 좌표 간 3D 유클리드 거리의 합을 반환합니다."""
    total = 0.0
    for i in range(1, len(coords)):
        total += math.dist(coords[i - 1], coords[i])
    return total


def line_coords(line: LineString) -> List[Coord]:
    return [to_xyz(c) for c in line.coords]


def concat_coords(parts: Iterable[Sequence[Coord]]) -> List[Coord]:
    """
    여러 좌표열을 순서대로 이어붙입니다.
    앞 구간의 끝점과 다음 구간의 시작점이 같으면 한 번만 남깁니다.
    """
    merged: List[Coord] = []
    for part in parts:
        for i, pt in enumerate(part):
            if i == 0 and merged and merged[-1] == pt:
                continue
            merged.append(pt)
    return merged


def make_line(coords: Sequence[Coord]) -> Optional[LineString]:
    if len(coords) < 2:
        return None
    return LineString(coords)
