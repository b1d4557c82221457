"""
Service/graph_modules/core/locator.py

임의의 좌표를 가장 가까운 그래프 노드 인덱스로 스냅하는 모듈입니다.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from shapely.geometry import Point
from shapely.strtree import STRtree

from Common.log import Log
from .geometry import to_xyz
from .types import RoadGraph


class NodeLocator:
    """
    노드 위치(인접 간선 형상의 끝점)로 공간 인덱스를 만들고 최근접 노드를 조회합니다.
    위치를 유도할 수 없는 고립 노드는 후보에서 제외됩니다.
    """

    def __init__(self, logger: Log, graph: RoadGraph):
        self._logger = logger
        self._node_ids: List[int] = []
        points: List[Point] = []

        if graph.is_valid:
            for node, position in enumerate(graph.node_positions()):
                if position is None:
                    continue
                self._node_ids.append(node)
                points.append(Point(position))

        self._tree: Optional[STRtree] = STRtree(points) if points else None

    def nearest(self, point: Sequence[float]) -> Optional[int]:
        """2D 평면 거리 기준으로 가장 가까운 노드의 인덱스를 반환합니다."""
        if self._tree is None:
            self._logger.log("[Graph:Locator] 조회 가능한 노드가 없습니다.", level="WARNING")
            return None
        query = Point(to_xyz(point))
        idx = self._tree.nearest(query)
        if idx is None:
            return None
        return self._node_ids[int(idx)]
