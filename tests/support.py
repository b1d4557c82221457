"""
tests/support.py

테스트 공용 도우미: 메시지를 기록만 하는 로거와 간선/그래프 생성 함수입니다.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from shapely.geometry import LineString

from Service.graph_modules.core import Edge, RoadGraph
from Service.graph_modules.core.geometry import polyline_length, to_xyz


class RecordingLogger:
    """Log와 같은 log(msg, level) 인터페이스를 가지며 파일을 만들지 않습니다."""

    def __init__(self):
        self.records: List[Tuple[str, str]] = []

    def log(self, msg, level="DEBUG", create_log=False):
        self.records.append((level.upper(), msg))

    def messages(self, level: str) -> List[str]:
        return [msg for lvl, msg in self.records if lvl == level]


def edge(to_node: int, coords: Sequence[Sequence[float]]) -> Edge:
    """형상 좌표로부터 길이를 계산한 간선을 만듭니다."""
    points = [to_xyz(c) for c in coords]
    return Edge(to_node=to_node, length=polyline_length(points), geometry=LineString(points))


def graph_from_positions(positions: Sequence[Sequence[float]], arcs: Sequence[Tuple[int, int]]) -> RoadGraph:
    """노드 좌표와 (출발, 도착) 목록으로 직선 간선 그래프를 만듭니다."""
    node_edges = [set() for _ in positions]
    for u, v in arcs:
        node_edges[u].add(edge(v, [positions[u], positions[v]]))
    return RoadGraph(node_edges)
