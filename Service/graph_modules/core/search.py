"""
Service/graph_modules/core/search.py

단일 출발점-단일 도착점 최단 경로 탐색(Dijkstra, A*) 모듈입니다.

두 알고리즘은 하나의 탐색 루프를 공유하며 다음 두 가지만 다릅니다.
    - 우선순위 함수: Dijkstra는 g, A*는 g + h (h는 도착점까지의 직선 거리)
    - 중복 항목 처리: Dijkstra는 기록된 최단 거리보다 큰 오래된(stale) 항목을 버리고,
      A*는 이미 확정된 노드를 방문 집합으로 건너뜁니다.
"""
from __future__ import annotations

import heapq
import math
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from shapely.geometry import LineString, Point

from Common.log import Log
from .geometry import Coord, concat_coords, line_coords, to_xyz
from .types import Edge, RoadGraph

NO_NODE = -1


class SearchAlgorithm(str, Enum):
    DIJKSTRA = "dijkstra"
    ASTAR = "astar"


class SeenPolicy(Enum):
    STALE_DISTANCE = "stale_distance"
    VISITED_SET = "visited_set"


class PathStatus(str, Enum):
    FOUND = "found"
    UNREACHABLE = "unreachable"
    INVALID_INDEX = "invalid_index"
    INVALID_GRAPH = "invalid_graph"
    INVALID_ALGORITHM = "invalid_algorithm"


@dataclass(frozen=True)
class ExaminedEdge:
    """완화(relaxation) 과정에서 검사한 간선입니다. 시각화/디버그 용도입니다."""
    source: int
    target: int
    geometry: LineString = field(repr=False)


@dataclass(frozen=True)
class PathResult:
    status: PathStatus
    message: str = ""
    nodes: Tuple[int, ...] = ()
    length: float = math.inf
    coords: Tuple[Coord, ...] = ()
    visited_edges: Tuple[ExaminedEdge, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is PathStatus.FOUND

    @property
    def geometry(self) -> Optional[Union[LineString, Point]]:
        """경로 형상. 노드 하나짜리 경로는 위치를 알면 Point, 모르면 None입니다."""
        if len(self.coords) >= 2:
            return LineString(self.coords)
        if len(self.coords) == 1:
            return Point(self.coords[0])
        return None


@dataclass(frozen=True)
class _SearchStrategy:
    algorithm: SearchAlgorithm
    seen_policy: SeenPolicy


_STRATEGIES: Dict[SearchAlgorithm, _SearchStrategy] = {
    SearchAlgorithm.DIJKSTRA: _SearchStrategy(SearchAlgorithm.DIJKSTRA, SeenPolicy.STALE_DISTANCE),
    SearchAlgorithm.ASTAR: _SearchStrategy(SearchAlgorithm.ASTAR, SeenPolicy.VISITED_SET),
}

PriorityFn = Callable[[int, float, Edge], float]


class ShortestPathEngine:
    """
    고정된 그래프 위에서 출발 노드와 도착 노드 사이의 최단 경로를 찾습니다.
    탐색 상태(거리 배열, 우선순위 큐, 방문 집합)는 호출마다 새로 만들어 공유하지 않습니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    def dijkstra(self, graph: RoadGraph, start: Any, end: Any, track_visited: bool = False) -> PathResult:
        return self.find(graph, start, end, SearchAlgorithm.DIJKSTRA, track_visited)

    def astar(self, graph: RoadGraph, start: Any, end: Any, track_visited: bool = False) -> PathResult:
        return self.find(graph, start, end, SearchAlgorithm.ASTAR, track_visited)

    def find(
        self,
        graph: RoadGraph,
        start: Any,
        end: Any,
        algorithm: Union[SearchAlgorithm, str] = SearchAlgorithm.DIJKSTRA,
        track_visited: bool = False,
    ) -> PathResult:
        """
        Args:
            graph: 탐색 대상 그래프
            start: 출발 노드 인덱스
            end: 도착 노드 인덱스
            algorithm: SearchAlgorithm 또는 "dijkstra" / "astar"
            track_visited: True이면 검사한 모든 간선을 결과에 포함

        Returns:
            PathResult: 성공 시 FOUND, 그 외에는 실패 사유를 담은 상태 (예외를 던지지 않음)
        """
        if not graph.is_valid:
            return self._fail(PathStatus.INVALID_GRAPH, f"무효 그래프입니다: {graph.invalid_reason}")

        try:
            strategy = _STRATEGIES[SearchAlgorithm(algorithm)]
        except (ValueError, TypeError):
            return self._fail(PathStatus.INVALID_ALGORITHM, f"지원하지 않는 탐색 알고리즘입니다: {algorithm!r}")

        start_idx = self._as_index(start)
        if start_idx is None or not 0 <= start_idx < graph.node_count:
            return self._fail(PathStatus.INVALID_INDEX, f"출발 노드 인덱스가 범위를 벗어났습니다: {start!r}")
        end_idx = self._as_index(end)
        if end_idx is None or not 0 <= end_idx < graph.node_count:
            return self._fail(PathStatus.INVALID_INDEX, f"도착 노드 인덱스가 범위를 벗어났습니다: {end!r}")

        priority_fn = self._priority_fn(graph, strategy, end_idx)
        found, dist, previous, examined = self._search(
            graph, start_idx, end_idx, strategy.seen_policy, priority_fn, track_visited
        )
        visited_edges = tuple(examined)

        tag = strategy.algorithm.value
        if not found:
            message = f"도착 노드 {end_idx}에 도달할 수 없습니다. (출발 노드 {start_idx})"
            self._logger.log(f"[Graph:Search:{tag}] {message}", level="WARNING")
            return PathResult(status=PathStatus.UNREACHABLE, message=message, visited_edges=visited_edges)

        nodes = self._reconstruct_nodes(previous, start_idx, end_idx)
        coords = self._reconstruct_coords(graph, nodes)
        self._logger.log(
            f"[Graph:Search:{tag}] 경로 탐색 완료: {start_idx} -> {end_idx} 길이={dist[end_idx]:.3f} 노드={len(nodes)}",
            level="INFO",
        )
        return PathResult(
            status=PathStatus.FOUND,
            message="최단 경로를 찾았습니다.",
            nodes=tuple(nodes),
            length=dist[end_idx],
            coords=tuple(coords),
            visited_edges=visited_edges,
        )

    def _search(
        self,
        graph: RoadGraph,
        start: int,
        end: int,
        seen_policy: SeenPolicy,
        priority_fn: PriorityFn,
        track_visited: bool,
    ) -> Tuple[bool, List[float], List[int], List[ExaminedEdge]]:
        dist = [math.inf] * graph.node_count
        previous = [NO_NODE] * graph.node_count
        dist[start] = 0.0

        visited: Set[int] = set()
        examined: List[ExaminedEdge] = []
        heap: List[Tuple[float, int]] = [(0.0, start)]

        while heap:
            priority, current = heapq.heappop(heap)

            if seen_policy is SeenPolicy.STALE_DISTANCE:
                if priority > dist[current]:
                    continue
            else:
                if current in visited:
                    continue
                visited.add(current)

            if current == end:
                return True, dist, previous, examined

            current_dist = dist[current]
            for edge in graph.sorted_edges(current):
                neighbor = edge.to_node
                if track_visited:
                    examined.append(ExaminedEdge(source=current, target=neighbor, geometry=edge.geometry))
                if seen_policy is SeenPolicy.VISITED_SET and neighbor in visited:
                    continue

                new_dist = current_dist + edge.length
                if new_dist >= dist[neighbor]:
                    continue

                dist[neighbor] = new_dist
                previous[neighbor] = current
                heapq.heappush(heap, (priority_fn(neighbor, new_dist, edge), neighbor))

        return False, dist, previous, examined

    @staticmethod
    def _priority_fn(graph: RoadGraph, strategy: _SearchStrategy, end: int) -> PriorityFn:
        if strategy.algorithm is SearchAlgorithm.DIJKSTRA:
            return lambda node, g, edge: g

        target = graph.node_position(end)
        heuristic: Dict[int, float] = {}

        def priority(node: int, g: float, edge: Edge) -> float:
            h = heuristic.get(node)
            if h is None:
                # 노드 위치는 그 노드에 도달한 간선 형상의 끝점
                h = math.dist(to_xyz(edge.geometry.coords[-1]), target) if target is not None else 0.0
                heuristic[node] = h
            return g + h

        return priority

    @staticmethod
    def _reconstruct_nodes(previous: List[int], start: int, end: int) -> List[int]:
        nodes = [end]
        node = end
        while node != start:
            node = previous[node]
            nodes.append(node)
        nodes.reverse()
        return nodes

    @staticmethod
    def _reconstruct_coords(graph: RoadGraph, nodes: List[int]) -> List[Coord]:
        if len(nodes) == 1:
            position = graph.node_position(nodes[0])
            return [position] if position is not None else []

        parts = []
        for u, v in zip(nodes, nodes[1:]):
            edge = min(
                (e for e in graph.node_edges[u] if e.to_node == v),
                key=Edge.sort_key,
            )
            parts.append(line_coords(edge.geometry))
        return concat_coords(parts)

    @staticmethod
    def _as_index(value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        try:
            return operator.index(value)
        except TypeError:
            return None

    def _fail(self, status: PathStatus, message: str) -> PathResult:
        self._logger.log(f"[Graph:Search] {message}", level="ERROR")
        return PathResult(status=status, message=message)
