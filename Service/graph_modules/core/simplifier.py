"""
Service/graph_modules/core/simplifier.py

교차점(junction) 사이의 통과 노드(waypoint) 연쇄를 하나의 간선으로 병합하여
형상과 총 길이를 보존한 채 그래프 크기를 줄이는 단순화 모듈입니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from Common.log import Log
from .geometry import Coord, concat_coords, line_coords, make_line
from .types import Edge, RoadGraph

WAYPOINT = -1


@dataclass(frozen=True)
class SimplifyReport:
    """단순화 결과 그래프와 축소 통계입니다."""
    graph: RoadGraph
    original_node_count: int = 0
    original_edge_count: int = 0
    new_node_count: int = 0
    new_edge_count: int = 0
    malformed_chain_count: int = 0
    unreached_waypoint_count: int = 0

    @property
    def node_reduction(self) -> float:
        if self.original_node_count <= 0:
            return 0.0
        return (self.original_node_count - self.new_node_count) * 100.0 / self.original_node_count

    @property
    def edge_reduction(self) -> float:
        if self.original_edge_count <= 0:
            return 0.0
        return (self.original_edge_count - self.new_edge_count) * 100.0 / self.original_edge_count


class GraphSimplifier:
    """
    고유 이웃 수로 노드를 교차점/통과 노드로 분류한 뒤,
    각 교차점의 출발 간선에서 다음 교차점까지 연쇄를 추적해 병합 간선을 만듭니다.

    교차점 판정:
        - 고유 이웃 수(자기 루프 제외)가 0, 1 또는 3 이상
        - 유입 간선 없이 출발 간선이 2개 이상인 시작 분기(start fork)
        - 출발 간선 없이 유입 간선이 2개 이상인 종단 합류(sink merge)
    그 외 고유 이웃이 정확히 2개인 노드는 통과 노드입니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    def simplify(self, graph: RoadGraph) -> SimplifyReport:
        if not graph.is_valid:
            reason = f"입력 그래프가 무효입니다: {graph.invalid_reason}"
            self._logger.log(f"[Graph:Simplifier] {reason}", level="ERROR")
            return SimplifyReport(graph=RoadGraph.invalid(reason))

        original_node_count = graph.node_count
        original_edge_count = graph.edge_count

        is_junction = self._classify(graph)
        old_to_new = self._build_index_map(is_junction)
        junction_count = sum(1 for flag in is_junction if flag)

        new_node_edges: List[Set[Edge]] = [set() for _ in range(junction_count)]
        absorbed: Set[int] = set()
        malformed = 0

        for start in range(original_node_count):
            if old_to_new[start] == WAYPOINT:
                continue
            for first_edge in graph.sorted_edges(start):
                traced = self._trace_chain(graph, old_to_new, start, first_edge)
                if traced is None:
                    malformed += 1
                    continue
                end, length, coords, waypoints = traced
                geometry = make_line(coords)
                if geometry is None:
                    malformed += 1
                    continue
                absorbed.update(waypoints)
                new_node_edges[old_to_new[start]].add(
                    Edge(to_node=old_to_new[end], length=length, geometry=geometry)
                )

        waypoint_count = original_node_count - junction_count
        unreached = waypoint_count - len(absorbed)
        if unreached > 0:
            self._logger.log(
                f"[Graph:Simplifier] 교차점에 연결되지 않은 통과 노드 {unreached}개가 결과에서 제외되었습니다.",
                level="WARNING",
            )

        simplified = RoadGraph(new_node_edges)
        report = SimplifyReport(
            graph=simplified,
            original_node_count=original_node_count,
            original_edge_count=original_edge_count,
            new_node_count=simplified.node_count,
            new_edge_count=simplified.edge_count,
            malformed_chain_count=malformed,
            unreached_waypoint_count=unreached,
        )

        if report.new_node_count < original_node_count or report.new_edge_count < original_edge_count:
            self._logger.log(
                f"[Graph:Simplifier] 단순화 완료: 노드 {original_node_count} -> {report.new_node_count} "
                f"({report.node_reduction:.0f}% 감소), 간선 {original_edge_count} -> {report.new_edge_count} "
                f"({report.edge_reduction:.0f}% 감소)",
                level="INFO",
            )
        else:
            self._logger.log("[Graph:Simplifier] 병합할 통과 노드가 없습니다.", level="DEBUG")
        return report

    def _classify(self, graph: RoadGraph) -> List[bool]:
        incoming = graph.incoming()
        flags: List[bool] = []
        for node in range(graph.node_count):
            out_edges = graph.node_edges[node]
            in_sources = incoming[node]

            neighbors = {edge.to_node for edge in out_edges}
            neighbors.update(in_sources)
            neighbors.discard(node)

            if len(neighbors) != 2:
                flags.append(True)
                continue

            start_fork = len(in_sources) == 0 and len(out_edges) > 1
            sink_merge = len(out_edges) == 0 and len(in_sources) > 1
            flags.append(start_fork or sink_merge)
        return flags

    @staticmethod
    def _build_index_map(is_junction: List[bool]) -> List[int]:
        old_to_new: List[int] = []
        next_idx = 0
        for flag in is_junction:
            if flag:
                old_to_new.append(next_idx)
                next_idx += 1
            else:
                old_to_new.append(WAYPOINT)
        return old_to_new

    def _trace_chain(
        self,
        graph: RoadGraph,
        old_to_new: List[int],
        start: int,
        first_edge: Edge,
    ) -> Optional[Tuple[int, float, List[Coord], List[int]]]:
        """
        교차점 start에서 first_edge를 따라 다음 교차점까지 진행합니다.

        Returns:
            (도착 교차점, 누적 길이, 이어붙인 좌표열, 흡수한 통과 노드) 또는
            연쇄가 순환하거나 막혀 있으면 None
        """
        current = first_edge.to_node
        total_length = first_edge.length
        parts: List[List[Coord]] = [line_coords(first_edge.geometry)]

        if old_to_new[current] != WAYPOINT:
            return current, total_length, parts[0], []

        prev = start
        visited: Set[int] = set()
        waypoints: List[int] = []

        while old_to_new[current] == WAYPOINT:
            if current in visited:
                self._logger.log(
                    f"[Graph:Simplifier] 순환 연쇄 감지: 교차점 {start}에서 출발한 추적이 통과 노드 {current}를 재방문하여 간선을 제외합니다.",
                    level="WARNING",
                )
                return None
            visited.add(current)
            waypoints.append(current)

            next_edge = self._forward_edge(graph, current, prev)
            if next_edge is None:
                self._logger.log(
                    f"[Graph:Simplifier] 막힌 연쇄 감지: 통과 노드 {current}에 진행 간선이 없어 교차점 {start}의 간선을 제외합니다.",
                    level="WARNING",
                )
                return None

            parts.append(line_coords(next_edge.geometry))
            total_length += next_edge.length
            prev = current
            current = next_edge.to_node

        return current, total_length, concat_coords(parts), waypoints

    @staticmethod
    def _forward_edge(graph: RoadGraph, node: int, prev: int) -> Optional[Edge]:
        # 자기 루프는 분류에서 이웃으로 세지 않으므로 진행 방향 후보에서도 제외
        for edge in graph.sorted_edges(node):
            if edge.to_node != prev and edge.to_node != node:
                return edge
        return None
