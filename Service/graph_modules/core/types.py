"""
Service/graph_modules/core/types.py

인접 리스트 기반의 방향 가중 그래프(RoadGraph)와 간선 값 타입(Edge)을 정의하는 모듈입니다.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from shapely.geometry import LineString

from .geometry import Coord, to_xyz


@dataclass(frozen=True)
class Edge:
    """
    출발 노드(간선을 담고 있는 배열 칸)에서 to_node로 향하는 단방향 간선입니다.

    동등성/해시 계약: (to_node, length)만 비교합니다.
    geometry는 비교와 해시에서 제외되므로, 목적지와 길이가 같은 두 간선은 형상이 달라도
    노드별 간선 집합 안에서 하나로 합쳐집니다.
    """
    to_node: int
    length: float
    geometry: LineString = field(compare=False, repr=False)

    def sort_key(self) -> Tuple[int, float]:
        return self.to_node, self.length


class RoadGraph:
    """
    노드 인덱스(0부터 연속)별 출발 간선 집합을 보관하는 불변 그래프입니다.

    양방향 연결은 서로 반대 방향의 간선 두 개로 표현합니다.
    잘못된 입력으로 생성하면 예외 대신 노드/간선이 없는 무효(invalid) 상태가 되며,
    invalid_reason에 사유가 남습니다.
    """

    def __init__(self, node_edges: Optional[Sequence[Optional[Iterable[Edge]]]]):
        self._node_edges: Tuple[FrozenSet[Edge], ...] = ()
        self._edge_count = 0
        self._incoming: Optional[Tuple[Tuple[int, ...], ...]] = None
        self._positions: Optional[List[Optional[Coord]]] = None

        reason, frozen = self._validate(node_edges)
        if reason:
            self._is_valid = False
            self._invalid_reason = reason
            return

        self._node_edges = frozen
        self._edge_count = sum(len(edges) for edges in frozen)
        self._is_valid = True
        self._invalid_reason = ""

    @classmethod
    def invalid(cls, reason: str) -> "RoadGraph":
        graph = cls(None)
        graph._invalid_reason = reason
        return graph

    @staticmethod
    def _validate(node_edges) -> Tuple[str, Tuple[FrozenSet[Edge], ...]]:
        if node_edges is None:
            return "노드 간선 컬렉션이 None입니다.", ()
        if isinstance(node_edges, (str, bytes)):
            return "노드 간선 컬렉션의 타입이 올바르지 않습니다.", ()
        try:
            node_edges = list(node_edges)
        except TypeError:
            return "노드 간선 컬렉션을 순회할 수 없습니다.", ()

        sets = []
        for i, edges in enumerate(node_edges):
            if edges is None:
                return f"노드 {i}의 간선 집합이 None입니다.", ()
            try:
                sets.append(edges if isinstance(edges, frozenset) else frozenset(edges))
            except TypeError as e:
                return f"노드 {i}의 간선 집합을 구성할 수 없습니다: {e}", ()

        node_count = len(sets)
        for i, edges in enumerate(sets):
            for edge in edges:
                if not isinstance(edge, Edge):
                    return f"노드 {i}에 간선이 아닌 항목이 있습니다: {type(edge).__name__}", ()
                if isinstance(edge.to_node, bool) or not isinstance(edge.to_node, int):
                    return f"노드 {i}의 간선 목적지 인덱스가 정수가 아닙니다: {edge.to_node!r}", ()
                if not 0 <= edge.to_node < node_count:
                    return f"노드 {i}의 간선이 범위를 벗어난 노드 {edge.to_node}를 가리킵니다. (노드 수: {node_count})", ()
                length = edge.length
                if isinstance(length, bool) or not isinstance(length, (int, float)):
                    return f"노드 {i} -> {edge.to_node} 간선의 길이가 숫자가 아닙니다: {length!r}", ()
                if not math.isfinite(length) or length < 0:
                    return f"노드 {i} -> {edge.to_node} 간선의 길이가 유효하지 않습니다: {edge.length}", ()
                geom = edge.geometry
                if not isinstance(geom, LineString) or geom.is_empty or len(geom.coords) < 2:
                    return f"노드 {i} -> {edge.to_node} 간선의 형상이 비어있거나 유효하지 않습니다.", ()
        return "", tuple(sets)

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def invalid_reason(self) -> str:
        return "" if self._is_valid else self._invalid_reason

    @property
    def node_edges(self) -> Tuple[FrozenSet[Edge], ...]:
        return self._node_edges

    @property
    def node_count(self) -> int:
        return len(self._node_edges)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def sorted_edges(self, node: int) -> List[Edge]:
        """노드의 출발 간선을 (to_node, length) 순으로 정렬해 반환합니다."""
        return sorted(self._node_edges[node], key=Edge.sort_key)

    def iter_edges(self) -> Iterator[Tuple[int, Edge]]:
        for source in range(self.node_count):
            for edge in self.sorted_edges(source):
                yield source, edge

    def incoming(self) -> Tuple[Tuple[int, ...], ...]:
        """노드별로 자신을 가리키는 간선의 출발 노드 목록(역방향 인덱스)을 반환합니다."""
        if self._incoming is None:
            sources: List[List[int]] = [[] for _ in range(self.node_count)]
            for source, edges in enumerate(self._node_edges):
                for edge in edges:
                    sources[edge.to_node].append(source)
            self._incoming = tuple(tuple(s) for s in sources)
        return self._incoming

    def node_position(self, node: int) -> Optional[Coord]:
        if not 0 <= node < self.node_count:
            return None
        return self.node_positions()[node]

    def node_positions(self) -> List[Optional[Coord]]:
        """
        노드 위치는 그래프에 저장하지 않고 인접 간선 형상의 끝점에서 유도합니다.
        출발 간선의 첫 점을 우선 사용하고, 없으면 도착 간선의 마지막 점을 사용합니다.
        """
        if self._positions is None:
            positions: List[Optional[Coord]] = [None] * self.node_count
            for source, edges in enumerate(self._node_edges):
                if edges:
                    first = min(edges, key=Edge.sort_key)
                    positions[source] = to_xyz(first.geometry.coords[0])
            for source, edges in enumerate(self._node_edges):
                for edge in edges:
                    if positions[edge.to_node] is None:
                        positions[edge.to_node] = to_xyz(edge.geometry.coords[-1])
            self._positions = positions
        return list(self._positions)

    def summary(self) -> str:
        if not self._is_valid:
            return f"Invalid graph ({self._invalid_reason})"
        return f"Graph with {self.node_count} nodes and {self.edge_count} edges"

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"RoadGraph(nodes={self.node_count}, edges={self.edge_count}, valid={self._is_valid})"
