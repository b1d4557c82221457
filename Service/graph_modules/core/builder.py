"""
Service/graph_modules/core/builder.py

독립된 선형 세그먼트 집합을 끝점 중복 제거를 통해 노드/간선 그래프로 변환하는 빌더 모듈입니다.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from shapely.geometry import LineString, MultiLineString

from Common.log import Log
from .geometry import Coord, polyline_length, round_xyz, to_xyz
from .types import Edge, RoadGraph


@dataclass(frozen=True)
class BuildReport:
    """그래프 생성 결과와 생성 과정에서 건너뛴 항목의 통계입니다."""
    graph: RoadGraph
    segment_count: int = 0
    skipped_degenerate: int = 0
    skipped_invalid: int = 0
    orphan_count: int = 0


class GraphBuilder:
    """
    세그먼트의 양 끝점을 지정 자릿수로 반올림하여 노드로 병합하고, 세그먼트를 간선으로 만듭니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    def build(self, segments: Optional[Iterable[Any]], bidirectional: bool, precision: int) -> BuildReport:
        """
        Args:
            segments: LineString, MultiLineString 또는 좌표열의 모음
            bidirectional: True이면 세그먼트마다 역방향 간선을 함께 생성
            precision: 노드 병합 허용 오차로 쓰이는 반올림 소수 자릿수

        Returns:
            BuildReport: 생성된 그래프와 통계 (입력 오류 시 무효 그래프)

        간선 길이는 양 끝점을 반올림된 노드 좌표로 옮긴 형상에서 계산하므로,
        원본 세그먼트 길이와 반올림 오차만큼 다를 수 있습니다.
        """
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
            return self._invalid(f"반올림 자릿수가 유효하지 않습니다: {precision!r}")
        if segments is None:
            return self._invalid("세그먼트 컬렉션이 None입니다.")

        point_to_index: Dict[Coord, int] = {}
        node_edges: List[Set[Edge]] = []

        segment_count = 0
        skipped_degenerate = 0
        skipped_invalid = 0

        for coords in self._iter_segment_coords(segments):
            segment_count += 1
            if coords is None or len(coords) < 2:
                skipped_invalid += 1
                continue

            node_a = round_xyz(coords[0], precision)
            node_b = round_xyz(coords[-1], precision)
            a_idx = self._node_index(node_a, point_to_index, node_edges)
            b_idx = self._node_index(node_b, point_to_index, node_edges)

            if a_idx == b_idx:
                skipped_degenerate += 1
                continue

            path = [node_a] + list(coords[1:-1]) + [node_b]
            length = polyline_length(path)

            node_edges[a_idx].add(Edge(to_node=b_idx, length=length, geometry=LineString(path)))
            if bidirectional:
                node_edges[b_idx].add(Edge(to_node=a_idx, length=length, geometry=LineString(path[::-1])))

        if skipped_degenerate > 0:
            self._logger.log(f"[Graph:Builder] 길이 0 세그먼트 {skipped_degenerate}개를 건너뛰었습니다.", level="INFO")
        if skipped_invalid > 0:
            self._logger.log(f"[Graph:Builder] 유효하지 않은 세그먼트 {skipped_invalid}개를 건너뛰었습니다.", level="WARNING")

        orphan_count = sum(1 for edges in node_edges if not edges)
        if orphan_count > 0:
            self._logger.log(f"[Graph:Builder] 연결이 없는 고립 노드 {orphan_count}개가 생성되었습니다.", level="INFO")

        graph = RoadGraph(node_edges)
        self._logger.log(
            f"[Graph:Builder] 그래프 생성 완료: 노드={graph.node_count} 간선={graph.edge_count} "
            f"(양방향={bool(bidirectional)}, 자릿수={precision})",
            level="INFO",
        )
        return BuildReport(
            graph=graph,
            segment_count=segment_count,
            skipped_degenerate=skipped_degenerate,
            skipped_invalid=skipped_invalid,
            orphan_count=orphan_count,
        )

    def _invalid(self, reason: str) -> BuildReport:
        self._logger.log(f"[Graph:Builder] {reason}", level="ERROR")
        return BuildReport(graph=RoadGraph.invalid(reason))

    @staticmethod
    def _node_index(point: Coord, point_to_index: Dict[Coord, int], node_edges: List[Set[Edge]]) -> int:
        idx = point_to_index.get(point)
        if idx is None:
            idx = len(point_to_index)
            point_to_index[point] = idx
            node_edges.append(set())
        return idx

    def _iter_segment_coords(self, segments: Iterable[Any]) -> Iterator[Optional[List[Coord]]]:
        """입력 항목을 3D 좌표열로 풀어냅니다. 해석할 수 없는 항목은 None을 내보냅니다."""
        for seg in segments:
            if seg is None:
                yield None
            elif isinstance(seg, MultiLineString):
                for part in seg.geoms:
                    yield self._coords_of(part)
            elif isinstance(seg, LineString):
                yield self._coords_of(seg)
            else:
                try:
                    coords = [to_xyz(pt) for pt in seg]
                except (TypeError, ValueError, IndexError):
                    yield None
                    continue
                yield coords if self._all_finite(coords) else None

    def _coords_of(self, line: LineString) -> Optional[List[Coord]]:
        if line.is_empty:
            return None
        coords = [to_xyz(c) for c in line.coords]
        return coords if self._all_finite(coords) else None

    @staticmethod
    def _all_finite(coords: List[Coord]) -> bool:
        return all(math.isfinite(v) for pt in coords for v in pt)
