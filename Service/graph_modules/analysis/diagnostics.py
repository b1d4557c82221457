"""
Service/graph_modules/analysis/diagnostics.py

그래프의 노드 연결 상태(단말/교차/고립), 연결 요소 수, 간선 길이 분포를 분석하여
통계로 반환하거나 로그로 출력하는 진단 모듈입니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import pandas as pd
from shapely.geometry import LineString

from Common.log import Log
from ..core import ConnectedComponentsFinder, RoadGraph


@dataclass(frozen=True)
class GraphAnalysis:
    """고유 이웃 수 기준의 노드 분류 통계입니다."""
    node_count: int
    edge_count: int
    leaf_count: int
    junction_count: int
    isolated_count: int
    component_count: int


@dataclass(frozen=True)
class GraphDiagnosticsPolicy:
    """진단 로그의 샘플링 제한 설정입니다."""
    top_n_components: int = 10
    short_edge_threshold_m: float = 0.5


class GraphAnalyzer:
    """
    노드마다 출발/유입 간선의 고유 이웃 수를 세어 분류합니다.
        - 고립(isolated): 0, 단말(leaf): 1, 교차(junction): 3 이상
    """

    def __init__(self, logger: Log, finder: Optional[ConnectedComponentsFinder] = None):
        self._logger = logger
        self._finder = finder or ConnectedComponentsFinder(logger)

    @property
    def finder(self) -> ConnectedComponentsFinder:
        return self._finder

    def analyze(self, graph: RoadGraph) -> Optional[GraphAnalysis]:
        if not graph.is_valid:
            self._logger.log(f"[Graph:Analyzer] 무효 그래프: {graph.invalid_reason}", level="WARNING")
            return None

        degrees = self.unique_neighbor_counts(graph)
        return GraphAnalysis(
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            leaf_count=degrees.count(1),
            junction_count=sum(1 for d in degrees if d >= 3),
            isolated_count=degrees.count(0),
            component_count=len(self._finder.find(graph)),
        )

    @staticmethod
    def unique_neighbor_counts(graph: RoadGraph) -> List[int]:
        incoming = graph.incoming()
        counts: List[int] = []
        for node in range(graph.node_count):
            neighbors = {edge.to_node for edge in graph.node_edges[node]}
            neighbors.update(incoming[node])
            counts.append(len(neighbors))
        return counts

    @staticmethod
    def edge_geometries(graph: RoadGraph) -> List[LineString]:
        """저장된 모든 간선 형상을 노드 순서대로 반환합니다."""
        return [edge.geometry for _, edge in graph.iter_edges()]


class GraphDiagnostics:
    """
    그래프 요약 통계, 간선 길이 분포, 연결 요소 크기 분포를 순차적으로 로깅합니다.
    """

    def __init__(
        self,
        logger: Log,
        analyzer: Optional[GraphAnalyzer] = None,
        policy: Optional[GraphDiagnosticsPolicy] = None,
    ):
        self._logger = logger
        self._analyzer = analyzer or GraphAnalyzer(logger)
        self._finder = self._analyzer.finder
        self._policy = policy or GraphDiagnosticsPolicy()

    def report(self, graph: RoadGraph, label: str = "Graph") -> None:
        if not graph.is_valid:
            self._logger.log(f"[Graph:Diag][{label}] 무효 그래프: {graph.invalid_reason}", level="WARNING")
            return
        if graph.node_count == 0:
            self._logger.log(f"[Graph:Diag][{label}] 분석 대상 그래프가 비어있습니다.", level="WARNING")
            return

        self._log_graph_summary(graph, label)
        df = self.edge_frame(graph)
        self._log_edge_length_summary(df, label)
        self._log_component_sizes(graph, label)

    def edge_frame(self, graph: RoadGraph) -> pd.DataFrame:
        """간선별 출발/도착 노드, 길이, 형상 점 개수를 데이터프레임으로 구축합니다."""
        rows = [
            {
                "from_node": source,
                "to_node": edge.to_node,
                "length": float(edge.length),
                "points": len(edge.geometry.coords),
            }
            for source, edge in graph.iter_edges()
        ]
        return pd.DataFrame(rows, columns=["from_node", "to_node", "length", "points"])

    def _log_graph_summary(self, graph: RoadGraph, label: str) -> None:
        analysis = self._analyzer.analyze(graph)
        if analysis is None:
            return
        self._logger.log(
            f"[Graph:Diag][{label}] 노드={analysis.node_count} 간선={analysis.edge_count} "
            f"그룹={analysis.component_count} 단말(D1)={analysis.leaf_count} "
            f"교차(D3+)={analysis.junction_count} 고립(D0)={analysis.isolated_count}",
            level="INFO",
        )

    def _log_edge_length_summary(self, df: pd.DataFrame, label: str) -> None:
        """간선 길이에 대한 백분위수 분포와 짧은 간선 수를 기록합니다."""
        if df.empty:
            self._logger.log(f"[Graph:Diag][{label}][EdgeLen] 간선이 없습니다.", level="INFO")
            return

        desc = df["length"].describe(percentiles=[0.01, 0.05, 0.5, 0.95, 0.99]).to_dict()
        th = float(self._policy.short_edge_threshold_m)
        short_cnt = int((df["length"] < th).sum())
        self._logger.log(
            f"[Graph:Diag][{label}][EdgeLen] "
            + " ".join([f"{k}={float(v):.3f}" for k, v in desc.items() if k != "count"])
            + f" | 짧은 간선( <{th}m )={short_cnt}",
            level="INFO",
        )

    def _log_component_sizes(self, graph: RoadGraph, label: str) -> None:
        components = self._finder.find(graph)
        if len(components) <= 1:
            return
        sizes = sorted((len(c) for c in components), reverse=True)
        top_n = int(self._policy.top_n_components)
        self._logger.log(
            f"[Graph:Diag][{label}][Components] 분리 그룹 {len(components)}개, 상위 노드 수: {sizes[:top_n]}",
            level="DEBUG",
        )
