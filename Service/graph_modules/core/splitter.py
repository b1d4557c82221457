"""
Service/graph_modules/core/splitter.py

그래프를 연결 요소별 독립 그래프로 분리하는 모듈입니다.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from Common.log import Log
from .components import ConnectedComponentsFinder
from .types import Edge, RoadGraph


class GraphSplitter:
    """연결 요소마다 노드 인덱스를 0부터 다시 매겨 새 그래프를 만듭니다."""

    def __init__(self, logger: Log, finder: Optional[ConnectedComponentsFinder] = None):
        self._logger = logger
        self._finder = finder or ConnectedComponentsFinder(logger)

    def split(self, graph: RoadGraph) -> List[RoadGraph]:
        if not graph.is_valid:
            self._logger.log(f"[Graph:Splitter] 무효 그래프는 분리할 수 없습니다: {graph.invalid_reason}", level="WARNING")
            return []

        graphs: List[RoadGraph] = []
        for component in self._finder.find(graph):
            old_to_new: Dict[int, int] = {old: new for new, old in enumerate(component)}
            node_edges = []
            for old in component:
                node_edges.append(
                    {
                        Edge(to_node=old_to_new[edge.to_node], length=edge.length, geometry=edge.geometry)
                        for edge in graph.node_edges[old]
                    }
                )
            graphs.append(RoadGraph(node_edges))

        self._logger.log(f"[Graph:Splitter] 그래프 분리 완료: {len(graphs)}개 하위 그래프", level="INFO")
        return graphs
