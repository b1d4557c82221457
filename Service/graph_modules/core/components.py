"""
Service/graph_modules/core/components.py

간선 방향을 무시한 너비 우선 탐색으로 약한 연결 요소(섬)를 찾는 모듈입니다.
"""
from __future__ import annotations

from collections import deque
from typing import List

from Common.log import Log
from .types import RoadGraph


class ConnectedComponentsFinder:
    """
    그래프를 약한 연결 요소 단위의 노드 인덱스 목록으로 분할합니다.
    요소는 최소 노드 인덱스가 작은 순서로 발견되며, 고립 노드는 단독 요소가 됩니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    def find(self, graph: RoadGraph) -> List[List[int]]:
        if not graph.is_valid:
            self._logger.log(f"[Graph:Components] 무효 그래프: {graph.invalid_reason}", level="WARNING")
            return []

        incoming = graph.incoming()
        visited = [False] * graph.node_count
        components: List[List[int]] = []

        for seed in range(graph.node_count):
            if visited[seed]:
                continue

            visited[seed] = True
            component = [seed]
            queue = deque([seed])

            while queue:
                current = queue.popleft()

                for edge in graph.sorted_edges(current):
                    if not visited[edge.to_node]:
                        visited[edge.to_node] = True
                        queue.append(edge.to_node)
                        component.append(edge.to_node)

                for source in incoming[current]:
                    if not visited[source]:
                        visited[source] = True
                        queue.append(source)
                        component.append(source)

            components.append(component)

        self._logger.log(f"[Graph:Components] 연결 요소 {len(components)}개 탐지", level="DEBUG")
        return components
