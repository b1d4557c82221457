"""
Service/graph_modules/core/__init__.py

그래프 표현, 생성, 연결 요소 분석, 단순화, 최단 경로 탐색, 분리 모듈을 외부로 노출합니다.
"""
from .types import Edge, RoadGraph
from .builder import BuildReport, GraphBuilder
from .components import ConnectedComponentsFinder
from .simplifier import GraphSimplifier, SimplifyReport
from .search import (
    ExaminedEdge,
    PathResult,
    PathStatus,
    SearchAlgorithm,
    SeenPolicy,
    ShortestPathEngine,
)
from .splitter import GraphSplitter
from .locator import NodeLocator

__all__ = [
    "Edge",
    "RoadGraph",
    "BuildReport",
    "GraphBuilder",
    "ConnectedComponentsFinder",
    "GraphSimplifier",
    "SimplifyReport",
    "ExaminedEdge",
    "PathResult",
    "PathStatus",
    "SearchAlgorithm",
    "SeenPolicy",
    "ShortestPathEngine",
    "GraphSplitter",
    "NodeLocator",
]
