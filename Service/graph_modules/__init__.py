"""
Service/graph_modules/__init__.py

도로 그래프 구축, 분석, 탐색, 저장에 필요한 주요 모듈들을 외부로 노출합니다.
"""
from .core import (
    BuildReport,
    ConnectedComponentsFinder,
    Edge,
    GraphBuilder,
    GraphSimplifier,
    GraphSplitter,
    NodeLocator,
    PathResult,
    PathStatus,
    RoadGraph,
    SearchAlgorithm,
    ShortestPathEngine,
    SimplifyReport,
)
from .analysis import GraphAnalysis, GraphAnalyzer, GraphDiagnostics, to_networkx
from .store import GraphStore
from .graph_io import GraphIO

__all__ = [
    "BuildReport",
    "ConnectedComponentsFinder",
    "Edge",
    "GraphBuilder",
    "GraphSimplifier",
    "GraphSplitter",
    "NodeLocator",
    "PathResult",
    "PathStatus",
    "RoadGraph",
    "SearchAlgorithm",
    "ShortestPathEngine",
    "SimplifyReport",
    "GraphAnalysis",
    "GraphAnalyzer",
    "GraphDiagnostics",
    "to_networkx",
    "GraphStore",
    "GraphIO",
]
