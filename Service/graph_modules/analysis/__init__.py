"""
Service/graph_modules/analysis/__init__.py

그래프 통계 분석과 진단 로깅, networkx 변환 모듈을 외부로 노출합니다.
"""
from .diagnostics import GraphAnalysis, GraphAnalyzer, GraphDiagnostics, GraphDiagnosticsPolicy
from .networkx_bridge import to_networkx

__all__ = [
    "GraphAnalysis",
    "GraphAnalyzer",
    "GraphDiagnostics",
    "GraphDiagnosticsPolicy",
    "to_networkx",
]
