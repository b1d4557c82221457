"""
Service/container.py

애플리케이션의 모든 객체를 생성하고 의존성을 주입하여 실행 가능한 상태로 조립합니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from Common.log import Log

from Service.config import GraphConfig
from Service.graph_modules import (
    ConnectedComponentsFinder,
    GraphAnalyzer,
    GraphBuilder,
    GraphDiagnostics,
    GraphIO,
    GraphSimplifier,
    GraphSplitter,
    GraphStore,
    ShortestPathEngine,
)

from Service.graph_service import GraphService


@dataclass(frozen=True)
class BuiltApp:
    """조립이 완료된 애플리케이션 서비스 객체 묶음입니다."""
    config: GraphConfig
    graph_service: GraphService


def build_app(logger: Log, config: Optional[GraphConfig] = None) -> BuiltApp:
    """
    설정 로드 및 모든 내부 모듈의 의존성을 주입하여 BuiltApp 객체를 생성합니다.
    """
    graph_config = config or GraphConfig()

    graph_io = GraphIO(logger)
    store = GraphStore(logger)

    builder = GraphBuilder(logger)
    finder = ConnectedComponentsFinder(logger)
    simplifier = GraphSimplifier(logger)
    engine = ShortestPathEngine(logger)
    splitter = GraphSplitter(logger, finder=finder)

    analyzer = GraphAnalyzer(logger, finder=finder)
    diagnostics = GraphDiagnostics(logger, analyzer=analyzer)

    graph_service = GraphService(
        logger=logger,
        config=graph_config,
        graph_io=graph_io,
        builder=builder,
        finder=finder,
        simplifier=simplifier,
        engine=engine,
        splitter=splitter,
        analyzer=analyzer,
        diagnostics=diagnostics,
        store=store,
    )

    return BuiltApp(config=graph_config, graph_service=graph_service)
