"""
Service/graph_service.py

도로 그래프 구축, 단순화, 경로 탐색, 저장 공정을 제어하는 서비스 모듈입니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from Common.log import Log
from Function.utils import get_runtime_base_path
from Function.decorators import log_execution_time, safe_run
from Service.config import GraphConfig
from Service.schemas import FileLoadRequest, FileSaveRequest, GraphStoreLoadRequest, GraphStoreSaveRequest
from Service.graph_modules import (
    BuildReport,
    ConnectedComponentsFinder,
    GraphAnalysis,
    GraphAnalyzer,
    GraphBuilder,
    GraphDiagnostics,
    GraphIO,
    GraphSimplifier,
    GraphSplitter,
    GraphStore,
    NodeLocator,
    PathResult,
    RoadGraph,
    ShortestPathEngine,
    SimplifyReport,
)


@dataclass(frozen=True)
class PipelineOutput:
    """파이프라인 실행 결과 파일 경로 묶음입니다."""
    edges_path: Path
    graph_path: Optional[Path]
    node_count: int
    edge_count: int


class GraphService:
    """
    그래프 엔진의 각 구성 요소를 조합하여 외부에 단일 진입점을 제공하는 메인 서비스 클래스입니다.
    """

    def __init__(
        self,
        logger: Log,
        config: GraphConfig,
        graph_io: GraphIO,
        builder: GraphBuilder,
        finder: ConnectedComponentsFinder,
        simplifier: GraphSimplifier,
        engine: ShortestPathEngine,
        splitter: GraphSplitter,
        analyzer: GraphAnalyzer,
        diagnostics: GraphDiagnostics,
        store: GraphStore,
    ):
        self._logger = logger
        self._config = config
        self._graph_io = graph_io
        self._builder = builder
        self._finder = finder
        self._simplifier = simplifier
        self._engine = engine
        self._splitter = splitter
        self._analyzer = analyzer
        self._diagnostics = diagnostics
        self._store = store

    def build_graph(
        self,
        segments: Iterable[Any],
        bidirectional: Optional[bool] = None,
        precision: Optional[int] = None,
    ) -> BuildReport:
        """인자를 생략하면 설정의 기본값(양방향 여부, 반올림 자릿수)을 명시적으로 전달합니다."""
        if bidirectional is None:
            bidirectional = self._config.bidirectional
        if precision is None:
            precision = self._config.default_precision
        return self._builder.build(segments, bidirectional=bidirectional, precision=precision)

    def find_connected_components(self, graph: RoadGraph) -> List[List[int]]:
        return self._finder.find(graph)

    def simplify_graph(self, graph: RoadGraph) -> SimplifyReport:
        return self._simplifier.simplify(graph)

    def shortest_path(
        self,
        graph: RoadGraph,
        start: Any,
        end: Any,
        algorithm: Optional[str] = None,
        track_visited: Optional[bool] = None,
    ) -> PathResult:
        if algorithm is None:
            algorithm = self._config.default_algorithm
        if track_visited is None:
            track_visited = self._config.track_visited_edges
        return self._engine.find(graph, start, end, algorithm=algorithm, track_visited=track_visited)

    def split_graph(self, graph: RoadGraph) -> List[RoadGraph]:
        return self._splitter.split(graph)

    def analyze_graph(self, graph: RoadGraph) -> Optional[GraphAnalysis]:
        return self._analyzer.analyze(graph)

    def nearest_node(self, graph: RoadGraph, point: Sequence[float]) -> Optional[int]:
        """임의 좌표에서 가장 가까운 노드 인덱스를 반환합니다. 위치를 가진 노드가 없으면 None입니다."""
        return NodeLocator(self._logger, graph).nearest(point)

    def route_between_points(
        self,
        graph: RoadGraph,
        start_point: Sequence[float],
        end_point: Sequence[float],
        algorithm: Optional[str] = None,
    ) -> PathResult:
        """
        두 좌표를 각각 최근접 노드로 스냅한 뒤 최단 경로를 탐색합니다.
        스냅할 노드가 없으면 인덱스 오류 상태의 결과가 반환됩니다.
        """
        locator = NodeLocator(self._logger, graph)
        start = locator.nearest(start_point)
        end = locator.nearest(end_point)
        self._logger.log(f"[Graph:Service] 좌표 스냅 결과: 출발={start}, 도착={end}", level="DEBUG")
        return self.shortest_path(graph, start, end, algorithm=algorithm)

    def save_graph(self, graph: RoadGraph, output_path: str) -> Path:
        return self._store.save(graph, GraphStoreSaveRequest(output_path=Path(output_path)))

    def load_graph(self, input_path: str) -> RoadGraph:
        return self._store.load(GraphStoreLoadRequest(file_path=Path(input_path)))

    @safe_run
    @log_execution_time
    def run_pipeline(self, input_path: str) -> PipelineOutput:
        """
        입력 선형 레이어로부터 그래프를 구축하고, 단순화 및 진단 후 결과를 Result 폴더에 저장합니다.
        """
        target_path = Path(input_path)

        output_dir = get_runtime_base_path() / "Result"
        output_dir.mkdir(parents=True, exist_ok=True)

        load_request = FileLoadRequest(file_path=target_path)
        gdf_input = self._graph_io.load_layer(load_request)
        segments = self._graph_io.extract_lines(gdf_input)

        report = self.build_graph(segments)
        graph = report.graph
        if not graph.is_valid:
            raise ValueError(f"그래프 생성 실패: {graph.invalid_reason}")

        self._diagnostics.report(graph, label="Built")

        if self._config.debug_export_intermediate:
            self._save_stage(output_dir, target_path.stem, "01_built_edges", graph, gdf_input.crs)

        if self._config.simplify_in_pipeline:
            simplified = self.simplify_graph(graph)
            graph = simplified.graph
            self._diagnostics.report(graph, label="Simplified")

        edges_request = FileSaveRequest(output_path=output_dir / f"{target_path.stem}_graph_edges.shp")
        edges_path = self._graph_io.save_edges(graph, edges_request, crs=gdf_input.crs)

        graph_path: Optional[Path] = None
        if self._config.export_graph_store:
            graph_path = self.save_graph(graph, str(output_dir / f"{target_path.stem}_graph.json"))

        return PipelineOutput(
            edges_path=edges_path,
            graph_path=graph_path,
            node_count=graph.node_count,
            edge_count=graph.edge_count,
        )

    def _save_stage(self, output_dir: Path, stem: str, stage: str, graph: RoadGraph, crs) -> None:
        """파이프라인 중간 단계의 그래프 간선을 파일로 저장합니다."""
        if graph.edge_count == 0:
            return

        stage_path = output_dir / f"{stem}_{stage}.shp"
        stage_gdf = self._graph_io.edges_to_frame(graph, crs)

        try:
            stage_gdf.to_file(stage_path, driver="ESRI Shapefile", encoding="cp949")
            self._logger.log(f"[Debug] 저장 완료: {stage_path.name}", level="INFO")
        except Exception as e:
            self._logger.log(f"[Debug] 저장 실패: {stage_path.name} - {e}", level="WARNING")
