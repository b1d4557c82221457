"""
Service/graph_modules/graph_io.py

선형 레이어(SHP/GPKG/GeoJSON)를 세그먼트로 읽어오고, 그래프 간선과 경로를 레이어로 저장하는 모듈입니다.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Set

import geopandas as gpd
from shapely.geometry import LineString, MultiLineString

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.schemas import FileLoadRequest, FileSaveRequest
from .core import PathResult, RoadGraph

_DRIVERS = {".shp": "ESRI Shapefile", ".gpkg": "GPKG", ".geojson": "GeoJSON"}


class GraphIO:
    """
    선형 레이어의 로드 및 저장을 처리하며 데이터의 유효성을 검증합니다.
    """

    _ALLOWED_LINE_TYPES: Set[str] = {"LineString", "MultiLineString"}

    def __init__(self, logger: Log):
        self._logger = logger

    @safe_run
    @log_execution_time
    def load_layer(self, request: FileLoadRequest) -> gpd.GeoDataFrame:
        """
        선형 레이어를 로드하고 데이터 존재 여부와 좌표계(CRS)를 검증합니다.

        Args:
            request (FileLoadRequest): 파일 경로를 포함한 로드 요청 객체

        Returns:
            gpd.GeoDataFrame: 로드된 지리 정보 데이터
        """
        file_path = request.file_path.expanduser().resolve()

        if file_path.suffix.lower() == ".shp":
            gdf = gpd.read_file(file_path, encoding="cp949")
        else:
            gdf = gpd.read_file(file_path)

        if gdf.empty:
            raise ValueError("로드된 데이터가 비어있습니다.")

        crs_name = getattr(gdf.crs, "name", None) or "Unknown"
        self._logger.log(f"데이터 로드 상세 - 객체 수: {len(gdf)}, CRS: {crs_name}, EPSG: {self._try_to_epsg(gdf)}", level="INFO")

        if not self._is_meter_unit(gdf):
            self._logger.log(
                f"입력 CRS 단위가 미터가 아닙니다. 간선 길이와 A* 휴리스틱이 좌표 단위로 계산됩니다. 현재 CRS: {gdf.crs}",
                level="WARNING",
            )
        return gdf

    def load_segments(self, request: FileLoadRequest) -> List[LineString]:
        """레이어를 로드하여 MultiLineString은 개별 선으로 풀어낸 세그먼트 목록을 반환합니다."""
        gdf = self.load_layer(request)
        return self.extract_lines(gdf)

    def extract_lines(self, gdf: gpd.GeoDataFrame) -> List[LineString]:
        lines: List[LineString] = []
        skipped = 0
        for geom in gdf.geometry:
            if isinstance(geom, MultiLineString):
                lines.extend([ln for ln in geom.geoms if not ln.is_empty])
            elif isinstance(geom, LineString) and not geom.is_empty:
                lines.append(geom)
            else:
                skipped += 1
        if skipped > 0:
            self._logger.log(f"선형이 아닌 객체 {skipped}개를 제외했습니다.", level="WARNING")
        return lines

    def edges_to_frame(self, graph: RoadGraph, crs: Any = None) -> gpd.GeoDataFrame:
        rows = {"from_node": [], "to_node": [], "length": []}
        geoms: List[LineString] = []
        for source, edge in graph.iter_edges():
            rows["from_node"].append(source)
            rows["to_node"].append(edge.to_node)
            rows["length"].append(float(edge.length))
            geoms.append(edge.geometry)
        return gpd.GeoDataFrame(rows, geometry=geoms, crs=crs)

    @safe_run
    @log_execution_time
    def save_edges(self, graph: RoadGraph, request: FileSaveRequest, crs: Any = None) -> Path:
        """
        그래프의 모든 간선을 from_node/to_node/length 속성과 함께 저장합니다.

        Args:
            graph (RoadGraph): 저장할 그래프
            request (FileSaveRequest): 저장 경로를 포함한 요청 객체
            crs: 출력 좌표계

        Returns:
            Path: 저장된 파일의 경로
        """
        if not graph.is_valid:
            raise ValueError(f"무효 그래프는 저장할 수 없습니다: {graph.invalid_reason}")
        return self._write(self.edges_to_frame(graph, crs), request)

    @safe_run
    @log_execution_time
    def save_path(self, result: PathResult, request: FileSaveRequest, crs: Any = None) -> Optional[Path]:
        """탐색된 경로를 단일 선형 객체로 저장합니다. 선형이 없는 경로는 저장하지 않습니다."""
        geometry = result.geometry
        if not result.ok or not isinstance(geometry, LineString):
            self._logger.log(f"저장할 경로 선형이 없습니다: {result.status.value}", level="WARNING")
            return None

        gdf = gpd.GeoDataFrame(
            {"start": [result.nodes[0]], "end": [result.nodes[-1]], "length": [float(result.length)]},
            geometry=[geometry],
            crs=crs,
        )
        return self._write(gdf, request)

    def _write(self, gdf: gpd.GeoDataFrame, request: FileSaveRequest) -> Path:
        output_path = request.output_path.expanduser().resolve()

        if gdf.empty:
            self._logger.log("저장할 데이터가 비어있습니다.", level="WARNING")

        self._validate_line_geometries(gdf)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        driver = _DRIVERS[output_path.suffix.lower()]
        if driver == "ESRI Shapefile":
            gdf.to_file(output_path, driver=driver, encoding="cp949")
        else:
            gdf.to_file(output_path, driver=driver)

        self._logger.log(f"저장 완료: {output_path}", level="INFO")
        return output_path

    def _try_to_epsg(self, gdf: gpd.GeoDataFrame) -> Optional[int]:
        """좌표계 정보를 EPSG 코드로 변환 시도합니다."""
        try:
            if gdf.crs is None:
                return None
            return gdf.crs.to_epsg()
        except Exception:
            return None

    def _is_meter_unit(self, gdf: gpd.GeoDataFrame) -> bool:
        """좌표축 단위가 모두 미터(Metre/Meter)인지 확인합니다. 타원체 정의의 단위는 보지 않습니다."""
        if gdf.crs is None:
            return False

        units = {(axis.unit_name or "").lower() for axis in gdf.crs.axis_info}
        return bool(units) and units <= {"metre", "meter"}

    def _validate_line_geometries(self, gdf: gpd.GeoDataFrame) -> None:
        """데이터의 geometry 타입이 LineString 또는 MultiLineString인지 검증합니다."""
        if gdf.empty:
            return

        geom_types = set(gdf.geometry.geom_type.unique())
        invalid = geom_types - self._ALLOWED_LINE_TYPES
        if invalid:
            raise ValueError(f"저장 대상 geometry 타입이 선형이 아닙니다. 허용되지 않는 타입: {sorted(invalid)}")
