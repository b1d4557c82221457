"""
Service/graph_modules/store.py

그래프를 키-값 레코드(JSON)로 저장하고 다시 읽어들이는 영속화 모듈입니다.

레코드 키:
    NodeCount, EdgeCount
    Node_{i}_EdgeCount
    Node_{i}_Edge_{j}_ToNodeIdx / Node_{i}_Edge_{j}_Length / Node_{i}_Edge_{j}_Geometry
"""
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Set

from shapely.geometry import LineString

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.schemas import GraphStoreLoadRequest, GraphStoreSaveRequest
from .core import Edge, RoadGraph
from .core.geometry import line_coords, to_xyz


class CorruptRecordError(ValueError):
    """저장 레코드의 손상을 나타냅니다. 모듈 밖으로는 전파하지 않습니다."""


class GraphStore:
    """
    읽기 실패 시 일부만 채워진 그래프 대신 사유가 담긴 무효 그래프를 반환합니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    def to_record(self, graph: RoadGraph) -> Dict[str, Any]:
        if not graph.is_valid:
            raise ValueError(f"무효 그래프는 저장할 수 없습니다: {graph.invalid_reason}")

        record: Dict[str, Any] = {"NodeCount": graph.node_count, "EdgeCount": graph.edge_count}
        for i in range(graph.node_count):
            edges = graph.sorted_edges(i)
            record[f"Node_{i}_EdgeCount"] = len(edges)
            for j, edge in enumerate(edges):
                prefix = f"Node_{i}_Edge_{j}"
                record[f"{prefix}_ToNodeIdx"] = edge.to_node
                record[f"{prefix}_Length"] = float(edge.length)
                record[f"{prefix}_Geometry"] = [list(pt) for pt in line_coords(edge.geometry)]
        return record

    def from_record(self, record: Any) -> RoadGraph:
        try:
            graph = self._read(record)
        except CorruptRecordError as e:
            return self._corrupt(str(e))
        except (KeyError, TypeError, ValueError, IndexError) as e:
            return self._corrupt(f"저장 데이터를 읽는 중 오류가 발생했습니다: {e}")

        if not graph.is_valid:
            return self._corrupt(graph.invalid_reason)
        return graph

    @safe_run
    @log_execution_time
    def save(self, graph: RoadGraph, request: GraphStoreSaveRequest) -> Path:
        output_path = request.output_path.expanduser().resolve()
        record = self.to_record(graph)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(record, ensure_ascii=False), encoding="utf-8")

        self._logger.log(f"[Graph:Store] 그래프 저장 완료: {output_path} ({graph.summary()})", level="INFO")
        return output_path

    @log_execution_time
    def load(self, request: GraphStoreLoadRequest) -> RoadGraph:
        file_path = request.file_path.expanduser().resolve()
        try:
            record = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            return self._corrupt(f"그래프 파일을 읽을 수 없습니다: {e}")

        graph = self.from_record(record)
        if graph.is_valid:
            self._logger.log(f"[Graph:Store] 그래프 로드 완료: {file_path} ({graph.summary()})", level="INFO")
        return graph

    def _read(self, record: Any) -> RoadGraph:
        if not isinstance(record, Mapping):
            raise CorruptRecordError("저장 데이터가 키-값 레코드가 아닙니다.")
        if "NodeCount" not in record or "EdgeCount" not in record:
            raise CorruptRecordError("저장 데이터에 NodeCount 또는 EdgeCount가 없습니다.")

        node_count = self._read_count(record, "NodeCount")
        expected_edges = self._read_count(record, "EdgeCount")

        node_edges: List[Set[Edge]] = []
        for i in range(node_count):
            edge_count = self._read_count(record, f"Node_{i}_EdgeCount")
            edges: Set[Edge] = set()
            for j in range(edge_count):
                edges.add(self._read_edge(record, f"Node_{i}_Edge_{j}", node_count))
            node_edges.append(edges)

        total = sum(len(edges) for edges in node_edges)
        if total != expected_edges:
            raise CorruptRecordError(f"EdgeCount({expected_edges})와 실제 간선 수({total})가 일치하지 않습니다.")
        return RoadGraph(node_edges)

    @staticmethod
    def _read_count(record: Mapping, key: str) -> int:
        if key not in record:
            raise CorruptRecordError(f"저장 데이터에 {key}가 없습니다.")
        value = record[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise CorruptRecordError(f"{key} 값이 정수가 아닙니다: {value!r}")
        if value < 0:
            raise CorruptRecordError(f"{key} 값이 음수입니다: {value}")
        return value

    @staticmethod
    def _read_edge(record: Mapping, prefix: str, node_count: int) -> Edge:
        keys = (f"{prefix}_ToNodeIdx", f"{prefix}_Length", f"{prefix}_Geometry")
        missing = [k for k in keys if k not in record]
        if missing:
            raise CorruptRecordError(f"저장 데이터에 {missing[0]}가 없습니다.")

        to_node = record[keys[0]]
        if isinstance(to_node, bool) or not isinstance(to_node, int) or not 0 <= to_node < node_count:
            raise CorruptRecordError(f"{keys[0]} 값이 유효한 노드 인덱스가 아닙니다: {to_node!r}")

        length = record[keys[1]]
        if isinstance(length, bool) or not isinstance(length, (int, float)) or not math.isfinite(length) or length < 0:
            raise CorruptRecordError(f"{keys[1]} 값이 유효한 길이가 아닙니다: {length!r}")

        raw_geometry = record[keys[2]]
        if not isinstance(raw_geometry, list) or len(raw_geometry) < 2:
            raise CorruptRecordError(f"{keys[2]} 값은 2개 이상의 점 목록이어야 합니다.")
        coords = [to_xyz(pt) for pt in raw_geometry]

        return Edge(to_node=to_node, length=float(length), geometry=LineString(coords))

    def _corrupt(self, reason: str) -> RoadGraph:
        self._logger.log(f"[Graph:Store] 그래프 복원 실패: {reason}", level="ERROR")
        return RoadGraph.invalid(reason)
