from __future__ import annotations

import argparse
import json
import math
import random
from pathlib import Path
from typing import Any, Dict, List, Tuple

import geopandas as gpd
import networkx as nx
from shapely.geometry import LineString, MultiLineString

from Common.log import Log
from Service.graph_modules import (
    GraphAnalyzer,
    GraphBuilder,
    GraphSimplifier,
    RoadGraph,
    ShortestPathEngine,
    to_networkx,
)


def _line_strings(gdf: Any) -> List[LineString]:
    lines: List[LineString] = []
    for geom in gdf.geometry:
        if isinstance(geom, MultiLineString):
            lines.extend(part for part in geom.geoms if not part.is_empty)
        elif isinstance(geom, LineString) and not geom.is_empty:
            lines.append(geom)
    return lines


def sample_pairs(graph: RoadGraph, count: int, seed: int) -> List[Tuple[int, int]]:
    if graph.node_count < 2 or count <= 0:
        return []
    rng = random.Random(seed)
    return [(rng.randrange(graph.node_count), rng.randrange(graph.node_count)) for _ in range(count)]


def path_agreement(graph: RoadGraph, engine: ShortestPathEngine, pairs: List[Tuple[int, int]], tol: float) -> Dict[str, Any]:
    """Dijkstra, A*, networkx 세 결과의 거리(도달 불가 포함)가 허용 오차 내에서 일치하는 비율을 계산합니다."""
    reference = to_networkx(graph)
    agreed = 0
    max_deviation = 0.0

    for start, end in pairs:
        dijkstra = engine.dijkstra(graph, start, end)
        astar = engine.astar(graph, start, end)
        try:
            expected = float(nx.dijkstra_path_length(reference, start, end, weight="weight"))
        except nx.NetworkXNoPath:
            expected = math.inf

        lengths = (dijkstra.length, astar.length, expected)
        if all(math.isinf(v) for v in lengths):
            agreed += 1
            continue
        if any(math.isinf(v) for v in lengths):
            max_deviation = math.inf
            continue

        deviation = max(lengths) - min(lengths)
        max_deviation = max(max_deviation, deviation)
        if deviation <= tol:
            agreed += 1

    rate = 1.0 if not pairs else agreed / len(pairs)
    return {"agreement_rate": rate, "max_deviation": max_deviation}


def evaluate(lines_gdf: Any, thresholds: Dict[str, Any], logger: Log) -> Dict[str, Any]:
    lines = _line_strings(lines_gdf)
    precision = int(thresholds.get("precision", 3))
    bidirectional = bool(thresholds.get("bidirectional", True))

    report = GraphBuilder(logger).build(lines, bidirectional=bidirectional, precision=precision)
    graph = report.graph
    analysis = GraphAnalyzer(logger).analyze(graph)
    simplified = GraphSimplifier(logger).simplify(graph)

    engine = ShortestPathEngine(logger)
    pairs = sample_pairs(graph, int(thresholds.get("sample_pairs", 20)), int(thresholds.get("seed", 0)))
    agreement = path_agreement(graph, engine, pairs, float(thresholds.get("distance_tolerance", 1e-6)))

    metrics = {
        "segment_count": report.segment_count,
        "node_count": graph.node_count,
        "edge_count": graph.edge_count,
        "component_count": analysis.component_count if analysis else 0,
        "leaf_count": analysis.leaf_count if analysis else 0,
        "junction_count": analysis.junction_count if analysis else 0,
        "isolated_count": analysis.isolated_count if analysis else 0,
        "skipped_segment_count": report.skipped_degenerate + report.skipped_invalid,
        "node_reduction": simplified.node_reduction,
        "edge_reduction": simplified.edge_reduction,
        "malformed_chain_count": simplified.malformed_chain_count,
        "path_agreement_rate": agreement["agreement_rate"],
        "max_path_deviation": agreement["max_deviation"],
    }

    checks = {
        "graph_valid": graph.is_valid,
        "max_components": metrics["component_count"] <= int(thresholds.get("max_components", 999999)),
        "max_isolated_count": metrics["isolated_count"] <= int(thresholds.get("max_isolated_count", 999999)),
        "max_skipped_segments": metrics["skipped_segment_count"] <= int(thresholds.get("max_skipped_segments", 999999)),
        "min_node_reduction": metrics["node_reduction"] >= float(thresholds.get("min_node_reduction", 0.0)),
        "max_malformed_chains": metrics["malformed_chain_count"] <= int(thresholds.get("max_malformed_chains", 999999)),
        "min_path_agreement_rate": metrics["path_agreement_rate"] >= float(thresholds.get("min_path_agreement_rate", 1.0)),
    }

    return {"metrics": metrics, "checks": checks, "passed": all(checks.values())}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate road graph quality metrics and pass/fail gates.")
    parser.add_argument("--input", required=True, help="Input line layer path (.shp/.gpkg/.geojson)")
    parser.add_argument("--thresholds", required=True, help="JSON file for threshold configuration")
    parser.add_argument("--output", required=False, help="Optional output JSON path")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    lines_gdf = gpd.read_file(args.input)
    thresholds = json.loads(Path(args.thresholds).read_text(encoding="utf-8"))

    result = evaluate(lines_gdf, thresholds, Log())
    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))

    if args.output:
        Path(args.output).write_text(json.dumps(result, ensure_ascii=False, indent=2, default=str), encoding="utf-8")

    return 0 if result["passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
