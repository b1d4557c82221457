"""
Service/graph_modules/analysis/networkx_bridge.py

RoadGraph를 networkx 그래프로 변환하여 외부 분석 도구와 기준 알고리즘 비교에 사용합니다.
"""
from __future__ import annotations

import networkx as nx

from ..core import RoadGraph


def to_networkx(graph: RoadGraph) -> nx.MultiDiGraph:
    """
    노드 인덱스를 그대로 networkx 노드로 사용합니다.
    간선 속성: weight(길이), geometry(LineString). 노드 속성: position (없으면 None).
    """
    nx_graph = nx.MultiDiGraph()
    if not graph.is_valid:
        return nx_graph

    for node, position in enumerate(graph.node_positions()):
        nx_graph.add_node(node, position=position)
    for source, edge in graph.iter_edges():
        nx_graph.add_edge(source, edge.to_node, weight=float(edge.length), geometry=edge.geometry)
    return nx_graph
