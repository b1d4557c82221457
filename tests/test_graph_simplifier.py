import unittest

from shapely.geometry import LineString

from Service.graph_modules.core import GraphBuilder, GraphSimplifier, RoadGraph
from Service.graph_modules.core.simplifier import WAYPOINT
from support import RecordingLogger, edge, graph_from_positions


def _straight_road(bidirectional):
    segments = [
        LineString([(0, 0), (1, 0)]),
        LineString([(1, 0), (2, 0)]),
        LineString([(2, 0), (3, 0)]),
    ]
    return GraphBuilder(RecordingLogger()).build(segments, bidirectional=bidirectional, precision=3).graph


class GraphSimplifierTests(unittest.TestCase):
    def setUp(self):
        self.logger = RecordingLogger()
        self.simplifier = GraphSimplifier(self.logger)

    def test_directed_chain_collapses_to_single_edge(self):
        report = self.simplifier.simplify(_straight_road(bidirectional=False))
        graph = report.graph
        self.assertTrue(graph.is_valid)
        self.assertEqual(graph.node_count, 2)
        self.assertEqual(graph.edge_count, 1)

        merged = graph.sorted_edges(0)[0]
        self.assertEqual(merged.to_node, 1)
        self.assertAlmostEqual(merged.length, 3.0)
        self.assertEqual(
            list(merged.geometry.coords),
            [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0), (3.0, 0.0, 0.0)],
        )

    def test_bidirectional_chain_keeps_both_directions(self):
        graph = self.simplifier.simplify(_straight_road(bidirectional=True)).graph
        self.assertEqual(graph.node_count, 2)
        self.assertEqual(graph.edge_count, 2)
        self.assertAlmostEqual(graph.sorted_edges(0)[0].length, 3.0)
        self.assertAlmostEqual(graph.sorted_edges(1)[0].length, 3.0)
        self.assertEqual(graph.sorted_edges(1)[0].geometry.coords[0], (3.0, 0.0, 0.0))

    def test_report_counts_and_reduction(self):
        report = self.simplifier.simplify(_straight_road(bidirectional=True))
        self.assertEqual(report.original_node_count, 4)
        self.assertEqual(report.original_edge_count, 6)
        self.assertEqual(report.new_node_count, 2)
        self.assertEqual(report.new_edge_count, 2)
        self.assertAlmostEqual(report.node_reduction, 50.0)

    def test_simplify_is_idempotent(self):
        once = self.simplifier.simplify(_straight_road(bidirectional=True)).graph
        twice = self.simplifier.simplify(once).graph
        self.assertEqual(twice.node_count, once.node_count)
        self.assertEqual(twice.edge_count, once.edge_count)
        self.assertEqual(
            [(s, e.to_node, e.length) for s, e in twice.iter_edges()],
            [(s, e.to_node, e.length) for s, e in once.iter_edges()],
        )

    def test_junctions_are_kept(self):
        # 중심 노드(0)에 세 방향 도로가 모이는 T자 교차
        positions = [(0, 0), (1, 0), (-1, 0), (0, 1)]
        arcs = [(0, 1), (1, 0), (0, 2), (2, 0), (0, 3), (3, 0)]
        graph = self.simplifier.simplify(graph_from_positions(positions, arcs)).graph
        self.assertEqual(graph.node_count, 4)
        self.assertEqual(graph.edge_count, 6)

    def test_start_fork_is_a_junction(self):
        # 1 <- 0 -> 2 : 0은 이웃이 둘이지만 유입 없이 두 갈래로 나가므로 교차점
        graph = graph_from_positions([(0, 0), (1, 0), (-1, 0)], [(0, 1), (0, 2)])
        report = self.simplifier.simplify(graph)
        self.assertEqual(report.graph.node_count, 3)
        self.assertEqual(report.graph.edge_count, 2)

    def test_sink_merge_is_a_junction(self):
        graph = graph_from_positions([(0, 0), (1, 0), (-1, 0)], [(1, 0), (2, 0)])
        report = self.simplifier.simplify(graph)
        self.assertEqual(report.graph.node_count, 3)
        self.assertEqual(report.graph.edge_count, 2)

    def test_blocked_chain_is_dropped_and_counted(self):
        # 통과 노드 1에서 0 방향으로 들어오면 되돌아가는 간선밖에 없음
        graph = graph_from_positions([(0, 0), (1, 0), (2, 0)], [(0, 1), (1, 0), (2, 1)])
        report = self.simplifier.simplify(graph)
        self.assertEqual(report.malformed_chain_count, 1)
        self.assertEqual(report.unreached_waypoint_count, 0)

        simplified = report.graph
        self.assertEqual(simplified.node_count, 2)
        self.assertEqual(simplified.edge_count, 1)
        merged = simplified.sorted_edges(1)[0]
        self.assertEqual(merged.to_node, 0)
        self.assertAlmostEqual(merged.length, 2.0)
        self.assertEqual(list(merged.geometry.coords), [(2.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0)])
        self.assertTrue(self.logger.messages("WARNING"))

    def test_self_loop_on_waypoint_does_not_break_chain(self):
        # 0 -> 1 -> 2, 통과 노드 1에 자기 루프 1 -> 1
        graph = RoadGraph(
            [
                {edge(1, [(0, 0), (1, 0)])},
                {edge(1, [(1, 0), (1, 1), (1, 0)]), edge(2, [(1, 0), (2, 0)])},
                set(),
            ]
        )
        report = self.simplifier.simplify(graph)
        simplified = report.graph
        self.assertEqual(simplified.node_count, 2)
        self.assertEqual(simplified.edge_count, 1)
        self.assertEqual(report.malformed_chain_count, 0)

        merged = simplified.sorted_edges(0)[0]
        self.assertEqual(merged.to_node, 1)
        self.assertAlmostEqual(merged.length, 2.0)
        self.assertEqual(list(merged.geometry.coords), [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0)])

    def test_revisited_waypoint_aborts_trace(self):
        graph = graph_from_positions([(0, 0), (1, 0), (0, 1)], [(0, 1), (1, 2), (2, 0)])
        traced = self.simplifier._trace_chain(graph, [WAYPOINT] * 3, 0, graph.sorted_edges(0)[0])
        self.assertIsNone(traced)
        self.assertTrue(any("순환" in m for m in self.logger.messages("WARNING")))

    def test_waypoint_only_ring_is_dropped_with_warning(self):
        graph = graph_from_positions([(0, 0), (1, 0), (0, 1)], [(0, 1), (1, 2), (2, 0)])
        report = self.simplifier.simplify(graph)
        self.assertTrue(report.graph.is_valid)
        self.assertEqual(report.graph.node_count, 0)
        self.assertEqual(report.unreached_waypoint_count, 3)
        self.assertTrue(any("통과 노드" in m for m in self.logger.messages("WARNING")))

    def test_isolated_node_survives(self):
        report = self.simplifier.simplify(RoadGraph([set()]))
        self.assertEqual(report.graph.node_count, 1)
        self.assertEqual(report.graph.edge_count, 0)

    def test_invalid_graph_gives_invalid_result(self):
        report = self.simplifier.simplify(RoadGraph.invalid("x"))
        self.assertFalse(report.graph.is_valid)
        self.assertTrue(self.logger.messages("ERROR"))


if __name__ == "__main__":
    unittest.main()
