import math
import unittest

from shapely.geometry import LineString

from Service.graph_modules.core import Edge, RoadGraph
from support import edge, graph_from_positions


class EdgeEqualityTests(unittest.TestCase):
    def test_equality_ignores_geometry(self):
        a = Edge(to_node=1, length=2.0, geometry=LineString([(0, 0), (2, 0)]))
        b = Edge(to_node=1, length=2.0, geometry=LineString([(0, 0), (1, 1), (2, 0)]))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_different_length_or_target_are_distinct(self):
        line = LineString([(0, 0), (1, 0)])
        self.assertNotEqual(Edge(1, 1.0, line), Edge(1, 1.5, line))
        self.assertNotEqual(Edge(1, 1.0, line), Edge(2, 1.0, line))


class RoadGraphValidityTests(unittest.TestCase):
    def test_valid_graph_counts(self):
        graph = graph_from_positions([(0, 0), (1, 0), (1, 1)], [(0, 1), (1, 0), (1, 2)])
        self.assertTrue(graph.is_valid)
        self.assertEqual(graph.node_count, 3)
        self.assertEqual(graph.edge_count, 3)
        self.assertEqual(graph.summary(), "Graph with 3 nodes and 3 edges")

    def test_empty_graph_is_valid(self):
        graph = RoadGraph([])
        self.assertTrue(graph.is_valid)
        self.assertEqual(graph.node_count, 0)
        self.assertEqual(graph.edge_count, 0)

    def test_out_of_range_target_makes_graph_invalid(self):
        graph = RoadGraph([{edge(5, [(0, 0), (1, 0)])}, set()])
        self.assertFalse(graph.is_valid)
        self.assertEqual(graph.node_count, 0)
        self.assertEqual(graph.edge_count, 0)
        self.assertIn("5", graph.invalid_reason)

    def test_none_collection_is_invalid(self):
        graph = RoadGraph(None)
        self.assertFalse(graph.is_valid)
        self.assertTrue(graph.invalid_reason)

    def test_none_node_set_is_invalid(self):
        self.assertFalse(RoadGraph([set(), None]).is_valid)

    def test_negative_or_nan_length_is_invalid(self):
        line = LineString([(0, 0), (1, 0)])
        self.assertFalse(RoadGraph([{Edge(1, -1.0, line)}, set()]).is_valid)
        self.assertFalse(RoadGraph([{Edge(1, math.nan, line)}, set()]).is_valid)

    def test_non_edge_member_is_invalid(self):
        self.assertFalse(RoadGraph([{(1, 1.0)}, set()]).is_valid)

    def test_invalid_constructor_keeps_reason(self):
        graph = RoadGraph.invalid("broken")
        self.assertFalse(graph.is_valid)
        self.assertEqual(graph.invalid_reason, "broken")
        self.assertIn("Invalid", str(graph))


class RoadGraphDerivedViewTests(unittest.TestCase):
    def setUp(self):
        self.graph = graph_from_positions([(0, 0), (1, 0), (1, 1)], [(0, 1), (2, 1)])

    def test_incoming_lists_sources(self):
        incoming = self.graph.incoming()
        self.assertEqual(incoming[0], ())
        self.assertEqual(sorted(incoming[1]), [0, 2])
        self.assertEqual(incoming[2], ())

    def test_positions_come_from_edge_endpoints(self):
        self.assertEqual(self.graph.node_position(0), (0.0, 0.0, 0.0))
        # 출발 간선이 없는 노드는 유입 간선의 끝점
        self.assertEqual(self.graph.node_position(1), (1.0, 0.0, 0.0))
        self.assertEqual(self.graph.node_position(2), (1.0, 1.0, 0.0))
        self.assertIsNone(self.graph.node_position(3))

    def test_isolated_node_has_no_position(self):
        graph = RoadGraph([set()])
        self.assertIsNone(graph.node_position(0))

    def test_sorted_edges_are_ordered_by_target_then_length(self):
        graph = RoadGraph(
            [
                {edge(2, [(0, 0), (2, 0)]), edge(1, [(0, 0), (0, 3), (1, 0)]), edge(1, [(0, 0), (1, 0)])},
                set(),
                set(),
            ]
        )
        keys = [e.sort_key() for e in graph.sorted_edges(0)]
        self.assertEqual(keys, sorted(keys))
        self.assertEqual(keys[0], (1, 1.0))


if __name__ == "__main__":
    unittest.main()
