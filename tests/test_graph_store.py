import json
import tempfile
import unittest
from pathlib import Path

from shapely.geometry import LineString

from Service.graph_modules.core import GraphBuilder, RoadGraph
from Service.graph_modules.store import GraphStore
from Service.schemas import GraphStoreLoadRequest, GraphStoreSaveRequest
from support import RecordingLogger


def _complete_triangle():
    segments = [
        LineString([(0, 0, 0), (4, 0, 0)]),
        LineString([(4, 0, 0), (2, 3, 1.5)]),
        LineString([(2, 3, 1.5), (1, 1, 0), (0, 0, 0)]),
    ]
    return GraphBuilder(RecordingLogger()).build(segments, bidirectional=True, precision=3).graph


def _adjacency(graph):
    return [
        [(e.to_node, e.length, tuple(e.geometry.coords)) for e in graph.sorted_edges(n)]
        for n in range(graph.node_count)
    ]


class GraphStoreRoundTripTests(unittest.TestCase):
    def setUp(self):
        self.logger = RecordingLogger()
        self.store = GraphStore(self.logger)

    def _round_trip(self, graph):
        restored = self.store.from_record(json.loads(json.dumps(self.store.to_record(graph))))
        self.assertTrue(restored.is_valid, restored.invalid_reason)
        self.assertEqual(restored.node_count, graph.node_count)
        self.assertEqual(restored.edge_count, graph.edge_count)
        self.assertEqual(_adjacency(restored), _adjacency(graph))

    def test_empty_graph(self):
        self._round_trip(RoadGraph([]))

    def test_single_isolated_node(self):
        self._round_trip(RoadGraph([set()]))

    def test_fully_connected_graph(self):
        graph = _complete_triangle()
        self.assertEqual(graph.edge_count, 6)
        self._round_trip(graph)

    def test_record_keys(self):
        record = self.store.to_record(_complete_triangle())
        self.assertEqual(record["NodeCount"], 3)
        self.assertEqual(record["EdgeCount"], 6)
        self.assertEqual(record["Node_0_EdgeCount"], 2)
        self.assertIn("Node_0_Edge_1_ToNodeIdx", record)
        self.assertIn("Node_0_Edge_1_Length", record)
        self.assertEqual(len(record["Node_0_Edge_0_Geometry"][0]), 3)

    def test_file_round_trip(self):
        graph = _complete_triangle()
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "graph.json"
            saved = self.store.save(graph, GraphStoreSaveRequest(output_path=path))
            self.assertTrue(saved.exists())
            restored = self.store.load(GraphStoreLoadRequest(file_path=path))
        self.assertEqual(_adjacency(restored), _adjacency(graph))

    def test_invalid_graph_cannot_be_recorded(self):
        with self.assertRaises(ValueError):
            self.store.to_record(RoadGraph.invalid("x"))


class GraphStoreCorruptionTests(unittest.TestCase):
    def setUp(self):
        self.logger = RecordingLogger()
        self.store = GraphStore(self.logger)
        self.record = self.store.to_record(_complete_triangle())

    def _assert_corrupt(self, record):
        graph = self.store.from_record(record)
        self.assertFalse(graph.is_valid)
        self.assertEqual(graph.node_count, 0)
        self.assertTrue(graph.invalid_reason)

    def _mutated(self, **changes):
        record = dict(self.record)
        record.update(changes)
        return record

    def test_not_a_mapping(self):
        self._assert_corrupt([1, 2, 3])
        self._assert_corrupt(None)

    def test_missing_node_count(self):
        record = dict(self.record)
        del record["NodeCount"]
        self._assert_corrupt(record)

    def test_missing_edge_key(self):
        record = dict(self.record)
        del record["Node_1_Edge_0_Length"]
        self._assert_corrupt(record)

    def test_negative_count(self):
        self._assert_corrupt(self._mutated(Node_0_EdgeCount=-1))

    def test_out_of_range_target(self):
        self._assert_corrupt(self._mutated(Node_0_Edge_0_ToNodeIdx=7))

    def test_negative_length(self):
        self._assert_corrupt(self._mutated(Node_2_Edge_1_Length=-0.5))

    def test_bad_geometry(self):
        self._assert_corrupt(self._mutated(Node_0_Edge_0_Geometry=[[0, 0, 0]]))
        self._assert_corrupt(self._mutated(Node_0_Edge_0_Geometry=[["a", 0], [1, 1]]))

    def test_edge_count_mismatch(self):
        self._assert_corrupt(self._mutated(EdgeCount=5))

    def test_corruption_is_logged(self):
        self.store.from_record({})
        self.assertTrue(self.logger.messages("ERROR"))

    def test_unreadable_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.json"
            path.write_text("{not json", encoding="utf-8")
            graph = self.store.load(GraphStoreLoadRequest(file_path=path))
        self.assertFalse(graph.is_valid)


if __name__ == "__main__":
    unittest.main()
