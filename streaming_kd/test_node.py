import unittest
from .bitmath import ones
from .geometry import Axis
from . import layout
from .layout import NodeId, PrimRef, SampleId
from .node import InnerNode, Leaf, decode_node, decode_nodes, encode_node, encode_nodes


class TestLeafEncoding(unittest.TestCase):
    def test_roundtrip(self):
        for num_prims in [0, 1, 128, ones(layout.LEAF_COUNT_BITS)]:
            for offset in [0, 7, 1 << 20, ones(layout.OFFSET_BITS)]:
                leaf = Leaf(num_prims=num_prims, prim_offset=PrimRef(offset))
                encoded = encode_node(leaf)
                self.assertEqual(layout.NODE_SIZE, len(encoded))
                decoded = decode_node(encoded)
                self.assertIsInstance(decoded, Leaf)
                self.assertTrue(decoded.is_leaf)
                self.assertEqual(leaf, decoded)

    def test_count_overflow(self):
        with self.assertRaises(AssertionError):
            encode_node(Leaf(num_prims=ones(layout.LEAF_COUNT_BITS) + 1,
                             prim_offset=PrimRef(0)))


class TestInnerNodeEncoding(unittest.TestCase):
    def test_roundtrip(self):
        for axis in Axis:
            for split_pos in [0.0, 0.5, -3.25, 1024.0]:
                for left_external in [False, True]:
                    for right_external in [False, True]:
                        node = InnerNode(split_pos=split_pos,
                                         lod_index=SampleId(300 + axis.value), axis=axis)
                        node.set_left_child(
                            NodeId(ones(layout.LEFT_CHILD_BITS)), left_external)
                        node.set_right_child(
                            NodeId(12345), right_external)
                        decoded = decode_node(encode_node(node))
                        self.assertIsInstance(decoded, InnerNode)
                        self.assertFalse(decoded.is_leaf)
                        self.assertEqual(node, decoded)

    def test_children_start_local(self):
        node = InnerNode(split_pos=1.0, lod_index=SampleId(0), axis=Axis.Z)
        node.set_right_child(NodeId(9))
        self.assertEqual(((0, False), (9, False)), node.children)

    def test_axis_never_looks_like_leaf(self):
        # a zeroed inner node must not decode as a leaf
        for axis in Axis:
            decoded = decode_node(encode_node(
                InnerNode(split_pos=0.0, lod_index=SampleId(0), axis=axis)))
            self.assertEqual(axis, decoded.axis)

    def test_child_overflow(self):
        node = InnerNode(split_pos=0.0, lod_index=SampleId(0), axis=Axis.X)
        node.set_left_child(NodeId(ones(layout.LEFT_CHILD_BITS) + 1))
        with self.assertRaises(AssertionError):
            encode_node(node)


class TestNodeArrays(unittest.TestCase):
    def test_roundtrip(self):
        root = InnerNode(split_pos=0.25, lod_index=SampleId(3), axis=Axis.Y)
        root.set_left_child(NodeId(1))
        root.set_right_child(NodeId(2), external=True)
        nodes = [root, Leaf(num_prims=2, prim_offset=PrimRef(0))]
        data = encode_nodes(nodes)
        self.assertEqual(2 * layout.NODE_SIZE, len(data))
        self.assertEqual(nodes, decode_nodes(data))

    def test_truncated(self):
        with self.assertRaises(AssertionError):
            decode_nodes(b"\x00" * (layout.NODE_SIZE + 1))


if __name__ == "__main__":
    unittest.main()
