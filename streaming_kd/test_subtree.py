import unittest
from typing import List
from mathutils import Vector
from .geometry import AABB, Axis
from .layout import NodeId, PrimRef, SampleId
from .node import InnerNode, Leaf, Node, encode_nodes
from .subtree import KdSubTree, SubtreeGroup, subtree_similarity
from .surfel import Surfel


def make_inner(lod_index: int, left: int, right: int) -> InnerNode:
    node = InnerNode(split_pos=0.5, lod_index=SampleId(lod_index), axis=Axis.X)
    node.set_left_child(NodeId(left))
    node.set_right_child(NodeId(right))
    return node


def make_nodes() -> List[Node]:
    """
          0
        1   4
       2 3
    """
    return [
        make_inner(10, 1, 4),
        make_inner(11, 2, 3),
        Leaf(num_prims=2, prim_offset=PrimRef(0)),
        Leaf(num_prims=1, prim_offset=PrimRef(2)),
        Leaf(num_prims=2, prim_offset=PrimRef(3)),
    ]


PRIM_INDICES = [SampleId(i) for i in [5, 6, 7, 6, 8]]


def make_surfels() -> List[Surfel]:
    return [Surfel(Vector((i, 0, 0)), Vector((0, 0, 1)), Vector((1, 1, 1)), 0.1) for i in range(12)]


def unit_box() -> AABB:
    return AABB(Vector((0, 0, 0)), Vector((1, 1, 1)))


class TestExtract(unittest.TestCase):
    def setUp(self):
        self.nodes = make_nodes()
        self.top = KdSubTree.extract(unit_box(), [NodeId(0), NodeId(1), NodeId(4)],
                                     self.nodes, PRIM_INDICES)

    def test_nodes(self):
        self.assertEqual(0, self.top.root_id)
        self.assertEqual(3, len(self.top.nodes))
        root, inner, leaf = self.top.nodes
        self.assertEqual(((1, False), (2, False)), root.children)
        # the leafs below node 1 were not claimed
        self.assertEqual(((2, True), (3, True)), inner.children)
        self.assertEqual(Leaf(num_prims=2, prim_offset=PrimRef(0)), leaf)
        self.assertEqual([2, 3], sorted(self.top.external_children()))

    def test_own_primitive_indices(self):
        self.assertEqual([6, 8], self.top.primitive_indices)
        self.top.verify_self_contained()

    def test_lod_indices_still_unified(self):
        self.assertEqual(10, self.top.nodes[0].lod_index)
        self.assertEqual(11, self.top.nodes[1].lod_index)

    def test_unified_untouched(self):
        self.assertEqual(encode_nodes(make_nodes()), encode_nodes(self.nodes))
        self.assertEqual([5, 6, 7, 6, 8], PRIM_INDICES)

    def test_leaf_subtree(self):
        subtree = KdSubTree.extract(unit_box(), [NodeId(3)], self.nodes, PRIM_INDICES)
        self.assertEqual(3, subtree.root_id)
        self.assertEqual([Leaf(num_prims=1, prim_offset=PrimRef(0))], subtree.nodes)
        self.assertEqual([7], subtree.primitive_indices)

    def test_left_child_stays_next(self):
        # given in breadth-first order, rebuilt depth-first
        subtree = KdSubTree.extract(unit_box(), [NodeId(i) for i in [0, 1, 4, 2, 3]],
                                    self.nodes, PRIM_INDICES)
        self.assertEqual(5, len(subtree.nodes))
        self.assertEqual([], list(subtree.external_children()))
        self.assertEqual(1, subtree.nodes[0].left_child)
        self.assertEqual(4, subtree.nodes[0].right_child)
        self.assertEqual(((2, False), (3, False)), subtree.nodes[1].children)
        self.assertEqual(PRIM_INDICES, subtree.primitive_indices)

    def test_disconnected(self):
        with self.assertRaises(AssertionError):
            KdSubTree.extract(unit_box(), [NodeId(0), NodeId(2)], self.nodes, PRIM_INDICES)


class TestGroup(unittest.TestCase):
    def setUp(self):
        self.nodes = make_nodes()
        self.surfels = make_surfels()
        self.top = KdSubTree.extract(unit_box(), [NodeId(0), NodeId(1), NodeId(4)],
                                     self.nodes, PRIM_INDICES)
        self.left = KdSubTree.extract(unit_box(), [NodeId(2)], self.nodes, PRIM_INDICES)
        self.group = SubtreeGroup([self.top, self.left], self.surfels)

    def test_shared_surfels_stored_once(self):
        # two LOD surfels, plus 6 and 8 from the top, plus 5 from the left; 6 is shared
        self.assertEqual(5, len(self.group.surfels))
        positions = [s.position[0] for s in self.group.surfels]
        self.assertEqual([10, 11, 6, 8, 5], positions)

    def test_remapped(self):
        self.assertEqual([2, 3], self.top.primitive_indices)
        self.assertEqual([4, 2], self.left.primitive_indices)
        # both point at the same slot for surfel 6
        self.assertEqual(self.top.primitive_indices[0], self.left.primitive_indices[1])

    def test_lod_surfels_copied(self):
        self.assertEqual(0, self.top.nodes[0].lod_index)
        self.assertEqual(1, self.top.nodes[1].lod_index)

    def test_subtrees_share_group_surfels(self):
        for subtree in self.group:
            self.assertIs(self.group.surfels, subtree.surfels)
            subtree.verify_self_contained()

    def test_unified_untouched(self):
        self.assertEqual(encode_nodes(make_nodes()), encode_nodes(self.nodes))
        self.assertEqual(12, len(self.surfels))

    def test_lod_surfels_never_shared(self):
        # the same LOD surfel referenced twice still gets two copies
        first = KdSubTree.extract(unit_box(), [NodeId(1)], make_nodes(), PRIM_INDICES)
        second = KdSubTree.extract(unit_box(), [NodeId(1)], make_nodes(), PRIM_INDICES)
        group = SubtreeGroup([first, second], self.surfels)
        self.assertEqual(2, len(group.surfels))
        self.assertEqual(0, first.nodes[0].lod_index)
        self.assertEqual(1, second.nodes[0].lod_index)

    def test_regroup(self):
        with self.assertRaises(AssertionError):
            SubtreeGroup([self.top], self.surfels)


class TestSimilarity(unittest.TestCase):
    def setUp(self):
        nodes = make_nodes()
        self.right = KdSubTree.extract(unit_box(), [NodeId(4)], nodes, PRIM_INDICES)
        self.left = KdSubTree.extract(unit_box(), [NodeId(2)], nodes, PRIM_INDICES)
        self.middle = KdSubTree.extract(unit_box(), [NodeId(3)], nodes, PRIM_INDICES)

    def test_disjoint(self):
        self.assertEqual(1.0, subtree_similarity(self.right, self.middle))

    def test_shared(self):
        # 6 twice, 5 and 8 once
        self.assertAlmostEqual(4 / 3, subtree_similarity(self.right, self.left))

    def test_symmetric(self):
        self.assertEqual(subtree_similarity(self.left, self.right),
                         subtree_similarity(self.right, self.left))

    def test_no_primitives(self):
        empty = KdSubTree(root_id=NodeId(0), bounds=unit_box(), nodes=[], primitive_indices=[])
        self.assertEqual(0.0, subtree_similarity(empty, empty))


if __name__ == "__main__":
    unittest.main()
