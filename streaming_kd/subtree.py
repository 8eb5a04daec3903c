from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence
from .geometry import AABB
from .layout import NodeId, PrimRef, SampleId
from .node import InnerNode, Leaf, Node
from .surfel import Surfel


@dataclass
class KdSubTree:
    # id of this sub-tree's root node in the unified tree, 0 for the root of all sub-trees.
    # External child references elsewhere point at this id.
    root_id: NodeId
    bounds: AABB
    # root first, laid out depth-first like the unified tree
    nodes: List[Node]
    # Until grouped, these and the LOD indices of inner nodes index the unified surfels.
    # Afterwards, they index the group's shared surfels.
    primitive_indices: List[SampleId]
    # the group's shared surfels, once grouped
    surfels: Optional[List[Surfel]] = None

    @staticmethod
    def extract(bounds: AABB, subtree_nodes: Sequence[NodeId], all_nodes: Sequence[Node], prim_indices: Sequence[SampleId]) -> "KdSubTree":
        """
        Copies the given nodes of the unified tree, subtree_nodes[0] being the root,
        into a tree with its own node and primitive index arrays.
        Children outside of subtree_nodes are marked external.
        The unified arrays are not modified.
        """
        assert len(subtree_nodes) > 0, "cannot extract an empty sub-tree"
        claimed = set(subtree_nodes)
        assert len(claimed) == len(subtree_nodes), \
            "duplicate node ids in sub-tree"
        nodes: List[Node] = []
        primitive_indices: List[SampleId] = []

        def rebuild(node_id: NodeId) -> NodeId:
            node = all_nodes[node_id]
            local_id = NodeId(len(nodes))
            if isinstance(node, Leaf):
                offset = PrimRef(len(primitive_indices))
                primitive_indices.extend(
                    prim_indices[ref] for ref in node.prim_range)
                nodes.append(Leaf(num_prims=node.num_prims, prim_offset=offset))
                return local_id

            copy = InnerNode(split_pos=node.split_pos,
                             lod_index=node.lod_index, axis=node.axis)
            nodes.append(copy)
            # rebuild left before right, so the left child stays in the next slot
            new_children = []
            for child, external in node.children:
                assert not external, \
                    f"node {node_id} of the unified tree has an external child"
                if child in claimed:
                    new_children.append((rebuild(child), False))
                else:
                    new_children.append((child, True))
            copy.set_left_child(*new_children[0])
            copy.set_right_child(*new_children[1])
            return local_id

        rebuild(subtree_nodes[0])
        assert len(nodes) == len(claimed), \
            f"only {len(nodes)} of {len(claimed)} sub-tree nodes are reachable from root {subtree_nodes[0]}"
        return KdSubTree(
            root_id=subtree_nodes[0],
            bounds=bounds,
            nodes=nodes,
            primitive_indices=primitive_indices,
        )

    def external_children(self) -> Iterator[NodeId]:
        """Root ids of the sub-trees referenced by this one."""
        for node in self.nodes:
            if isinstance(node, InnerNode):
                for child, external in node.children:
                    if external:
                        yield child

    def verify_self_contained(self) -> None:
        """
        Verifies that every local reference stays within this sub-tree's arrays.
        Raises an AssertionError otherwise.
        """
        for index, node in enumerate(self.nodes):
            if isinstance(node, Leaf):
                assert node.prim_offset + node.num_prims <= len(self.primitive_indices), \
                    f"sub-tree {self.root_id} node {index} primitives {node.prim_range} exceed {len(self.primitive_indices)}"
            else:
                for child, external in node.children:
                    if not external:
                        assert index < child < len(self.nodes), \
                            f"sub-tree {self.root_id} node {index} child {child} out of range {len(self.nodes)}"
        if self.surfels is not None:
            for index in self.primitive_indices:
                assert index < len(self.surfels), \
                    f"sub-tree {self.root_id} surfel {index} out of range {len(self.surfels)}"


class SubtreeGroup:
    """
    Sub-trees sharing one surfel array.
    Surfels referenced by several leafs of the group get stored only once.
    """

    def __init__(self, subtrees: List[KdSubTree], all_surfels: Sequence[Surfel]) -> None:
        self.subtrees = subtrees
        self.surfels: List[Surfel] = []
        # unified surfel index -> index in self.surfels
        surfel_indices: Dict[SampleId, SampleId] = {}
        for tree in self.subtrees:
            assert tree.surfels is None, f"sub-tree {tree.root_id} is already grouped"
            for node in tree.nodes:
                if isinstance(node, InnerNode):
                    # every inner node has its own generated LOD surfel, nothing to share
                    node.lod_index = self._append(all_surfels[node.lod_index])
                    continue
                for ref in node.prim_range:
                    s_idx = tree.primitive_indices[ref]
                    try:
                        new_idx = surfel_indices[s_idx]
                    except KeyError:
                        new_idx = self._append(all_surfels[s_idx])
                        surfel_indices[s_idx] = new_idx
                    tree.primitive_indices[ref] = new_idx
            tree.surfels = self.surfels

    def _append(self, surfel: Surfel) -> SampleId:
        idx = SampleId(len(self.surfels))
        self.surfels.append(surfel.copy())
        return idx

    def __len__(self) -> int:
        return len(self.subtrees)

    def __iter__(self) -> Iterator[KdSubTree]:
        return iter(self.subtrees)


def subtree_similarity(a: KdSubTree, b: KdSubTree) -> float:
    """
    The average number of occurrences of each surfel referenced by either sub-tree.
    1 means the sub-trees share no surfels, higher values mean more sharing.
    Only meaningful before grouping, while both index the unified surfels.

    Two sub-trees without any primitives have a similarity of 0.
    """
    shared_surfels = Counter(a.primitive_indices)
    shared_surfels.update(b.primitive_indices)
    if len(shared_surfels) == 0:
        return 0.0
    return sum(shared_surfels.values()) / len(shared_surfels)
