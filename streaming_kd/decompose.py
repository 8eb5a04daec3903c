from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from . import config
from .errors import DecompositionError
from .layout import NodeId
from .node import InnerNode, Node
from .subtree import KdSubTree, SubtreeGroup, subtree_similarity
from .surfel import Surfel
from .tree import StreamingKdTree


def collect_subtree_nodes(nodes: Sequence[Node], root: NodeId, subtree_depth: int) -> Tuple[List[NodeId], List[NodeId]]:
    """
    Walks breadth-first from root for up to subtree_depth levels.
    Returns the visited nodes, root first, and the nodes of the next level,
    which did not fit and become the roots of other sub-trees.
    """
    claimed: List[NodeId] = []
    next_level: List[NodeId] = [root]
    depth = 0
    while depth < subtree_depth and next_level:
        current_level, next_level = next_level, []
        for node_id in current_level:
            claimed.append(node_id)
            node = nodes[node_id]
            if isinstance(node, InnerNode):
                next_level.append(node.left_child)
                next_level.append(node.right_child)
        depth += 1
    return claimed, next_level


def extract_subtrees(tree: StreamingKdTree, subtree_depth: int) -> List[KdSubTree]:
    """
    Cuts the unified tree into sub-trees of at most subtree_depth levels.
    Children that were cut off are marked external in their parent's sub-tree
    and referenced by their unified node id, which is the root id of their own sub-tree.
    """
    if subtree_depth < 1:
        raise DecompositionError(
            f"sub-tree depth must be at least 1, got {subtree_depth}")
    subtrees: List[KdSubTree] = []
    todo: List[NodeId] = [NodeId(0)]
    while todo:
        root = todo.pop()
        claimed, remaining = collect_subtree_nodes(
            tree.nodes, root, subtree_depth)
        todo.extend(remaining)
        subtree = KdSubTree.extract(
            bounds=tree.node_bounds[root],
            subtree_nodes=claimed,
            all_nodes=tree.nodes,
            prim_indices=tree.primitive_indices,
        )
        if config.VERIFY_SUBTREES:
            subtree.verify_self_contained()
            assert sorted(subtree.external_children()) == sorted(remaining), \
                f"sub-tree {root} external children do not match the cut off nodes {remaining}"
        subtrees.append(subtree)
    return subtrees


def group_subtrees(subtrees: List[KdSubTree], all_surfels: Sequence[Surfel], subtrees_per_group: int) -> List[SubtreeGroup]:
    """
    Batches sub-trees in the order they were discovered
    and deduplicates the surfels within each batch.
    """
    if subtrees_per_group < 1:
        raise DecompositionError(
            f"need at least one sub-tree per group, got {subtrees_per_group}")
    return [
        SubtreeGroup(subtrees[start:start + subtrees_per_group], all_surfels)
        for start in range(0, len(subtrees), subtrees_per_group)
    ]


@dataclass
class SimilarityStats:
    # per sub-tree, the average similarity to every other sub-tree
    averages: List[float]
    max_similarity: float


def similarity_stats(subtrees: Sequence[KdSubTree]) -> SimilarityStats:
    """
    Compares each sub-tree to every other one.
    This is a diagnostic only, the grouping does not use it (yet).
    Must be called before grouping.
    """
    averages: List[float] = []
    max_similarity = 0.0
    for i, a in enumerate(subtrees):
        total = 0.0
        for j, b in enumerate(subtrees):
            if i == j:
                continue
            sim = subtree_similarity(a, b)
            max_similarity = max(max_similarity, sim)
            total += sim
        others = len(subtrees) - 1
        averages.append(total / others if others > 0 else 0.0)
    return SimilarityStats(averages=averages, max_similarity=max_similarity)


def build_subtrees(tree: StreamingKdTree, subtree_depth: int, subtrees_per_group: Optional[int] = None) -> List[SubtreeGroup]:
    """
    Splits the tree into sub-trees of limited depth, grouped for storage.
    """
    subtrees = extract_subtrees(tree, subtree_depth)
    return group_subtrees(
        subtrees,
        tree.surfels,
        config.SUBTREES_PER_GROUP if subtrees_per_group is None else subtrees_per_group,
    )
