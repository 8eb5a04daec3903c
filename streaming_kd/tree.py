import math
from typing import Generator, List, Optional, Sequence, Tuple
from . import config
from .errors import BuildError, CapacityExceeded
from .geometry import AABB, Axis, BoundKind
from .layout import NodeId, PrimRef, SampleId
from .node import InnerNode, Leaf, Node
from .surfel import Surfel, compute_lod_surfel


def max_depth_for(num_surfels: int) -> int:
    """
    >>> max_depth_for(1), max_depth_for(1024)
    (8, 21)
    """
    return int(config.MAX_DEPTH_BASE + config.MAX_DEPTH_LOG_FACTOR * math.log2(num_surfels))


class BuildContext:
    """
    The arrays a unified tree build appends to, threaded through the recursion.

    Nodes are laid out depth-first: an inner node is directly followed by its left subtree,
    and its right subtree follows after the entire left subtree.
    """

    def __init__(self, surfels: List[Surfel], min_prims: int, max_depth: int) -> None:
        # the input surfels, followed by the generated LOD surfels
        self.surfels = surfels
        # bounds of the input surfels only
        self.bounds: List[AABB] = []
        self.nodes: List[Node] = []
        self.primitive_indices: List[SampleId] = []
        # only needed while building and decomposing
        self.node_bounds: List[AABB] = []
        self.min_prims = min_prims
        self.max_depth = max_depth
        # deepest level reached
        self.tree_depth = 0
        self.num_inner = 0

    def add_node(self, node: Node, bounds: AABB) -> NodeId:
        index = NodeId(len(self.nodes))
        self.nodes.append(node)
        self.node_bounds.append(bounds)
        return index

    def add_surfel(self, surfel: Surfel) -> SampleId:
        index = SampleId(len(self.surfels))
        self.surfels.append(surfel)
        return index


def choose_split(bounds: Sequence[AABB], contained: Sequence[SampleId]) -> Tuple[Axis, float]:
    """
    Splits along the longest axis of the primitive centroids,
    at the median centroid along that axis.
    """
    centroids = [bounds[p].center() for p in contained]
    centroid_bounds = AABB.empty()
    for c in centroids:
        centroid_bounds.extend_point(c)
    axis = centroid_bounds.longest_axis()
    centroids.sort(key=lambda c: c[axis.value])
    return axis, centroids[len(centroids) // 2][axis.value]


def partition(bounds: Sequence[AABB], contained: Sequence[SampleId], axis: Axis, split_pos: float) -> Tuple[List[SampleId], List[SampleId]]:
    """
    Sorts primitives into the children by overlap with either side of the split plane.
    Primitives straddling the plane go into both children.
    """
    left: List[SampleId] = []
    right: List[SampleId] = []
    for p in contained:
        if bounds[p].bound(axis, BoundKind.LOWER) <= split_pos:
            left.append(p)
        if bounds[p].bound(axis, BoundKind.UPPER) >= split_pos:
            right.append(p)
    return left, right


def lod_radius(node_bounds: AABB) -> float:
    half_extent = node_bounds.center() - node_bounds.min
    return max(half_extent) / 2


def build_tree(ctx: BuildContext, node_bounds: AABB, contained: List[SampleId], depth: int) -> NodeId:
    """
    Recursively builds the subtree containing the given primitives,
    returning the index of its root node.
    """
    ctx.tree_depth = max(ctx.tree_depth, depth)

    if depth >= ctx.max_depth or len(contained) <= ctx.min_prims:
        leaf = Leaf(num_prims=len(contained),
                    prim_offset=PrimRef(len(ctx.primitive_indices)))
        ctx.primitive_indices.extend(contained)
        return ctx.add_node(leaf, node_bounds)

    axis, split_pos = choose_split(ctx.bounds, contained)
    left_bounds = node_bounds.with_bound(axis, BoundKind.UPPER, split_pos)
    right_bounds = node_bounds.with_bound(axis, BoundKind.LOWER, split_pos)
    left_prims, right_prims = partition(ctx.bounds, contained, axis, split_pos)

    # LOD surfels go after the input surfels, so they never get mistaken for one
    lod = compute_lod_surfel(contained, ctx.surfels)
    lod.radius = lod_radius(node_bounds)
    inner = InnerNode(split_pos=split_pos,
                      lod_index=ctx.add_surfel(lod), axis=axis)
    ctx.num_inner += 1
    inner_idx = ctx.add_node(inner, node_bounds)

    left_child = build_tree(ctx, left_bounds, left_prims, depth + 1)
    assert left_child == inner_idx + 1, \
        f"left child of {inner_idx} landed at {left_child}"
    inner.set_left_child(left_child)
    # the right child's position is only known once the left subtree is done
    inner.set_right_child(build_tree(ctx, right_bounds, right_prims, depth + 1))
    return inner_idx


def verify_left_child_layout(nodes: Sequence[Node]) -> None:
    """
    Verifies that each local left child directly follows its parent.
    Raises an AssertionError otherwise.
    """
    for index, node in enumerate(nodes):
        if isinstance(node, InnerNode) and not node.left_external:
            assert node.left_child == index + 1, \
                f"node {index} has left child {node.left_child}, expected {index + 1}"


def verify_reachability(nodes: Sequence[Node]) -> None:
    """
    Verifies that by traversing from the root through local children, every node is visited.
    Raises an AssertionError otherwise.
    """
    reachable = [False] * len(nodes)
    todo = [0]
    while todo:
        index = todo.pop()
        assert 0 <= index < len(nodes), \
            f"child index {index} out of range {len(nodes)}"
        assert not reachable[index], f"node {index} reached twice"
        reachable[index] = True
        node = nodes[index]
        if isinstance(node, InnerNode):
            for child, external in node.children:
                if not external:
                    todo.append(child)
    unreachable = [i for i, r in enumerate(reachable) if not r]
    assert len(unreachable) == 0, \
        f'found {len(unreachable)} orphan node(s), first ten: {unreachable[:10]}'


class StreamingKdTree:
    """
    A median-split kd-tree over a set of surfels, for streaming LOD rendering.
    Every inner node carries a generated surfel representing its contents,
    so the tree can be cut into sub-trees that are loaded level by level.
    """

    def __init__(self, surfels: Sequence[Surfel], min_prims: Optional[int] = None, max_depth: Optional[int] = None) -> None:
        num_surfels = len(surfels)
        if num_surfels > config.MAX_SURFELS:
            raise CapacityExceeded(num_surfels, config.MAX_SURFELS)
        if num_surfels == 0:
            raise BuildError("no surfels to build a tree from")

        ctx = BuildContext(
            surfels=list(surfels),
            min_prims=config.MIN_PRIMS if min_prims is None else min_prims,
            max_depth=max_depth_for(
                num_surfels) if max_depth is None else max_depth,
        )
        tree_bounds = AABB.empty()
        for s in surfels:
            b = s.bounds
            ctx.bounds.append(b)
            tree_bounds.extend(b)

        root = build_tree(ctx, tree_bounds, [SampleId(i)
                          for i in range(num_surfels)], 0)
        assert root == 0

        self.num_input_surfels = num_surfels
        self.surfels = ctx.surfels
        self.bounds = ctx.bounds
        self.nodes = ctx.nodes
        self.primitive_indices = ctx.primitive_indices
        self.node_bounds = ctx.node_bounds
        self.min_prims = ctx.min_prims
        self.max_depth = ctx.max_depth
        self.tree_depth = ctx.tree_depth
        self.num_inner = ctx.num_inner
        self.tree_bounds = tree_bounds

        if config.VERIFY_TREE_LAYOUT:
            verify_left_child_layout(self.nodes)
            verify_reachability(self.nodes)

    @property
    def num_leafs(self) -> int:
        return len(self.nodes) - self.num_inner

    def leafs(self) -> Generator[Tuple[NodeId, Leaf], None, None]:
        for index, node in enumerate(self.nodes):
            if isinstance(node, Leaf):
                yield NodeId(index), node

    def leaf_primitives(self) -> Generator[SampleId, None, None]:
        """All primitive indices referenced by leafs, including duplicates."""
        for _, leaf in self.leafs():
            for ref in leaf.prim_range:
                yield self.primitive_indices[ref]

    def is_lod_surfel(self, index: SampleId) -> bool:
        return index >= self.num_input_surfels
