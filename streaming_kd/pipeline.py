from dataclasses import dataclass
import time
from typing import Callable, List, Optional, Sequence, Set, TypeVar
from . import config
from .decompose import extract_subtrees, group_subtrees, similarity_stats
from .errors import STAGE_BUILD, STAGE_EXTRACTION, STAGE_GROUPING, BuildError
from .subtree import KdSubTree, SubtreeGroup
from .surfel import Surfel
from .tree import StreamingKdTree


report_func = Callable[[Set[str], str], None]
# receives each finished sub-tree, whose surfels are the group's shared surfels
write_func = Callable[[KdSubTree], None]


def _no_report(level: Set[str], message: str) -> None:
    pass


T = TypeVar("T")


def _run_stage(stage: str, step: Callable[[], T]) -> T:
    before = time.monotonic_ns()
    try:
        result = step()
    except BuildError:
        raise
    except Exception as e:
        raise BuildError(f"{type(e).__name__}: {e}", stage=stage) from e
    duration_ns = time.monotonic_ns() - before
    print(f"{stage} took {duration_ns / 1_000_000_000}s")
    return result


@dataclass
class StreamingIndex:
    tree: StreamingKdTree
    groups: List[SubtreeGroup]

    @property
    def subtrees(self) -> List[KdSubTree]:
        return [subtree for group in self.groups for subtree in group]


def build_streaming_index(
        surfels: Sequence[Surfel],
        subtree_depth: int = config.DEFAULT_SUBTREE_DEPTH,
        subtrees_per_group: int = config.SUBTREES_PER_GROUP,
        min_prims: Optional[int] = None,
        report: report_func = _no_report,
        write: Optional[write_func] = None,
) -> StreamingIndex:
    """
    Builds the unified tree over all surfels, cuts it into sub-trees
    and groups those for storage. Any failure aborts the whole build.
    """
    print(f"building streaming kd-tree over {len(surfels)} surfels")
    tree = _run_stage(STAGE_BUILD, lambda: StreamingKdTree(
        surfels, min_prims=min_prims))
    print(
        f"depth {tree.tree_depth} (max {tree.max_depth}) with {tree.num_leafs} leafs and {tree.num_inner} inner nodes, "
        f"{len(tree.primitive_indices)} primitive references for {tree.num_input_surfels} surfels")

    print(f"{subtree_depth=}")
    subtrees = _run_stage(
        STAGE_EXTRACTION, lambda: extract_subtrees(tree, subtree_depth))
    print(f"extracted {len(subtrees)} sub-trees")
    if len(subtrees) == 1:
        report({'WARNING'},
               f"the tree of depth {tree.tree_depth} fits into a single sub-tree of depth {subtree_depth}")

    if config.REPORT_SIMILARITY:
        stats = similarity_stats(subtrees)
        for i, avg in enumerate(stats.averages):
            print(f"avg similarity for sub-tree {subtrees[i].root_id} = {avg}")
        print(f"max similarity: {stats.max_similarity}")

    groups = _run_stage(STAGE_GROUPING, lambda: group_subtrees(
        subtrees, tree.surfels, subtrees_per_group))
    num_group_surfels = sum(len(group.surfels) for group in groups)
    print(f"{len(groups)} groups store {num_group_surfels} surfels")

    if write is not None:
        for group in groups:
            for subtree in group:
                write(subtree)

    report({'INFO'},
           f"Built {len(subtrees)} sub-trees in {len(groups)} groups")
    return StreamingIndex(tree=tree, groups=groups)
