from .errors import BuildError, CapacityExceeded, DecompositionError, EmptyAggregationInput
from .geometry import AABB, Axis
from .layout import NodeId, PrimRef, SampleId
from .node import InnerNode, Leaf, Node, decode_node, decode_nodes, encode_node, encode_nodes
from .surfel import Surfel, compute_lod_surfel
from .tree import StreamingKdTree
from .subtree import KdSubTree, SubtreeGroup, subtree_similarity
from .decompose import build_subtrees, extract_subtrees, group_subtrees, similarity_stats
from .pipeline import StreamingIndex, build_streaming_index

__version__ = "0.1.0"
