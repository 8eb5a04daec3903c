from dataclasses import dataclass
import struct
from typing import Iterable, List, Tuple, Union
from .bitmath import get_bits, get_flag, ones, put_bits, put_flag
from .geometry import Axis
from . import layout
from .layout import NodeId, PrimRef, SampleId


@dataclass
class Leaf:
    num_prims: int
    # offset of the first of num_prims entries in the primitive index array
    prim_offset: PrimRef

    @property
    def is_leaf(self) -> bool:
        return True

    @property
    def prim_range(self) -> range:
        return range(self.prim_offset, self.prim_offset + self.num_prims)


@dataclass
class InnerNode:
    split_pos: float
    # the surfel representing everything below this node
    lod_index: SampleId
    axis: Axis

    # Children are local indices into the same node array,
    # unless flagged as external, in which case they are the id of the node
    # in the unified tree, which is also the root id of the sub-tree containing it.
    left_child: NodeId = NodeId(0)
    right_child: NodeId = NodeId(0)
    left_external: bool = False
    right_external: bool = False

    @property
    def is_leaf(self) -> bool:
        return False

    def set_left_child(self, index: NodeId, external: bool = False) -> None:
        self.left_child = index
        self.left_external = external

    def set_right_child(self, index: NodeId, external: bool = False) -> None:
        self.right_child = index
        self.right_external = external

    @property
    def children(self) -> Tuple[Tuple[NodeId, bool], Tuple[NodeId, bool]]:
        """(index, external) of the left and the right child"""
        return (self.left_child, self.left_external), (self.right_child, self.right_external)


Node = Union[Leaf, InnerNode]


def encode_leaf(leaf: Leaf) -> bytes:
    assert 0 <= leaf.num_prims <= ones(layout.LEAF_COUNT_BITS), \
        f"leaf with {leaf.num_prims} primitives exceeds {layout.LEAF_COUNT_BITS} bits"
    assert 0 <= leaf.prim_offset <= ones(layout.OFFSET_BITS), \
        f"primitive offset {leaf.prim_offset} exceeds {layout.OFFSET_BITS} bits"
    tag = put_bits(0, 0, layout.AXIS_BITS, layout.LEAF_AXIS)
    tag = put_bits(tag, layout.LEAF_COUNT_OFS,
                   layout.LEAF_COUNT_BITS, leaf.num_prims)
    return struct.pack(layout.NODE_FORMAT, 0.0, leaf.prim_offset, 0, tag)


def encode_inner_node(node: InnerNode) -> bytes:
    assert node.axis.value != layout.LEAF_AXIS
    assert 0 <= node.lod_index <= ones(layout.OFFSET_BITS), \
        f"LOD surfel index {node.lod_index} exceeds {layout.OFFSET_BITS} bits"
    assert 0 <= node.left_child <= ones(layout.LEFT_CHILD_BITS), \
        f"left child {node.left_child} exceeds {layout.LEFT_CHILD_BITS} bits"
    assert 0 <= node.right_child <= ones(layout.RIGHT_CHILD_BITS), \
        f"right child {node.right_child} exceeds {layout.RIGHT_CHILD_BITS} bits"

    tag = put_bits(0, 0, layout.AXIS_BITS, node.axis.value)
    tag = put_flag(tag, layout.LEFT_EXTERNAL_BIT, node.left_external)
    tag = put_bits(tag, layout.LEFT_CHILD_OFS,
                   layout.LEFT_CHILD_BITS, node.left_child)

    right = put_flag(0, layout.RIGHT_EXTERNAL_BIT, node.right_external)
    right = put_bits(right, layout.RIGHT_CHILD_OFS,
                     layout.RIGHT_CHILD_BITS, node.right_child)
    return struct.pack(layout.NODE_FORMAT, node.split_pos, node.lod_index, right, tag)


def encode_node(node: Node) -> bytes:
    if isinstance(node, InnerNode):
        encoded = encode_inner_node(node)
    else:
        assert isinstance(node, Leaf)
        encoded = encode_leaf(node)
    assert len(encoded) == layout.NODE_SIZE, \
        f"Node size {len(encoded)} unexpected, want {layout.NODE_SIZE}"
    return encoded


def decode_node(data: bytes) -> Node:
    assert len(data) == layout.NODE_SIZE, \
        f"expected {layout.NODE_SIZE} bytes, not {len(data)}"
    split_pos, offset, right, tag = struct.unpack(layout.NODE_FORMAT, data)
    axis = get_bits(tag, 0, layout.AXIS_BITS)
    if axis == layout.LEAF_AXIS:
        return Leaf(
            num_prims=get_bits(tag, layout.LEAF_COUNT_OFS,
                               layout.LEAF_COUNT_BITS),
            prim_offset=PrimRef(offset),
        )
    return InnerNode(
        split_pos=split_pos,
        lod_index=SampleId(offset),
        axis=Axis(axis),
        left_child=NodeId(get_bits(tag, layout.LEFT_CHILD_OFS,
                                   layout.LEFT_CHILD_BITS)),
        right_child=NodeId(get_bits(right, layout.RIGHT_CHILD_OFS,
                                    layout.RIGHT_CHILD_BITS)),
        left_external=get_flag(tag, layout.LEFT_EXTERNAL_BIT),
        right_external=get_flag(right, layout.RIGHT_EXTERNAL_BIT),
    )


def encode_nodes(nodes: Iterable[Node]) -> bytes:
    encoded = bytearray()
    for node in nodes:
        encoded.extend(encode_node(node))
    return bytes(encoded)


def decode_nodes(data: bytes) -> List[Node]:
    assert len(data) % layout.NODE_SIZE == 0, \
        f"node data length {len(data)} is not a multiple of {layout.NODE_SIZE}"
    return [decode_node(data[ofs:ofs + layout.NODE_SIZE])
            for ofs in range(0, len(data), layout.NODE_SIZE)]
