from typing import NewType

# Streaming kd-tree node encoding.
# Every node is 16 bytes: split position, offset, right word, tag word.
NODE_SIZE = 16
NODE_FORMAT = "<fIII"

AXIS_BITS = 2
LEAF_AXIS = 3  # normal axes are 0-2, 3 means leaf

# leaf tag word
# 30b primitive count, 2b axis (=3)
LEAF_COUNT_OFS = AXIS_BITS
LEAF_COUNT_BITS = 32 - AXIS_BITS  # 30

# interior tag word
# 29b left child, 1b left external, 2b axis
LEFT_EXTERNAL_BIT = AXIS_BITS
LEFT_CHILD_OFS = AXIS_BITS + 1
LEFT_CHILD_BITS = 32 - LEFT_CHILD_OFS  # 29

# interior right word
# 31b right child, 1b right external
RIGHT_EXTERNAL_BIT = 0
RIGHT_CHILD_OFS = 1
RIGHT_CHILD_BITS = 32 - RIGHT_CHILD_OFS  # 31

# leaf primitive offsets and interior LOD sample indices use the whole offset word
OFFSET_BITS = 32


# index into a node array
NodeId = NewType("NodeId", int)
# index into a surfel array
SampleId = NewType("SampleId", int)
# index into a primitive index array
PrimRef = NewType("PrimRef", int)
