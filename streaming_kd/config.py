# unified tree construction

# leafs are created once a node contains at most this many primitives
MIN_PRIMS = 128
# max_depth = MAX_DEPTH_BASE + MAX_DEPTH_LOG_FACTOR * log2(number of surfels)
MAX_DEPTH_BASE = 8
MAX_DEPTH_LOG_FACTOR = 1.3
# node and primitive indices need to fit the packed node fields
MAX_SURFELS = 1 << 30

# Checks the depth-first node layout (left child directly follows its parent)
# and that every node is reachable from the root after each build.
VERIFY_TREE_LAYOUT = True

# sub-tree decomposition

DEFAULT_SUBTREE_DEPTH = 8
# number of consecutively discovered sub-trees sharing one deduplicated surfel array
SUBTREES_PER_GROUP = 4
# Checks that extracted sub-trees only reference their own arrays.
VERIFY_SUBTREES = True
# Compares every pair of sub-trees after decomposition and prints the result.
# Quadratic in the number of sub-trees, so only enable it for small inputs.
REPORT_SIMILARITY = False
