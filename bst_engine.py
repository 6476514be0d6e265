#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer  v1.0  —  TREE ENGINE                ║
║                                                                  ║
║  Pure logic, no GUI code.  Holds the tree node type, the         ║
║  annotated BST algorithms and the snapshot history that the      ║
║  playback controller walks through.                              ║
║                                                                  ║
║  Architecture                                                    ║
║  ────────────                                                    ║
║  ┌─────────────┐  append()   ┌──────────────┐  cursor   ┌─────┐  ║
║  │ BSTAnimated │ ──────────► │   History    │ ────────► │ UI  │  ║
║  └─────────────┘             └──────────────┘           └─────┘  ║
║        │ mutates in place          │ holds                       ║
║        ▼                           ▼                             ║
║      Node (live tree)        Snapshot(tree, status, sequence)    ║
║                                                                  ║
║  Every snapshot owns a deep copy of the tree, so later           ║
║  mutations of the live tree never leak into recorded history.    ║
╚══════════════════════════════════════════════════════════════════╝
"""

import enum
import logging
from typing import NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════
#  STATUS MESSAGES
#
#  One template per semantically distinct moment.  Kept together
#  so the presentation layer and the tests agree on the wording.
# ═════════════════════════════════════════════════════════════════
MSG_ROOT_CREATED     = "Created root node {key}"
MSG_COMPARE          = "Compare {key} with {node}"
MSG_INSERT_LEFT      = "Insert {key} on the left of {node}"
MSG_INSERT_RIGHT     = "Insert {key} on the right of {node}"
MSG_COMPLETE         = "Operation complete"
MSG_NOT_FOUND        = "Key {key} not found"
MSG_SEARCHING        = "Searching for {key}, currently at {node}"
MSG_FOUND            = "Found target {key}"
MSG_SUCCESSOR_SEARCH = "Searching for in-order successor..."
MSG_SUCCESSOR_COPY   = "Replace target with successor {key}"
MSG_VISIT            = "{order}: visit {key}"
MSG_RECORDED         = "{key} recorded"


class TraversalOrder(enum.Enum):
    """Depth-first visiting orders offered by the traversal buttons."""
    PREORDER  = "preorder"
    INORDER   = "inorder"
    POSTORDER = "postorder"

    @property
    def label(self):
        return self.value.capitalize()


# ═════════════════════════════════════════════════════════════════
#  NODE
#
#  Minimal node for the BST.  Uses __slots__ like every other
#  hot-path structure in the app.  Fields:
#    key           : ordered scalar
#    left / right  : exclusively owned children (or None)
#    x / y         : layout position (owned by the presentation)
#    is_current    : node being visited / deleted right now
#    is_searching  : node being compared during a descent
#    visited       : node already recorded by a traversal
# ═════════════════════════════════════════════════════════════════
class Node:
    """
    A single node of the binary search tree.

    The three flags are independent in storage; renderers give
    ``is_current`` priority over ``is_searching`` over ``visited``.
    """
    __slots__ = ('key', 'left', 'right', 'x', 'y',
                 'is_current', 'is_searching', 'visited')

    def __init__(self, key):
        self.key          = key
        self.left         = None
        self.right        = None
        self.x            = 0.0
        self.y            = 0.0
        self.is_current   = False
        self.is_searching = False
        self.visited      = False

    def __repr__(self):
        return f"Node({self.key!r})"


def clone_tree(node):
    """
    Structural deep copy of the subtree rooted at ``node``.

    Copies key, flags and position into brand-new nodes; the result
    shares no references with the source.

    Args:
        node (Node|None): Subtree root.

    Returns:
        Node|None: Independent copy (None for an empty tree).
    """
    if node is None:
        return None
    copy = Node(node.key)
    copy.x            = node.x
    copy.y            = node.y
    copy.is_current   = node.is_current
    copy.is_searching = node.is_searching
    copy.visited      = node.visited
    copy.left         = clone_tree(node.left)
    copy.right        = clone_tree(node.right)
    return copy


def clear_annotations(node):
    """Reset the current / searching / visited flags on every reachable node."""
    if node is None:
        return
    node.is_current   = False
    node.is_searching = False
    node.visited      = False
    clear_annotations(node.left)
    clear_annotations(node.right)


def build_balanced(keys, lo=0, hi=None):
    """
    Build a height-balanced tree from a sorted, duplicate-free sequence.

    The middle element of each sub-range becomes the subtree root;
    even-length ranges take the lower middle (floored midpoint).

    Args:
        keys (Sequence): Sorted unique keys.
        lo, hi (int)   : Inclusive index range (defaults to all keys).

    Returns:
        Node|None: Root of the new tree.
    """
    if hi is None:
        hi = len(keys) - 1
    if lo > hi:
        return None
    mid = (lo + hi) // 2
    node = Node(keys[mid])
    node.left  = build_balanced(keys, lo, mid - 1)
    node.right = build_balanced(keys, mid + 1, hi)
    return node


# ═════════════════════════════════════════════════════════════════
#  TREE UTILITY FUNCTIONS
#
#  Read-only walks over live nodes or snapshot copies.  Used for:
#    • Traversal ordering (engine)
#    • Stats panel (height, node count, validity)
#    • Layout computation for canvas drawing
# ═════════════════════════════════════════════════════════════════

def preorder_nodes(node, out=None):
    """Nodes in root-left-right order."""
    if out is None:
        out = []
    if node is not None:
        out.append(node)
        preorder_nodes(node.left, out)
        preorder_nodes(node.right, out)
    return out


def inorder_nodes(node, out=None):
    """Nodes in left-root-right order (ascending keys)."""
    if out is None:
        out = []
    if node is not None:
        inorder_nodes(node.left, out)
        out.append(node)
        inorder_nodes(node.right, out)
    return out


def postorder_nodes(node, out=None):
    """Nodes in left-right-root order."""
    if out is None:
        out = []
    if node is not None:
        postorder_nodes(node.left, out)
        postorder_nodes(node.right, out)
        out.append(node)
    return out


_ORDER_WALKS = {
    TraversalOrder.PREORDER:  preorder_nodes,
    TraversalOrder.INORDER:   inorder_nodes,
    TraversalOrder.POSTORDER: postorder_nodes,
}


def collect_keys(node):
    """In-order list of keys (sorted for a valid BST)."""
    return [n.key for n in inorder_nodes(node)]


def count_nodes(node):
    if node is None:
        return 0
    return 1 + count_nodes(node.left) + count_nodes(node.right)


def tree_height(node):
    """
    Height of the tree counted in levels.

    Returns:
        int: 0 for an empty tree, 1 for a single node.
    """
    if node is None:
        return 0
    return 1 + max(tree_height(node.left), tree_height(node.right))


def validate_bst(node, lo=None, hi=None):
    """
    Check the strict ordering invariant.

    Every key in a left subtree must be smaller than its ancestor
    and every key in a right subtree larger.  Equal keys fail.

    Args:
        node   (Node|None): Subtree root.
        lo, hi (scalar)   : Exclusive bounds inherited from ancestors.

    Returns:
        bool: True when the subtree is a valid BST.
    """
    if node is None:
        return True
    if lo is not None and not node.key > lo:
        return False
    if hi is not None and not node.key < hi:
        return False
    return (validate_bst(node.left, lo, node.key)
            and validate_bst(node.right, node.key, hi))


def tree_stats(tree, live_root):
    """
    Values for the stats panel.

    Node count and height describe the displayed (snapshot) tree.
    Validity is checked on the live tree, which is never caught
    half-way through a successor splice.

    Returns:
        dict: ``nodes``, ``height`` and ``valid``.
    """
    return {"nodes":  count_nodes(tree),
            "height": tree_height(tree),
            "valid":  validate_bst(live_root)}


def layout_tree(node, width, level_height=70, top=60):
    """
    Assign pixel positions to every node of a tree.

    Each node sits at the midpoint of its horizontal range; its
    children split that range at the node's own x.  The root lives
    on level 1, so ``y = level * level_height + top``.

    Args:
        node         (Node|None): Tree root (modified in place).
        width        (float)    : Drawing width in pixels.
        level_height (float)    : Vertical distance between levels.
        top          (float)    : Extra offset added to every level.
    """
    def _assign(n, level, lo, hi):
        if n is None:
            return
        n.x = (lo + hi) / 2
        n.y = level * level_height + top
        _assign(n.left,  level + 1, lo, n.x)
        _assign(n.right, level + 1, n.x, hi)
    _assign(node, 1, 0, width)


# ═════════════════════════════════════════════════════════════════
#  SNAPSHOT STORE
#
#  History is append-only while one operation runs and is cleared
#  wholesale before the next.  Each entry owns a private copy of
#  the tree and of the traversal sequence.
# ═════════════════════════════════════════════════════════════════
class Snapshot(NamedTuple):
    """Immutable recorded moment: tree copy, status text, keys visited so far."""
    tree: Optional[Node]
    status: str
    sequence: Tuple


class History:
    """
    Ordered snapshot store for one operation.

    Attributes:
        layout (callable|None): Hook run on the live tree right before
                                it is cloned, so every snapshot carries
                                fresh positions.  Receives the root.
    """

    def __init__(self, layout=None):
        self.layout     = layout
        self._snapshots = []

    def append(self, tree, status, sequence=()):
        """
        Record one snapshot.

        The tree and the sequence are copied at call time; mutating
        either afterwards does not touch the stored entry.

        Args:
            tree     (Node|None): Live tree root.
            status   (str)      : Human-readable message.
            sequence (iterable) : Keys visited so far.
        """
        if self.layout is not None and tree is not None:
            self.layout(tree)
        self._snapshots.append(
            Snapshot(clone_tree(tree), status, tuple(sequence)))

    def clear(self):
        """Drop every snapshot (called before each new user operation)."""
        self._snapshots = []

    @property
    def last(self):
        return self._snapshots[-1] if self._snapshots else None

    def statuses(self):
        return [s.status for s in self._snapshots]

    def __len__(self):
        return len(self._snapshots)

    def __getitem__(self, index):
        return self._snapshots[index]

    def __iter__(self):
        return iter(self._snapshots)


# ═════════════════════════════════════════════════════════════════
#  BST — ANIMATED ENGINE
#
#  Insert, delete (in-order successor splicing) and the three
#  depth-first traversals.  Every meaningful moment is recorded
#  into the attached History.  None of these operations raises on
#  a well-formed tree; a missing key is just a status snapshot.
#
#  The engine reads the tree root through ``root`` so that the
#  snapshots always show the WHOLE tree, not only the subtree the
#  recursion is working on.
# ═════════════════════════════════════════════════════════════════
class BSTAnimated:
    """
    Binary search tree with step-by-step recording.

    Attributes:
        root    (Node|None): Live tree root.
        history (History)  : Destination for recorded snapshots.
    """

    def __init__(self, root=None, history=None):
        self.root    = root
        self.history = history if history is not None else History()

    def _record(self, status, sequence=()):
        self.history.append(self.root, status, sequence)

    # ─────────────────────────────────────────────────────────────
    #  INSERT
    #
    #  compare → (insert left | insert right | recurse) per level.
    #  A duplicate key only produces its comparison snapshot.
    # ─────────────────────────────────────────────────────────────

    def insert(self, key):
        """
        Insert ``key``, recording a snapshot per comparison.

        The "operation complete" snapshot is left to the caller.

        Args:
            key: Ordered scalar key.
        """
        if self.root is None:
            self.root = Node(key)
            self._record(MSG_ROOT_CREATED.format(key=key))
            return
        self._insert(self.root, key)

    def _insert(self, node, key):
        node.is_searching = True
        self._record(MSG_COMPARE.format(key=key, node=node.key))
        node.is_searching = False

        if key < node.key:
            if node.left is None:
                node.left = Node(key)
                self._record(MSG_INSERT_LEFT.format(key=key, node=node.key))
            else:
                self._insert(node.left, key)
        elif key > node.key:
            if node.right is None:
                node.right = Node(key)
                self._record(MSG_INSERT_RIGHT.format(key=key, node=node.key))
            else:
                self._insert(node.right, key)
        # equal key: duplicate, nothing to insert

    # ─────────────────────────────────────────────────────────────
    #  DELETE
    #
    #  Classic recursive delete.  Each call returns the node that
    #  replaces ``node`` in its parent's link.  Two-child targets
    #  take their in-order successor's key, then the successor is
    #  deleted from the right subtree.
    # ─────────────────────────────────────────────────────────────

    def delete(self, key):
        """
        Delete ``key`` if present.

        A missing key ends in a single "not found" snapshot and leaves
        the structure untouched.  The "operation complete" snapshot is
        left to the caller.
        """
        self.root = self._delete(self.root, key)

    def _delete(self, node, key):
        if node is None:
            self._record(MSG_NOT_FOUND.format(key=key))
            return None

        node.is_searching = True
        self._record(MSG_SEARCHING.format(key=key, node=node.key))
        node.is_searching = False

        if key < node.key:
            node.left = self._delete(node.left, key)
        elif key > node.key:
            node.right = self._delete(node.right, key)
        else:
            node.is_current = True
            self._record(MSG_FOUND.format(key=key))

            if node.left is None or node.right is None:
                node.is_current = False
                return node.left if node.left is not None else node.right

            succ = node.right
            while succ.left is not None:
                succ.is_searching = True
                self._record(MSG_SUCCESSOR_SEARCH)
                succ.is_searching = False
                succ = succ.left

            node.key = succ.key
            self._record(MSG_SUCCESSOR_COPY.format(key=succ.key))
            node.is_current = False
            node.right = self._delete(node.right, succ.key)

        node.is_searching = False
        return node

    # ─────────────────────────────────────────────────────────────
    #  TRAVERSALS
    #
    #  Two snapshots per node: "about to visit" (current, sequence
    #  without the node) then "recorded" (visited, sequence with it).
    # ─────────────────────────────────────────────────────────────

    def traverse(self, order):
        """
        Walk the tree in ``order`` and record each visit.

        Args:
            order (TraversalOrder): Visiting order.

        Returns:
            list: Keys in visiting order.
        """
        order = TraversalOrder(order)
        queue = _ORDER_WALKS[order](self.root)

        seq = []
        for node in queue:
            node.is_current = True
            self._record(MSG_VISIT.format(order=order.label, key=node.key), seq)
            node.is_current = False
            node.visited    = True
            seq.append(node.key)
            self._record(MSG_RECORDED.format(key=node.key), seq)

        logger.debug("%s traversal recorded %d keys", order.value, len(seq))
        return seq
