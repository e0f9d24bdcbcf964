"""
Path Resolver

Locates a node inside the tree: either its index on the main line, or the
chain of variation steps leading to it from a main-line ancestor.

Example:
    main line:  n1 ─ n2 ─ n3
                 └─ variation 0 of n1: (a1, a2)
                                         └─ variation 0 of a2: (b1,)

    resolve_path(tree, "b1").steps ==
        (VariationStep("n1", 0, 1), VariationStep("a2", 0, 0))

Algorithm:
    Depth-first search from every main-line node through ``variations``,
    keeping the step stack. First match wins; lower variation indices are
    visited first. Cost is O(total nodes) per lookup, so callers that need
    several lookups in one action should use build_path_index().
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from chess_gametree.tree.model import ROOT, GameTree, Line


@dataclass(frozen=True)
class VariationStep:
    """One hop into a variation: line ``variation_index`` of ``branch_id``, slot ``position``."""

    branch_id: str
    variation_index: int
    position: int


@dataclass(frozen=True)
class VariationRef:
    """Names one entry of a node's ``variations``."""

    branch_id: str
    index: int


@dataclass(frozen=True)
class NodePath:
    """
    Location of a node.

    Attributes:
        node_id: The located node
        main_index: Index in main_line, None for variation nodes
        steps: Variation chain from a main-line ancestor (empty on the main line)
    """

    node_id: str
    main_index: Optional[int] = None
    steps: Tuple[VariationStep, ...] = ()

    @property
    def on_main_line(self) -> bool:
        return self.main_index is not None

    @property
    def depth(self) -> int:
        """Variation nesting depth (0 on the main line)."""
        return len(self.steps)

    @property
    def index_in_line(self) -> int:
        if self.main_index is not None:
            return self.main_index
        return self.steps[-1].position

    @property
    def variation(self) -> Optional[VariationRef]:
        """Innermost variation containing the node."""
        if not self.steps:
            return None
        last = self.steps[-1]
        return VariationRef(last.branch_id, last.variation_index)


def resolve_path(tree: GameTree, node_id: str) -> Optional[NodePath]:
    """
    Find where ``node_id`` lives.

    Args:
        tree: Tree to search
        node_id: Node to locate

    Returns:
        NodePath, or None for ROOT and for ids not reachable from the main line
    """
    if node_id == ROOT or node_id not in tree.nodes:
        return None

    for i, main_id in enumerate(tree.main_line):
        if main_id == node_id:
            return NodePath(node_id, main_index=i)

    seen: Set[str] = set()
    for main_id in tree.main_line:
        found = _search_variations(tree, main_id, (), node_id, seen)
        if found is not None:
            return found
    return None


def _search_variations(
    tree: GameTree,
    branch_id: str,
    steps: Tuple[VariationStep, ...],
    target: str,
    seen: Set[str],
) -> Optional[NodePath]:
    if branch_id in seen:
        return None
    seen.add(branch_id)

    node = tree.nodes.get(branch_id)
    if node is None:
        return None

    for v_index, line in enumerate(node.variations):
        for position, line_id in enumerate(line):
            chain = steps + (VariationStep(branch_id, v_index, position),)
            if line_id == target:
                return NodePath(target, steps=chain)
            found = _search_variations(tree, line_id, chain, target, seen)
            if found is not None:
                return found
    return None


def build_path_index(tree: GameTree) -> Dict[str, NodePath]:
    """
    Resolve every reachable node in a single traversal.

    The tree is immutable, so an index stays valid for as long as the caller
    keeps working on the same tree value.
    """
    index: Dict[str, NodePath] = {}
    stack: List[Tuple[str, Tuple[VariationStep, ...]]] = []

    for i, main_id in enumerate(tree.main_line):
        index.setdefault(main_id, NodePath(main_id, main_index=i))

    for main_id in reversed(tree.main_line):
        stack.append((main_id, ()))

    visited: Set[str] = set()
    while stack:
        branch_id, steps = stack.pop()
        if branch_id in visited:
            continue
        visited.add(branch_id)

        node = tree.nodes.get(branch_id)
        if node is None:
            continue

        pending = []
        for v_index, line in enumerate(node.variations):
            for position, line_id in enumerate(line):
                chain = steps + (VariationStep(branch_id, v_index, position),)
                index.setdefault(line_id, NodePath(line_id, steps=chain))
                pending.append((line_id, chain))
        # keep lower variation indices first in DFS order
        stack.extend(reversed(pending))

    return index


def line_of(tree: GameTree, path: NodePath) -> Line:
    """Ids of the line (main line or a specific variation) holding ``path``."""
    if path.on_main_line:
        return tree.main_line
    last = path.steps[-1]
    return tree.nodes[last.branch_id].variations[last.variation_index]


def variation_line(tree: GameTree, ref: VariationRef) -> Optional[Line]:
    """Ids of the variation named by ``ref``, None if it does not exist."""
    branch = tree.nodes.get(ref.branch_id)
    if branch is None or not 0 <= ref.index < len(branch.variations):
        return None
    return branch.variations[ref.index]


def is_last_in_line(tree: GameTree, node_id: str, path: Optional[NodePath] = None) -> bool:
    """True iff ``node_id`` is the final element of the line it belongs to."""
    if path is None:
        path = resolve_path(tree, node_id)
    if path is None:
        return False
    return path.index_in_line == len(line_of(tree, path)) - 1


def variation_of(tree: GameTree, node_id: str) -> Optional[VariationRef]:
    """Innermost variation containing ``node_id`` (None on the main line)."""
    path = resolve_path(tree, node_id)
    return path.variation if path is not None else None


def continuation(tree: GameTree, path: NodePath) -> Optional[str]:
    """Next id after ``path`` on its own line, None at the end of the line."""
    line = line_of(tree, path)
    next_index = path.index_in_line + 1
    return line[next_index] if next_index < len(line) else None


def reachable_ids(tree: GameTree, lines: Iterable[Line]) -> Set[str]:
    """Every id in ``lines`` plus everything nested under them."""
    found: Set[str] = set()
    stack = [node_id for line in lines for node_id in line]
    while stack:
        node_id = stack.pop()
        if node_id in found:
            continue
        found.add(node_id)
        node = tree.nodes.get(node_id)
        if node is not None:
            stack.extend(i for line in node.variations for i in line)
    return found
