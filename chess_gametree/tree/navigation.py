"""
Cursor navigation targets.

These are read-only queries: each returns the id the cursor should move to
(ROOT included) or None when there is nowhere to go. GameSession turns the
answer into a select_node() edit.
"""

from typing import Optional

from chess_gametree.tree.model import ROOT, GameTree
from chess_gametree.tree.path import continuation, line_of, resolve_path


def next_node(tree: GameTree, node_id: str) -> Optional[str]:
    """Next move on the node's own line; from ROOT, the first main-line move."""
    if node_id == ROOT:
        return tree.main_line[0] if tree.main_line else None
    path = resolve_path(tree, node_id)
    if path is None:
        return None
    return continuation(tree, path)


def previous_node(tree: GameTree, node_id: str) -> Optional[str]:
    """The move this one was played from (ROOT for the first ply)."""
    if node_id == ROOT:
        return None
    node = tree.nodes.get(node_id)
    if node is None:
        return None
    return node.parent_id if node.parent_id is not None else ROOT


def variation_down(tree: GameTree, node_id: str) -> Optional[str]:
    """First move of the node's first variation."""
    node = tree.nodes.get(node_id)
    if node is None:
        return None
    for line in node.variations:
        if line:
            return line[0]
    return None


def variation_up(tree: GameTree, node_id: str) -> Optional[str]:
    """
    Leave the current variation for the line it branches from.

    The target is the node of the outer line at the same ply depth, clamped
    to the last node of that line. Returns None on the main line.
    """
    path = resolve_path(tree, node_id)
    if path is None or path.on_main_line:
        return None

    step = path.steps[-1]
    outer_path = resolve_path(tree, step.branch_id)
    if outer_path is None:
        return step.branch_id

    outer_line = line_of(tree, outer_path)
    target = outer_path.index_in_line + 1 + step.position
    return outer_line[min(target, len(outer_line) - 1)]


def line_end(tree: GameTree) -> str:
    """Last main-line move, ROOT for an empty game."""
    return tree.main_line[-1] if tree.main_line else ROOT
