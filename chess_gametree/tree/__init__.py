"""
Move Tree Module

Immutable game trees: a main line plus nested variations, edited through
pure functions that return new trees.

Key Components:
    - GameTree / MoveNode: frozen data model, ROOT sentinel
    - Path resolver: where a node lives and whether it ends its line
    - Mutation engine: play_move, create_variation, promote_variation,
      delete_variation, add_comment, set_annotation, select_node
    - Navigation: next / previous / up / down cursor targets
    - TreeValidator and the plain-dict boundary

Data Flow:
    (tree, move text) → play_move() → MutationResult(tree', error)
                                      error is None  → tree' is a new value
                                      error is set   → tree' is the input tree
"""

from chess_gametree.tree.errors import MutationResult, TreeError, TreeParseError
from chess_gametree.tree.model import ROOT, GameTree, MoveNode, new_tree
from chess_gametree.tree.mutations import (
    ANNOTATIONS,
    add_comment,
    create_variation,
    delete_variation,
    play_move,
    promote_variation,
    select_node,
    set_annotation,
)
from chess_gametree.tree.navigation import (
    line_end,
    next_node,
    previous_node,
    variation_down,
    variation_up,
)
from chess_gametree.tree.path import (
    NodePath,
    VariationRef,
    VariationStep,
    build_path_index,
    is_last_in_line,
    line_of,
    resolve_path,
    variation_of,
)
from chess_gametree.tree.serialization import migrate_legacy_tree, tree_from_dict, tree_to_dict
from chess_gametree.tree.validator import TreeValidator, ValidationReport

__all__ = [
    'MutationResult',
    'TreeError',
    'TreeParseError',
    'ROOT',
    'GameTree',
    'MoveNode',
    'new_tree',
    'ANNOTATIONS',
    'add_comment',
    'create_variation',
    'delete_variation',
    'play_move',
    'promote_variation',
    'select_node',
    'set_annotation',
    'line_end',
    'next_node',
    'previous_node',
    'variation_down',
    'variation_up',
    'NodePath',
    'VariationRef',
    'VariationStep',
    'build_path_index',
    'is_last_in_line',
    'line_of',
    'resolve_path',
    'variation_of',
    'migrate_legacy_tree',
    'tree_from_dict',
    'tree_to_dict',
    'TreeValidator',
    'ValidationReport',
]
