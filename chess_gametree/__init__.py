"""
chess-gametree

An immutable move-tree engine for recording and browsing chess games with
nested variations, built on python-chess.

## Architecture

The package is organized into several key modules:

1. **oracle**: Position Oracle
   - Abstract PositionOracle interface (legality is never decided here)
   - ChessOracle: python-chess backed implementation

2. **tree**: The move tree
   - Frozen MoveNode / GameTree values with structural sharing
   - Path resolver, mutation engine, navigation
   - Invariant validator and plain-dict boundary

3. **convert**: Flat move-pair lists
   - Move pairs in, main-line tree out (and back)

4. **session**: Presentation-side holder
   - Serializes edits and notifies on_tree_changed listeners

## Quick Start

```python
from chess_gametree.tree import ROOT, new_tree, play_move

tree = new_tree()
tree = play_move(tree, ROOT, "e4").tree
tree = play_move(tree, tree.current_node, "e5").tree
tree = play_move(tree, tree.main_line[0], "d5").tree  # branches a variation
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from chess_gametree.config import TreeConfig
from chess_gametree.convert import MovePair, to_linear, to_tree
from chess_gametree.oracle import ChessOracle, PositionOracle, Side
from chess_gametree.session import GameSession
from chess_gametree.tree import (
    ROOT,
    GameTree,
    MoveNode,
    MutationResult,
    TreeError,
    VariationRef,
    add_comment,
    create_variation,
    delete_variation,
    new_tree,
    play_move,
    promote_variation,
)

__all__ = [
    'TreeConfig',
    'MovePair',
    'to_linear',
    'to_tree',
    'ChessOracle',
    'PositionOracle',
    'Side',
    'GameSession',
    'ROOT',
    'GameTree',
    'MoveNode',
    'MutationResult',
    'TreeError',
    'VariationRef',
    'add_comment',
    'create_variation',
    'delete_variation',
    'new_tree',
    'play_move',
    'promote_variation',
]
