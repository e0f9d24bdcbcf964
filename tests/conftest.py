"""Shared fixtures for move-tree tests."""

import pytest

from chess_gametree.oracle import ChessOracle
from chess_gametree.tree import ROOT, new_tree, play_move
from chess_gametree.utils import counter_ids, play_line


@pytest.fixture
def oracle():
    return ChessOracle()


@pytest.fixture
def ids():
    """Deterministic id factory: n1, n2, ..."""
    return counter_ids()


@pytest.fixture
def branched(ids):
    """
    A tree with a variation and a nested variation.

        main line:   n1 e4   n2 e5   n3 Nf3   n4 Nc6
        n1 var 0:            n5 c5   n6 Nf3   n7 d6
        n5 var 0:                    n8 Nc3

    Current node: n8.
    """
    tree = play_line(new_tree(tree_id="game"), ["e4", "e5", "Nf3", "Nc6"], from_node_id=ROOT, id_factory=ids)
    tree = play_move(tree, "n1", "c5", id_factory=ids).tree
    tree = play_line(tree, ["Nf3", "d6"], from_node_id="n5", id_factory=ids)
    return play_move(tree, "n5", "Nc3", id_factory=ids).tree
