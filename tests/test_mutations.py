"""
Unit Tests for the Mutation Engine

Tests for:
    - play_move: extend, branch, extend-variation, de-duplication, ROOT rules
    - create_variation: explicit branching and de-duplication
    - promote_variation / delete_variation
    - add_comment / set_annotation / select_node
    - Failure results leave the input tree untouched
"""

import random

import pytest

from chess_gametree.oracle import Side
from chess_gametree.tree import (
    ROOT,
    TreeError,
    TreeValidator,
    VariationRef,
    add_comment,
    create_variation,
    delete_variation,
    new_tree,
    play_move,
    promote_variation,
    select_node,
    set_annotation,
)
from chess_gametree.utils import play_line


def all_line_ids(tree):
    """Every id on the main line and in every variation, duplicates kept."""
    found = list(tree.main_line)
    for node in tree.nodes.values():
        for line in node.variations:
            found.extend(line)
    return found


class TestPlayMoveScenario:
    """The e4 / e5 / branch walkthrough."""

    def test_scenario(self, ids):
        """Test extend, extend, then branch from a mid-line node."""
        tree = new_tree()

        tree = play_move(tree, ROOT, "e4", id_factory=ids).tree
        assert tree.main_line == ("n1",)
        assert tree.nodes["n1"].notation == "e4"
        assert tree.nodes["n1"].move_number == 1
        assert tree.nodes["n1"].side is Side.WHITE
        assert tree.nodes["n1"].parent_id is None

        tree = play_move(tree, "n1", "e5", id_factory=ids).tree
        assert tree.main_line == ("n1", "n2")

        tree = play_move(tree, "n1", "d5", id_factory=ids).tree
        assert tree.main_line == ("n1", "n2")
        assert tree.nodes["n1"].variations == (("n3",),)
        assert tree.nodes["n3"].notation == "d5"
        assert tree.nodes["n3"].parent_id == "n1"
        assert tree.nodes["n3"].is_main_line is False
        assert tree.current_node == "n3"


class TestPlayMove:
    """Tests for play_move()."""

    def test_extension(self, branched, ids):
        """Test that playing from the last main-line node grows the main line."""
        result = play_move(branched, "n4", "Bb5", id_factory=ids)

        assert result.ok
        tree = result.tree
        assert len(tree.main_line) == len(branched.main_line) + 1
        new_id = tree.main_line[-1]
        assert tree.nodes[new_id].is_main_line
        assert tree.nodes[new_id].notation == "Bb5"
        assert tree.nodes[new_id].move_number == 3
        assert tree.current_node == new_id

    def test_branching(self, branched, ids):
        """Test that playing from a mid-line node adds exactly one variation."""
        tree = play_move(branched, "n2", "Bc4", id_factory=ids).tree

        assert tree.main_line == branched.main_line
        assert len(tree.nodes["n2"].variations) == len(branched.nodes["n2"].variations) + 1
        new_id = tree.nodes["n2"].variations[-1][0]
        assert tree.nodes[new_id].parent_id == "n2"
        assert tree.current_node == new_id

    def test_extend_variation(self, branched, ids):
        """Test that playing from the last node of a variation extends it."""
        tree = play_move(branched, "n7", "d4", id_factory=ids).tree

        line = tree.nodes["n1"].variations[0]
        assert line[:3] == ("n5", "n6", "n7")
        assert len(line) == 4
        assert tree.nodes[line[-1]].is_main_line is False
        assert tree.main_line == branched.main_line

    def test_extend_nested_variation(self, branched, ids):
        """Test extension of a variation nested inside another one."""
        tree = play_move(branched, "n8", "Nc6", id_factory=ids).tree

        assert len(tree.nodes["n5"].variations[0]) == 2
        assert tree.nodes["n1"].variations == branched.nodes["n1"].variations

    def test_branch_inside_variation(self, branched, ids):
        """Test that a mid-variation move opens a nested variation."""
        tree = play_move(branched, "n6", "Nc6", id_factory=ids).tree

        assert tree.nodes["n1"].variations == branched.nodes["n1"].variations
        assert len(tree.nodes["n6"].variations) == 1

    def test_existing_continuation_is_selected(self, branched, ids):
        """Test that replaying the main-line continuation navigates instead of branching."""
        result = play_move(branched, "n1", "e5", id_factory=ids)

        assert result.ok
        assert result.tree.current_node == "n2"
        assert len(result.tree) == len(branched)
        assert result.tree.nodes["n1"].variations == branched.nodes["n1"].variations

    def test_existing_variation_is_selected(self, branched, ids):
        """Test that replaying a variation's first move navigates to it."""
        tree = play_move(branched, "n1", "c5", id_factory=ids).tree

        assert tree.current_node == "n5"
        assert len(tree) == len(branched)

    def test_dedup_uses_normalized_notation(self, branched, ids):
        """Test that UCI input matches an existing SAN node."""
        tree = play_move(branched, "n1", "c7c5", id_factory=ids).tree

        assert tree.current_node == "n5"
        assert len(tree) == len(branched)

    def test_move_numbers_and_sides(self, branched):
        """Test move number and side derivation through branches."""
        nodes = branched.nodes
        assert (nodes["n3"].move_number, nodes["n3"].side) == (2, Side.WHITE)
        assert (nodes["n4"].move_number, nodes["n4"].side) == (2, Side.BLACK)
        assert (nodes["n5"].move_number, nodes["n5"].side) == (1, Side.BLACK)
        assert (nodes["n8"].move_number, nodes["n8"].side) == (2, Side.WHITE)

    def test_uci_input_stored_as_san(self, ids):
        tree = play_move(new_tree(), ROOT, "e2e4", id_factory=ids).tree
        assert tree.nodes["n1"].notation == "e4"

    def test_root_with_existing_first_move(self, branched, ids):
        """Test ROOT replays of the first move navigate, alternatives are rejected."""
        same = play_move(branched, ROOT, "e4", id_factory=ids)
        assert same.ok
        assert same.tree.current_node == "n1"

        other = play_move(branched, ROOT, "d4", id_factory=ids)
        assert other.error is TreeError.ROOT_VARIATION
        assert other.tree is branched

    def test_black_to_move_root(self, ids):
        """Test side and move number when the game starts with Black to move."""
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        tree = play_line(new_tree(fen), ["e5", "Nf3"], from_node_id=ROOT, id_factory=ids)

        assert (tree.nodes["n1"].side, tree.nodes["n1"].move_number) == (Side.BLACK, 1)
        assert (tree.nodes["n2"].side, tree.nodes["n2"].move_number) == (Side.WHITE, 2)

    def test_invalid_move_is_noop(self, branched):
        """Test that a rejected move returns the very same tree."""
        for node_id in [ROOT, "n2", "n7"]:
            result = play_move(branched, node_id, "not-a-legal-move")

            assert result.error is TreeError.INVALID_MOVE
            assert result.tree is branched
            assert not result

    def test_unknown_node(self, branched):
        result = play_move(branched, "missing", "e4")

        assert result.error is TreeError.NODE_NOT_FOUND
        assert result.tree is branched

    def test_previous_tree_untouched(self, branched, ids):
        """Test that an edit does not alter the tree it started from."""
        snapshot = (dict(branched.nodes), branched.main_line, branched.current_node)

        play_move(branched, "n2", "Bc4", id_factory=ids)
        play_move(branched, "n7", "d4", id_factory=ids)
        play_move(branched, "n4", "Bb5", id_factory=ids)

        assert (dict(branched.nodes), branched.main_line, branched.current_node) == snapshot

    def test_structural_sharing(self, branched, ids):
        """Test that untouched nodes are shared between old and new trees."""
        tree = play_move(branched, "n2", "Bc4", id_factory=ids).tree

        assert tree.nodes["n2"] is not branched.nodes["n2"]
        for node_id in ["n1", "n3", "n4", "n5", "n6", "n7", "n8"]:
            assert tree.nodes[node_id] is branched.nodes[node_id]

    def test_id_uniqueness(self, branched):
        """Test that random edit sequences never produce duplicate ids."""
        rng = random.Random(7)
        tree = branched
        for _ in range(60):
            node_id = rng.choice(list(tree.nodes))
            board_moves = ["a3", "a6", "h3", "h6", "Nc3", "Nc6", "Nf3", "Nf6", "d4", "d5", "e4", "e5"]
            tree = play_move(tree, node_id, rng.choice(board_moves)).tree

        found = all_line_ids(tree)
        assert len(found) == len(set(found)) == len(tree.nodes)
        assert TreeValidator().validate(tree).is_valid


class TestCreateVariation:
    """Tests for create_variation()."""

    def test_creates_variation(self, branched, ids):
        """Test explicit branching from a main-line node."""
        result = create_variation(branched, "n2", "Nc3", id_factory=ids)

        assert result.ok
        new_id = result.tree.current_node
        assert result.tree.nodes["n2"].variations == ((new_id,),)
        assert result.tree.nodes[new_id].notation == "Nc3"
        assert result.tree.main_line == branched.main_line

    def test_branch_at_last_node(self, branched, ids):
        """Test that explicit branching works at the end of a line too."""
        tree = create_variation(branched, "n4", "Bb5", id_factory=ids).tree

        assert tree.main_line == branched.main_line
        assert len(tree.nodes["n4"].variations) == 1

    def test_deduplication(self, branched, ids):
        """Test that the second identical call navigates to the first."""
        first = create_variation(branched, "n2", "Nc3", id_factory=ids).tree
        moved = select_node(first, "n4").tree
        second = create_variation(moved, "n2", "Nc3", id_factory=ids).tree

        assert len(second) == len(first)
        assert second.current_node == first.current_node
        assert second.nodes["n2"].variations == first.nodes["n2"].variations

    def test_invalid_move(self, branched):
        result = create_variation(branched, "n2", "Ke5")

        assert result.error is TreeError.INVALID_MOVE
        assert result.tree is branched

    def test_unknown_parent(self, branched):
        result = create_variation(branched, "missing", "Nc3")

        assert result.error is TreeError.NODE_NOT_FOUND
        assert result.tree is branched


class TestPromoteVariation:
    """Tests for promote_variation()."""

    def test_promote_to_main_line(self, branched, oracle):
        """Test swapping a variation with the main-line continuation."""
        tree = promote_variation(branched, VariationRef("n1", 0)).tree

        assert tree.main_line == ("n1", "n5", "n6", "n7")
        assert tree.nodes["n1"].variations == (("n2", "n3", "n4"),)
        assert all(tree.nodes[i].is_main_line for i in ["n5", "n6", "n7"])
        assert not any(tree.nodes[i].is_main_line for i in ["n2", "n3", "n4", "n8"])
        assert tree.nodes["n5"].variations == (("n8",),)
        assert tree.current_node == branched.current_node
        assert TreeValidator(oracle).validate(tree).is_valid

    def test_promote_twice_restores(self, branched):
        """Test that promoting the demoted line brings the original back."""
        once = promote_variation(branched, VariationRef("n1", 0)).tree
        twice = promote_variation(once, VariationRef("n1", 0)).tree

        assert twice.main_line == branched.main_line
        assert twice.nodes["n1"].variations == branched.nodes["n1"].variations
        assert twice == branched

    def test_promote_nested(self, branched, oracle):
        """Test that a nested variation moves up one level only."""
        tree = promote_variation(branched, VariationRef("n5", 0)).tree

        assert tree.main_line == branched.main_line
        assert tree.nodes["n1"].variations == (("n5", "n8"),)
        assert tree.nodes["n5"].variations == (("n6", "n7"),)
        assert not tree.nodes["n8"].is_main_line
        assert TreeValidator(oracle).validate(tree).is_valid

    def test_promote_at_end_of_line(self, branched, ids):
        """Test promotion when the branch node has no continuation."""
        tree = create_variation(branched, "n4", "Bb5", id_factory=ids).tree
        bb5 = tree.current_node

        tree = promote_variation(tree, VariationRef("n4", 0)).tree

        assert tree.main_line == branched.main_line + (bb5,)
        assert tree.nodes["n4"].variations == ()
        assert tree.nodes[bb5].is_main_line

    def test_keeps_other_variations_in_place(self, branched, ids):
        """Test that the demoted line takes the promoted variation's slot."""
        tree = create_variation(branched, "n1", "e6", id_factory=ids).tree
        e6 = tree.current_node

        tree = promote_variation(tree, VariationRef("n1", 1)).tree

        assert tree.main_line == ("n1", e6)
        assert tree.nodes["n1"].variations == (("n5", "n6", "n7"), ("n2", "n3", "n4"))

    def test_errors(self, branched):
        missing_node = promote_variation(branched, VariationRef("missing", 0))
        missing_variation = promote_variation(branched, VariationRef("n1", 4))

        assert missing_node.error is TreeError.NODE_NOT_FOUND
        assert missing_variation.error is TreeError.VARIATION_NOT_FOUND
        assert missing_node.tree is branched
        assert missing_variation.tree is branched


class TestDeleteVariation:
    """Tests for delete_variation()."""

    def test_delete_with_nested(self, branched):
        """Test that a variation and everything nested in it is removed."""
        tree = delete_variation(branched, VariationRef("n1", 0)).tree

        assert set(tree.nodes) == {"n1", "n2", "n3", "n4"}
        assert tree.nodes["n1"].variations == ()
        assert tree.main_line == branched.main_line

    def test_current_node_moves_to_branch(self, branched):
        """Test that deleting the selected node selects the branch node."""
        assert branched.current_node == "n8"
        tree = delete_variation(branched, VariationRef("n1", 0)).tree

        assert tree.current_node == "n1"

    def test_current_node_kept_when_outside(self, branched):
        selected = select_node(branched, "n3").tree
        tree = delete_variation(selected, VariationRef("n1", 0)).tree

        assert tree.current_node == "n3"

    def test_delete_nested_only(self, branched, oracle):
        tree = delete_variation(branched, VariationRef("n5", 0)).tree

        assert "n8" not in tree
        assert tree.nodes["n1"].variations == (("n5", "n6", "n7"),)
        assert tree.current_node == "n5"
        assert TreeValidator(oracle).validate(tree).is_valid

    def test_errors(self, branched):
        assert delete_variation(branched, VariationRef("missing", 0)).error is TreeError.NODE_NOT_FOUND
        assert delete_variation(branched, VariationRef("n2", 0)).error is TreeError.VARIATION_NOT_FOUND

    def test_original_untouched(self, branched):
        delete_variation(branched, VariationRef("n1", 0))

        assert "n5" in branched
        assert branched.nodes["n1"].variations == (("n5", "n6", "n7"),)


class TestNodeMetadata:
    """Tests for add_comment(), set_annotation() and select_node()."""

    def test_add_comment(self, branched):
        tree = add_comment(branched, "n2", "Solid reply").tree

        assert tree.nodes["n2"].comment == "Solid reply"
        assert branched.nodes["n2"].comment is None

    def test_replace_and_clear_comment(self, branched):
        tree = add_comment(branched, "n2", "first").tree
        tree = add_comment(tree, "n2", "second").tree
        assert tree.nodes["n2"].comment == "second"

        tree = add_comment(tree, "n2", "").tree
        assert tree.nodes["n2"].comment is None

    def test_comment_unknown_node(self, branched):
        result = add_comment(branched, "missing", "text")

        assert result.error is TreeError.NODE_NOT_FOUND
        assert result.tree is branched

    @pytest.mark.parametrize("annotation", ["!", "?", "!!", "??", "!?", "?!"])
    def test_set_annotation(self, branched, annotation):
        tree = set_annotation(branched, "n3", annotation).tree
        assert tree.nodes["n3"].annotation == annotation

    def test_clear_annotation(self, branched):
        tree = set_annotation(branched, "n3", "!").tree
        tree = set_annotation(tree, "n3", None).tree
        assert tree.nodes["n3"].annotation is None

    def test_invalid_annotation(self, branched):
        result = set_annotation(branched, "n3", "!!!")

        assert result.error is TreeError.INVALID_ANNOTATION
        assert result.tree is branched

    def test_select_node(self, branched):
        assert select_node(branched, "n2").tree.current_node == "n2"
        assert select_node(branched, ROOT).tree.current_node == ROOT
        assert select_node(branched, "missing").error is TreeError.NODE_NOT_FOUND
