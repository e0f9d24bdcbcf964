"""
Structural validation of move trees.

Checks the invariants every GameTree produced by the engine satisfies. Trees
built through the editing functions never fail; the validator exists for
trees assembled from plain data (tree_from_dict) and for tests.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from chess_gametree.oracle import InvalidMoveError, PositionOracle
from chess_gametree.tree.model import ROOT, GameTree, Line
from chess_gametree.tree.path import build_path_index

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Results of tree validation."""

    errors: List[str] = field(default_factory=list)
    node_count: int = 0
    variation_count: int = 0
    max_depth: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_markdown(self) -> str:
        """Generate markdown validation report."""
        lines = [
            "# Game Tree Validation Report",
            "",
            "## Summary",
            "",
            f"- **Nodes**: {self.node_count:,}",
            f"- **Variations**: {self.variation_count:,}",
            f"- **Deepest nesting**: {self.max_depth}",
            f"- **Status**: {'PASS' if self.is_valid else 'FAIL'}",
        ]
        if self.errors:
            lines.extend(["", "## Errors", ""])
            lines.extend(f"- {error}" for error in self.errors)
        return "\n".join(lines) + "\n"


class TreeValidator:
    """Validate GameTree invariants."""

    def __init__(self, oracle: Optional[PositionOracle] = None):
        """
        Initialize validator.

        Args:
            oracle: When given, every node is replayed to check its notation
                and position; without one only the structure is checked.
        """
        self.oracle = oracle

    def validate(self, tree: GameTree) -> ValidationReport:
        """
        Run all checks.

        Args:
            tree: Tree to validate

        Returns:
            ValidationReport listing every violated invariant
        """
        report = ValidationReport(node_count=len(tree.nodes))

        self._check_line(tree, tree.main_line, None, True, "main line", report)
        self._check_variations(tree, report)
        self._check_unique(tree, report)
        self._check_reachable(tree, report)

        if tree.current_node != ROOT and tree.current_node not in tree.nodes:
            report.errors.append(f"current node {tree.current_node} is not in the tree")

        if self.oracle is not None:
            self._check_positions(tree, report)

        if report.errors:
            logger.warning(f"Tree {tree.id} failed validation with {len(report.errors)} errors")
        return report

    def _check_line(
        self,
        tree: GameTree,
        line: Line,
        branch_id: Optional[str],
        main: bool,
        name: str,
        report: ValidationReport,
    ):
        expected_parent = branch_id
        for node_id in line:
            node = tree.nodes.get(node_id)
            if node is None:
                report.errors.append(f"{name}: unknown node {node_id}")
                return
            if node.parent_id != expected_parent:
                report.errors.append(
                    f"{name}: {node_id} has parent {node.parent_id}, expected {expected_parent}"
                )
            if node.is_main_line != main:
                report.errors.append(f"{name}: {node_id} has is_main_line={node.is_main_line}")
            expected_parent = node_id

    def _check_variations(self, tree: GameTree, report: ValidationReport):
        for node in tree.nodes.values():
            for index, line in enumerate(node.variations):
                report.variation_count += 1
                if not line:
                    report.errors.append(f"variation {index} of {node.id} is empty")
                    continue
                self._check_line(tree, line, node.id, False, f"variation {index} of {node.id}", report)

    def _check_unique(self, tree: GameTree, report: ValidationReport):
        counts = Counter(tree.main_line)
        for node in tree.nodes.values():
            for line in node.variations:
                counts.update(line)
        for node_id, count in counts.items():
            if count > 1:
                report.errors.append(f"node {node_id} appears {count} times")

    def _check_reachable(self, tree: GameTree, report: ValidationReport):
        index = build_path_index(tree)
        report.max_depth = max((path.depth for path in index.values()), default=0)
        for node_id in tree.nodes:
            if node_id not in index:
                report.errors.append(f"node {node_id} is not reachable from the main line")

    def _check_positions(self, tree: GameTree, report: ValidationReport):
        for node in tree.nodes.values():
            parent_position = tree.position_at(node.parent_id or ROOT)
            if parent_position is None:
                continue
            try:
                applied = self.oracle.apply_move(parent_position, node.notation)
            except InvalidMoveError as e:
                report.errors.append(f"node {node.id}: {e}")
                continue
            if applied.notation != node.notation:
                report.errors.append(
                    f"node {node.id}: notation {node.notation!r} normalizes to {applied.notation!r}"
                )
            if applied.position != node.position:
                report.errors.append(f"node {node.id}: position does not follow from its parent")
