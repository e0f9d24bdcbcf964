"""
Plain-data view of GameTree values.

tree_to_dict() produces JSON-compatible dicts using the camelCase field names
of the move-pair interchange format; tree_from_dict() is the single place
where outside data becomes a GameTree.

Variation shape:
    A variation is a list of node id strings, nothing else. Older snapshots
    stored variations either as lists of node objects or as objects with a
    ``moves`` field. Those are rejected with AMBIGUOUS_VARIATION_SHAPE; run
    them through migrate_legacy_tree() first.
"""

import copy
from typing import Any, Dict, List

from chess_gametree.oracle import Side
from chess_gametree.tree.errors import TreeError, TreeParseError
from chess_gametree.tree.model import ROOT, GameTree, Line, MoveNode


def node_to_dict(node: MoveNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": node.id,
        "moveNumber": node.move_number,
        "move": node.notation,
        "color": node.side.value,
        "fen": node.position,
        "isMainLine": node.is_main_line,
        "parentId": node.parent_id,
        "variations": [list(line) for line in node.variations],
    }
    if node.comment is not None:
        data["comment"] = node.comment
    if node.annotation is not None:
        data["annotation"] = node.annotation
    return data


def tree_to_dict(tree: GameTree) -> Dict[str, Any]:
    """Convert a tree to plain dicts and lists."""
    return {
        "id": tree.id,
        "rootPosition": tree.root_position,
        "currentNode": tree.current_node,
        "moves": {node_id: node_to_dict(node) for node_id, node in tree.nodes.items()},
        "mainLine": list(tree.main_line),
    }


def _parse_line(raw: Any, where: str) -> Line:
    if isinstance(raw, dict):
        raise TreeParseError(
            f"{where}: object-shaped variation (run migrate_legacy_tree first)",
            TreeError.AMBIGUOUS_VARIATION_SHAPE,
        )
    if not isinstance(raw, (list, tuple)) or not all(isinstance(i, str) for i in raw):
        raise TreeParseError(
            f"{where}: variation must be a list of node ids",
            TreeError.AMBIGUOUS_VARIATION_SHAPE,
        )
    return tuple(raw)


def node_from_dict(data: Dict[str, Any]) -> MoveNode:
    """
    Build a MoveNode from its dict form.

    Raises:
        TreeParseError: On missing fields or a non id-list variation
    """
    try:
        node_id = data["id"]
        parent_id = data.get("parentId") or None
        for name, value in (("id", node_id), ("move", data["move"]), ("fen", data["fen"])):
            if not isinstance(value, str):
                raise TreeParseError(f"Move field {name!r} must be a string, got {value!r}")
        if parent_id is not None and not isinstance(parent_id, str):
            raise TreeParseError(f"Move {node_id!r} has a non-string parentId {parent_id!r}")
        variations = data.get("variations") or []
        return MoveNode(
            id=node_id,
            notation=data["move"],
            position=data["fen"],
            move_number=int(data["moveNumber"]),
            side=Side(data["color"]),
            parent_id=parent_id,
            is_main_line=bool(data.get("isMainLine", False)),
            variations=tuple(
                _parse_line(line, f"variation {i} of {node_id}") for i, line in enumerate(variations)
            ),
            comment=data.get("comment") or None,
            annotation=data.get("annotation") or None,
        )
    except TreeParseError:
        raise
    except KeyError as e:
        raise TreeParseError(f"Move is missing field {e}") from e
    except (TypeError, ValueError) as e:
        raise TreeParseError(f"Malformed move {data!r}: {e}") from e


def tree_from_dict(data: Dict[str, Any]) -> GameTree:
    """
    Build a GameTree from ``tree_to_dict`` output.

    Only referential checks are done here (every referenced id exists); use
    TreeValidator for the full invariant check.

    Raises:
        TreeParseError: On malformed input, unknown ids or legacy variation shapes
    """
    if not isinstance(data, dict):
        raise TreeParseError(f"Game tree must be an object, got {type(data).__name__}")
    try:
        raw_moves = data["moves"]
        raw_main_line = data["mainLine"]
        tree_id = data["id"]
        root_position = data["rootPosition"]
    except KeyError as e:
        raise TreeParseError(f"Game tree is missing field {e}") from e

    if not isinstance(raw_moves, dict):
        raise TreeParseError("'moves' must map node ids to moves")
    if not isinstance(raw_main_line, list) or not all(isinstance(i, str) for i in raw_main_line):
        raise TreeParseError("'mainLine' must be a list of node ids")
    if not isinstance(root_position, str):
        raise TreeParseError("'rootPosition' must be a position string")
    main_line = tuple(raw_main_line)

    nodes: Dict[str, MoveNode] = {}
    for key, raw in raw_moves.items():
        node = node_from_dict(raw)
        if node.id != key:
            raise TreeParseError(f"Move stored under {key!r} has id {node.id!r}")
        nodes[key] = node

    referenced: List[str] = list(main_line)
    for node in nodes.values():
        if node.parent_id is not None:
            referenced.append(node.parent_id)
        for line in node.variations:
            referenced.extend(line)
    for node_id in referenced:
        if node_id not in nodes:
            raise TreeParseError(f"Unknown node id {node_id!r}", TreeError.NODE_NOT_FOUND)

    current = data.get("currentNode") or ROOT
    if not isinstance(current, str):
        raise TreeParseError(f"'currentNode' must be a node id, got {current!r}")
    if current != ROOT and current not in nodes:
        raise TreeParseError(f"Current node {current!r} is not in the tree", TreeError.NODE_NOT_FOUND)

    return GameTree(
        id=tree_id,
        root_position=root_position,
        current_node=current,
        nodes=nodes,
        main_line=main_line,
    )


def _legacy_line_ids(raw: Any) -> Any:
    if isinstance(raw, dict) and "moves" in raw:
        raw = raw["moves"]
    if isinstance(raw, (list, tuple)):
        return [item["id"] if isinstance(item, dict) and "id" in item else item for item in raw]
    return raw


def migrate_legacy_tree(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite legacy variation shapes into plain id lists.

    Handles ``{"moves": [ids]}`` objects and lists of embedded move objects.
    The input is not modified.
    """
    migrated = copy.deepcopy(data)
    for raw in (migrated.get("moves") or {}).values():
        if isinstance(raw, dict) and raw.get("variations"):
            raw["variations"] = [_legacy_line_ids(line) for line in raw["variations"]]
    return migrated
