"""
Configuration for building and editing move trees.
"""

import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional


def uuid_id() -> str:
    """Default node/tree id factory."""
    return uuid.uuid4().hex


@dataclass
class TreeConfig:
    """Configuration shared by the converter and GameSession.

    Everything here has a sensible default, so ``TreeConfig()`` describes a
    standard game with random ids.
    """

    # Positions
    start_position: Optional[str] = None
    """FEN before the first move (None = oracle's standard start)"""

    # Move parsing
    accept_uci: bool = True
    """Accept UCI coordinate moves ("e2e4") in addition to SAN"""

    chess960: bool = False
    """Interpret positions as Chess960"""

    # Identity
    id_factory: Callable[[], str] = field(default=uuid_id)
    """Callable producing globally unique node ids"""

    # Loading
    validate_on_load: bool = True
    """Run the invariant validator when a session loads a dict snapshot"""
