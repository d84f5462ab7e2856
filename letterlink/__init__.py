"""Letter-link tile matching engine.

This package exposes the public API surface via:

- ``letterlink.engine.generator.MapGenerator``: builds verified-solvable boards.
- ``letterlink.engine.connectivity.can_connect``: the two-turn link search.
- ``letterlink.engine.solver.SolvabilityVerifier``: certifies boards clearable.
- ``letterlink.session.game.GameSession``: the turn- and time-limited game.
"""

from .engine.connectivity import can_connect
from .engine.generator import GeneratorConfig, MapGenerator
from .engine.grid import GridConfig, LetterGrid
from .engine.reshuffle import ReshuffleConfig, ReshuffleEngine
from .engine.solver import SolvabilityVerifier, SolverConfig, find_matches, is_solvable
from .session.events import SessionListener
from .session.game import AnimationTicket, GameSession, SessionConfig
from .session.scheduler import ManualScheduler

__all__ = [
    "AnimationTicket",
    "GameSession",
    "GeneratorConfig",
    "GridConfig",
    "LetterGrid",
    "ManualScheduler",
    "MapGenerator",
    "ReshuffleConfig",
    "ReshuffleEngine",
    "SessionConfig",
    "SessionListener",
    "SolvabilityVerifier",
    "SolverConfig",
    "can_connect",
    "find_matches",
    "is_solvable",
]

__version__ = "0.1.0"
