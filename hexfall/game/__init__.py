"""Falling-tile engine, timers and the session lifecycle."""

from .fall import SPAWN_CLEARANCE, DropOutcome, FallEngine, FallingTile, FallPhase
from .policies import HardDropPolicy, TargetOpenColumnPolicy, WeightedRandomPolicy, play_session
from .scheduler import ManualScheduler, Scheduler, TkScheduler
from .session import CellView, GameSession, SessionConfig, SessionPhase, SessionSnapshot
from .speed import SpeedPolicy
from .tally import ResourceCard, ResourceTally

__all__ = [
    "CellView",
    "DropOutcome",
    "FallEngine",
    "FallPhase",
    "FallingTile",
    "GameSession",
    "HardDropPolicy",
    "ManualScheduler",
    "ResourceCard",
    "ResourceTally",
    "SPAWN_CLEARANCE",
    "Scheduler",
    "SessionConfig",
    "SessionPhase",
    "SessionSnapshot",
    "SpeedPolicy",
    "TargetOpenColumnPolicy",
    "TkScheduler",
    "WeightedRandomPolicy",
    "play_session",
]
