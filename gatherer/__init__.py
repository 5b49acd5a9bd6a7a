"""
Gatherer - grid resource-gathering game with an expert bot.

A tile-based game where an agent collects trees and delivers them to a base
under a movement-cost budget, plus a greedy A*-driven expert that plays it
through an asynchronous command/observation boundary and records a
(state, action) dataset.

No global config at runtime. Settings, random sources and stores are
injected; ``Config`` only supplies defaults.
"""

__version__ = "0.1.0"

# Session and bot
from .session import GameSession, SessionClosedError
from .bot import (
    BotPhase,
    CycleOutcome,
    ExpertBot,
    GameControls,
    InvalidPathStepError,
    TargetChoice,
    select_target,
    wait_for_state,
)
from .runner import BotRunner, EpisodeSummary, RunSummary

# Game mechanics
from .map_generator import MapGenerationError, MapGenerator, is_solvable
from .rules import GameRules

# Persistence and dataset
from .persistence import HighScoreStore, InMemoryHighScores, JsonHighScores
from .dataset import DecisionLog, build_state_representation, csv_header

# Environment
from .environment import (
    UNREACHABLE,
    PathResult,
    Position,
    TerrainGrid,
    TerrainState,
    find_path,
    manhattan_distance,
    preview_resource,
    render_ascii_board,
)

# Core schemas
from .schemas import (
    Action,
    AgentState,
    DecisionRecord,
    EpisodeState,
    GameEvent,
    GameSettings,
    Resource,
    StateRepresentation,
)

from .config import Config

__all__ = [
    # Session and bot
    "GameSession",
    "SessionClosedError",
    "BotPhase",
    "CycleOutcome",
    "ExpertBot",
    "GameControls",
    "InvalidPathStepError",
    "TargetChoice",
    "select_target",
    "wait_for_state",
    "BotRunner",
    "EpisodeSummary",
    "RunSummary",
    # Game mechanics
    "MapGenerationError",
    "MapGenerator",
    "is_solvable",
    "GameRules",
    # Persistence and dataset
    "HighScoreStore",
    "InMemoryHighScores",
    "JsonHighScores",
    "DecisionLog",
    "build_state_representation",
    "csv_header",
    # Environment
    "UNREACHABLE",
    "PathResult",
    "Position",
    "TerrainGrid",
    "TerrainState",
    "find_path",
    "manhattan_distance",
    "preview_resource",
    "render_ascii_board",
    # Schemas
    "Action",
    "AgentState",
    "DecisionRecord",
    "EpisodeState",
    "GameEvent",
    "GameSettings",
    "Resource",
    "StateRepresentation",
    "Config",
]
