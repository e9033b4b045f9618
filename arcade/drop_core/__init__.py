"""
Drop Core - The falling-block matching puzzle engine.

This module provides the tick-driven puzzle simulation, its Gymnasium
environment wrapper, and all supporting pieces (grid, piece, scoring, timer,
input counters, outbound events).

Main exports:
- CoreGame: The puzzle state machine, one tick() per frame
- DropMatchEnv: Gymnasium environment for agent training
- InputTracker / InputSnapshot: Hold-tick input model
- GameConfig: Configuration loaded from game_config.yaml
"""

from arcade.drop_core.config_loader import GameConfig, load_config
from arcade.drop_core.block_catalog import BlockKind, BlockCatalog
from arcade.drop_core.grid import GridStore
from arcade.drop_core.piece import ActivePiece, Direction
from arcade.drop_core.input_state import InputSnapshot, InputTracker, Key, TapZone
from arcade.drop_core.events import EffectRequest, SoundRequest
from arcade.drop_core.timer import RoundTimer
from arcade.drop_core.game import CoreGame, Phase, PuzzleRound
from arcade.drop_core.env_gym import DropMatchEnv
from arcade.drop_core.replay_recorder import (
    Replay,
    ReplayRecorder,
    load_replay,
    record_episode,
    replay_actions,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "BlockKind",
    "BlockCatalog",
    "GridStore",
    "ActivePiece",
    "Direction",
    "InputSnapshot",
    "InputTracker",
    "Key",
    "TapZone",
    "EffectRequest",
    "SoundRequest",
    "RoundTimer",
    "CoreGame",
    "Phase",
    "PuzzleRound",
    "DropMatchEnv",
    "Replay",
    "ReplayRecorder",
    "load_replay",
    "record_episode",
    "replay_actions",
    "generate_replay_filename",
]
