from __future__ import annotations

import logging
from dataclasses import dataclass

from .game_core import SeededRng
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

BOARD_SIZE = 100
START_SQUARE = 1

SNAKES: dict[int, int] = {16: 6, 47: 26, 49: 11, 56: 53, 62: 19, 64: 60, 87: 24, 93: 73, 95: 75, 98: 78}
LADDERS: dict[int, int] = {1: 38, 4: 14, 9: 21, 21: 42, 28: 84, 36: 44, 51: 67, 71: 91, 80: 100}


@dataclass(frozen=True, slots=True)
class SnakeLadderConfig:
    roll_frames: int = 20
    roll_frame_ms: int = 100
    turn_switch_ms: int = 2000
    history_limit: int = 10


@dataclass(frozen=True, slots=True)
class SnakeLadderSnapshot:
    current_player: int
    positions: tuple[int, int]
    dice: int | None
    rolling: bool
    turn_pending: bool
    winner: int | None
    message: str
    history: tuple[str, ...]


def board_cell(square: int) -> tuple[int, int]:
    """(row, col) of a square on a 10x10 grid, row 0 at the top, rows alternating direction."""

    if not (1 <= square <= BOARD_SIZE):
        raise ValueError("square must be in [1, 100]")
    row = (square - 1) // 10
    col = (square - 1) % 10
    actual_col = col if row % 2 == 0 else 9 - col
    return 9 - row, actual_col


class SnakeLadderGame:
    """Two-player race to square 100.

    Rolling animates through ``roll_frames`` random faces on the shared
    scheduler before the final face is applied, and a normal move hands the
    turn over only after ``turn_switch_ms``. Rolls are refused while either
    is in flight.
    """

    def __init__(self, *, timers: Scheduler, seed: int, config: SnakeLadderConfig | None = None) -> None:
        cfg = config or SnakeLadderConfig()
        if cfg.roll_frames < 0:
            raise ValueError("roll_frames must be >= 0")
        if cfg.roll_frame_ms <= 0:
            raise ValueError("roll_frame_ms must be > 0")
        if cfg.turn_switch_ms < 0:
            raise ValueError("turn_switch_ms must be >= 0")
        if cfg.history_limit < 0:
            raise ValueError("history_limit must be >= 0")

        self._timers = timers
        self._cfg = cfg
        self._rng = SeededRng(seed)

        self._epoch = 0
        self._pending: TimerHandle | None = None
        self._init_state()

    def _init_state(self) -> None:
        self._current = 1
        self._positions = {1: START_SQUARE, 2: START_SQUARE}
        self._dice: int | None = None
        self._rolling = False
        self._frames_shown = 0
        self._turn_pending = False
        self._winner: int | None = None
        self._message = "Player 1's turn - Roll the dice!"
        self._history: list[str] = []

    @property
    def current_player(self) -> int:
        return self._current

    @property
    def winner(self) -> int | None:
        return self._winner

    def position(self, player: int) -> int:
        return self._positions[player]

    def can_roll(self) -> bool:
        return not (self._rolling or self._turn_pending or self._winner is not None)

    def roll(self) -> bool:
        if not self.can_roll():
            return False
        self._rolling = True
        self._frames_shown = 0
        epoch = self._epoch
        if self._cfg.roll_frames == 0:
            self._roll_frame(epoch)
        else:
            self._pending = self._timers.schedule_after(self._cfg.roll_frame_ms, lambda: self._roll_frame(epoch))
        return True

    def apply_roll(self, dice: int) -> bool:
        """Move the current player by a known dice value, skipping the animation."""

        if not (1 <= int(dice) <= 6):
            raise ValueError("dice must be in [1, 6]")
        if not self.can_roll():
            return False
        self._dice = int(dice)
        self._move(int(dice))
        return True

    def reset(self) -> None:
        self._timers.cancel(self._pending)
        self._pending = None
        self._epoch += 1
        self._init_state()

    def snapshot(self) -> SnakeLadderSnapshot:
        return SnakeLadderSnapshot(
            current_player=self._current,
            positions=(self._positions[1], self._positions[2]),
            dice=self._dice,
            rolling=self._rolling,
            turn_pending=self._turn_pending,
            winner=self._winner,
            message=self._message,
            history=tuple(self._history),
        )

    def _roll_frame(self, epoch: int) -> None:
        if epoch != self._epoch:
            return
        self._pending = None
        self._dice = self._rng.randint(1, 6)
        self._frames_shown += 1
        if self._frames_shown < self._cfg.roll_frames:
            self._pending = self._timers.schedule_after(self._cfg.roll_frame_ms, lambda: self._roll_frame(epoch))
            return

        final = self._rng.randint(1, 6)
        self._dice = final
        self._rolling = False
        self._move(final)

    def _move(self, dice: int) -> None:
        player = self._current
        target = self._positions[player] + dice

        if target > BOARD_SIZE:
            self._add_history(f"Player {player}: Rolled {dice}, can't move beyond {BOARD_SIZE}")
            self._switch_player()
            self._message = (
                f"Player {player} rolled {dice} but can't move beyond {BOARD_SIZE}! "
                f"Player {self._current}'s turn."
            )
            return

        if target in LADDERS:
            top = LADDERS[target]
            self._message = f"Player {player} rolled {dice} and climbed a ladder from {target} to {top}!"
            self._add_history(f"Player {player}: Rolled {dice}, moved to {target}, climbed ladder to {top}")
            target = top
        elif target in SNAKES:
            tail = SNAKES[target]
            self._message = (
                f"Player {player} rolled {dice} and got bitten by a snake! Slid from {target} to {tail}!"
            )
            self._add_history(f"Player {player}: Rolled {dice}, moved to {target}, slid down snake to {tail}")
            target = tail
        else:
            self._message = f"Player {player} rolled {dice} and moved to {target}"
            self._add_history(f"Player {player}: Rolled {dice}, moved to {target}")

        self._positions[player] = target

        if target == BOARD_SIZE:
            self._winner = player
            self._message = f"Player {player} wins!"
            self._add_history(f"Player {player} wins the game!")
            logger.debug("player %d reached %d", player, BOARD_SIZE)
            return

        self._turn_pending = True
        epoch = self._epoch
        self._pending = self._timers.schedule_after(self._cfg.turn_switch_ms, lambda: self._end_turn(epoch))

    def _end_turn(self, epoch: int) -> None:
        if epoch != self._epoch:
            return
        self._pending = None
        self._turn_pending = False
        self._switch_player()

    def _switch_player(self) -> None:
        self._current = 2 if self._current == 1 else 1
        self._message = f"Player {self._current}'s turn - Roll the dice!"

    def _add_history(self, entry: str) -> None:
        self._history.insert(0, entry)
        del self._history[self._cfg.history_limit :]


def build_snake_ladder_game(
    *, timers: Scheduler, seed: int, config: SnakeLadderConfig | None = None
) -> SnakeLadderGame:
    return SnakeLadderGame(timers=timers, seed=seed, config=config)
