from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Mark(StrEnum):
    X = "X"
    O = "O"  # noqa: E741


DRAW = "draw"

WIN_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True, slots=True)
class TicTacToeSnapshot:
    board: tuple[Mark | None, ...]
    current: Mark
    winner: Mark | None
    is_draw: bool
    winning_line: tuple[int, int, int] | None
    x_wins: int
    o_wins: int
    draws: int
    status: str


def find_winner(board: tuple[Mark | None, ...]) -> tuple[Mark, tuple[int, int, int]] | None:
    for line in WIN_LINES:
        a, b, c = line
        mark = board[a]
        if mark is not None and mark is board[b] and mark is board[c]:
            return mark, line
    return None


class TicTacToeGame:
    """Two players share one board; X always opens."""

    def __init__(self) -> None:
        self._board: list[Mark | None] = [None] * 9
        self._current = Mark.X
        self._winner: Mark | None = None
        self._winning_line: tuple[int, int, int] | None = None
        self._is_draw = False
        self._score = {Mark.X: 0, Mark.O: 0, DRAW: 0}

    @property
    def is_decided(self) -> bool:
        return self._winner is not None or self._is_draw

    def place(self, index: int) -> bool:
        """Mark a cell for the current player. Returns True if the move was made."""

        if not (0 <= index < 9):
            raise ValueError("index must be in [0, 8]")
        if self.is_decided or self._board[index] is not None:
            return False

        self._board[index] = self._current
        board = tuple(self._board)
        found = find_winner(board)
        if found is not None:
            self._winner, self._winning_line = found
            self._score[self._winner] += 1
        elif all(cell is not None for cell in board):
            self._is_draw = True
            self._score[DRAW] += 1
        else:
            self._current = Mark.O if self._current is Mark.X else Mark.X
        return True

    def new_game(self) -> None:
        self._board = [None] * 9
        self._current = Mark.X
        self._winner = None
        self._winning_line = None
        self._is_draw = False

    def reset_score(self) -> None:
        self._score = {Mark.X: 0, Mark.O: 0, DRAW: 0}
        self.new_game()

    def snapshot(self) -> TicTacToeSnapshot:
        if self._winner is not None:
            status = f"Player {self._winner.value} Wins!"
        elif self._is_draw:
            status = "It's a Draw!"
        else:
            status = f"Player {self._current.value}'s turn"
        return TicTacToeSnapshot(
            board=tuple(self._board),
            current=self._current,
            winner=self._winner,
            is_draw=self._is_draw,
            winning_line=self._winning_line,
            x_wins=self._score[Mark.X],
            o_wins=self._score[Mark.O],
            draws=self._score[DRAW],
            status=status,
        )
