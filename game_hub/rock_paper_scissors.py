from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .game_core import SeededRng


class Choice(StrEnum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class Outcome(StrEnum):
    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"


BEATS: dict[Choice, Choice] = {
    Choice.ROCK: Choice.SCISSORS,
    Choice.PAPER: Choice.ROCK,
    Choice.SCISSORS: Choice.PAPER,
}

_OUTCOME_TEXT = {
    Outcome.WIN: "You Win!",
    Outcome.LOSE: "Computer Wins!",
    Outcome.DRAW: "Draw!",
}

_BANNER_TEXT = {
    Outcome.WIN: "You Win!",
    Outcome.LOSE: "Computer Wins!",
    Outcome.DRAW: "It's a Draw!",
}


@dataclass(frozen=True, slots=True)
class RockPaperScissorsConfig:
    history_limit: int = 5


@dataclass(frozen=True, slots=True)
class RockPaperScissorsSnapshot:
    player_choice: Choice | None
    computer_choice: Choice | None
    outcome: Outcome | None
    player_score: int
    computer_score: int
    history: tuple[str, ...]
    banner: str


def decide(player: Choice, computer: Choice) -> Outcome:
    if player is computer:
        return Outcome.DRAW
    return Outcome.WIN if BEATS[player] is computer else Outcome.LOSE


class RockPaperScissorsGame:
    CHOICES: tuple[Choice, ...] = tuple(Choice)

    def __init__(self, *, seed: int, config: RockPaperScissorsConfig | None = None) -> None:
        cfg = config or RockPaperScissorsConfig()
        if cfg.history_limit < 0:
            raise ValueError("history_limit must be >= 0")
        self._cfg = cfg
        self._rng = SeededRng(seed)

        self._player: Choice | None = None
        self._computer: Choice | None = None
        self._outcome: Outcome | None = None
        self._player_score = 0
        self._computer_score = 0
        self._history: list[str] = []

    def play(self, choice: Choice | str) -> Outcome:
        player = Choice(choice)
        computer = self._rng.choice(self.CHOICES)
        outcome = decide(player, computer)

        self._player = player
        self._computer = computer
        self._outcome = outcome
        if outcome is Outcome.WIN:
            self._player_score += 1
        elif outcome is Outcome.LOSE:
            self._computer_score += 1

        entry = f"You: {player.value} vs Computer: {computer.value} - {_OUTCOME_TEXT[outcome]}"
        self._history.insert(0, entry)
        del self._history[self._cfg.history_limit :]
        return outcome

    def reset(self) -> None:
        self._player = None
        self._computer = None
        self._outcome = None
        self._player_score = 0
        self._computer_score = 0
        self._history.clear()

    def snapshot(self) -> RockPaperScissorsSnapshot:
        return RockPaperScissorsSnapshot(
            player_choice=self._player,
            computer_choice=self._computer,
            outcome=self._outcome,
            player_score=self._player_score,
            computer_score=self._computer_score,
            history=tuple(self._history),
            banner="" if self._outcome is None else _BANNER_TEXT[self._outcome],
        )


def build_rock_paper_scissors_game(
    *, seed: int, config: RockPaperScissorsConfig | None = None
) -> RockPaperScissorsGame:
    return RockPaperScissorsGame(seed=seed, config=config)
