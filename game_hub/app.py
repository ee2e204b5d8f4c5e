"""Pygame UI shell for the Game Hub.

The hub menu opens four games:
- Rock Paper Scissors (hand-gesture game against the computer)
- Tic-tac-toe (two players, one board)
- Simon Says (sequence memory with timed playback)
- Snake & Ladder (two-player dice race)

Deterministic rules/timing/RNG/state live in game_hub/* (engine modules);
this module only turns key presses and clicks into engine commands and draws
engine snapshots. All timers run on one TimerQueue pumped once per frame.
"""

from __future__ import annotations

import logging
import math
import os
from array import array
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import RealClock
from .game_core import new_seed
from .rock_paper_scissors import (
    Choice,
    RockPaperScissorsGame,
    build_rock_paper_scissors_game,
)
from .scheduler import TimerHandle, TimerQueue
from .sequence_memory import (
    SequenceMemoryEngine,
    SequencePhase,
    Signal,
    build_sequence_memory_game,
)
from .snake_ladder import LADDERS, SNAKES, SnakeLadderGame, board_cell, build_snake_ladder_game
from .tic_tac_toe import Mark, TicTacToeGame

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
SEED_ENV = "GAME_HUB_SEED"
PRESS_FLASH_MS = 200


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class Palette:
    name: str
    bg: tuple[int, int, int]
    panel: tuple[int, int, int]
    border: tuple[int, int, int]
    text: tuple[int, int, int]
    muted: tuple[int, int, int]
    active_bg: tuple[int, int, int]
    active_text: tuple[int, int, int]


DARK = Palette(
    name="Dark",
    bg=(3, 9, 78),
    panel=(8, 18, 104),
    border=(226, 236, 255),
    text=(238, 245, 255),
    muted=(186, 200, 224),
    active_bg=(244, 248, 255),
    active_text=(14, 26, 74),
)
LIGHT = Palette(
    name="Light",
    bg=(228, 232, 242),
    panel=(246, 248, 252),
    border=(40, 52, 92),
    text=(20, 28, 52),
    muted=(92, 102, 130),
    active_bg=(30, 52, 132),
    active_text=(244, 248, 255),
)

SIGNAL_COLORS: dict[Signal, tuple[int, int, int]] = {
    Signal.RED: (220, 48, 48),
    Signal.BLUE: (48, 96, 220),
    Signal.GREEN: (40, 170, 80),
    Signal.YELLOW: (226, 192, 32),
}

# Grid order of the pads: top-left, top-right, bottom-left, bottom-right.
PAD_ORDER: tuple[Signal, ...] = (Signal.RED, Signal.BLUE, Signal.GREEN, Signal.YELLOW)

PAD_KEYS: dict[int, Signal] = {
    pygame.K_1: Signal.RED,
    pygame.K_q: Signal.RED,
    pygame.K_2: Signal.BLUE,
    pygame.K_w: Signal.BLUE,
    pygame.K_3: Signal.GREEN,
    pygame.K_a: Signal.GREEN,
    pygame.K_4: Signal.YELLOW,
    pygame.K_s: Signal.YELLOW,
}


class ToneBank:
    """Pygame audio output for the sequence game's ``emit`` capability.

    Sits outside the deterministic engine. If the mixer cannot start, every
    tone becomes a no-op.
    """

    FREQUENCIES: dict[Signal, float] = {
        Signal.RED: 220.0,
        Signal.BLUE: 277.0,
        Signal.GREEN: 330.0,
        Signal.YELLOW: 415.0,
    }
    _duration_s = 0.30
    _gain = 0.30
    _amp = 32767

    def __init__(self) -> None:
        self._available = False
        self._sounds: dict[Signal, pygame.mixer.Sound] = {}
        self._sample_rate = 22050
        self._channels = 1

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            init = pygame.mixer.get_init()
            if init is None:
                raise pygame.error("mixer not initialised")
            self._sample_rate, _, self._channels = init
            self._sounds = {
                signal: self._build_tone_sound(freq, self._duration_s, gain=self._gain)
                for signal, freq in self.FREQUENCIES.items()
            }
            self._available = True
        except pygame.error as exc:
            logger.warning("Audio unavailable, tones disabled: %s", exc)

    @property
    def available(self) -> bool:
        return self._available

    def emit(self, signal: Signal) -> None:
        if not self._available:
            return
        self._sounds[signal].play()

    def _build_tone_sound(self, frequency_hz: float, duration_s: float, *, gain: float) -> pygame.mixer.Sound:
        pcm = self._render_tone_pcm(frequency_hz, duration_s, gain=gain)
        return pygame.mixer.Sound(buffer=pcm.tobytes())

    def _render_tone_pcm(self, frequency_hz: float, duration_s: float, *, gain: float) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.008))
        # Exponential decay to ~1/30 of the start level by the end of the tone.
        decay = math.log(30.0) / float(duration_s)
        out = array("h")
        for idx in range(sample_count):
            t = idx / float(self._sample_rate)
            envelope = math.exp(-decay * t)
            if idx < fade_n:
                envelope *= idx / float(fade_n)
            phase = (2.0 * math.pi * float(frequency_hz) * idx) / float(self._sample_rate)
            sample = int(max(-1.0, min(1.0, math.sin(phase) * gain * envelope)) * self._amp)
            for _ in range(self._channels):
                out.append(sample)
        return out


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font, *, timers: TimerQueue) -> None:
        self._surface = surface
        self._font = font
        self._timers = timers
        self._screens: list[Screen] = []
        self._running = True
        self._palette = DARK

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def timers(self) -> TimerQueue:
        return self._timers

    @property
    def palette(self) -> Palette:
        return self._palette

    def toggle_theme(self) -> None:
        self._palette = LIGHT if self._palette is DARK else DARK

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]
    detail: Callable[[], str] | None = None


def _blit(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    color: tuple[int, int, int],
    **anchor: tuple[int, int],
) -> pygame.Rect:
    img = font.render(text, True, color)
    rect = img.get_rect(**anchor)
    surface.blit(img, rect)
    return rect


def _draw_frame(surface: pygame.Surface, palette: Palette, title: str, font: pygame.font.Font) -> pygame.Rect:
    """Window chrome shared by every screen. Returns the content rect."""

    w, h = surface.get_size()
    surface.fill(palette.bg)
    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, palette.panel, frame)
    pygame.draw.rect(surface, palette.border, frame, 2)

    header_h = max(34, min(52, h // 8))
    header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
    pygame.draw.line(surface, palette.border, (header.x, header.bottom), (header.right, header.bottom), 1)
    _blit(surface, font, title, palette.text, center=header.center)

    return pygame.Rect(frame.x + 12, header.bottom + 10, frame.w - 24, frame.bottom - header.bottom - 20)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        palette = self._app.palette
        content = _draw_frame(surface, palette, self._title, self._title_font)

        item_count = max(1, len(self._items))
        gap = 8
        row_h = max(30, min(44, (content.h - 40 - gap * (item_count + 1)) // item_count))
        total_h = row_h * item_count + gap * (item_count - 1)
        y = content.y + max(8, (content.h - 40 - total_h) // 2)

        for idx, item in enumerate(self._items):
            row = pygame.Rect(content.x + 40, y, content.w - 80, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, palette.active_bg, row)
            pygame.draw.rect(surface, palette.border, row, 1)
            color = palette.active_text if selected else palette.text
            _blit(surface, self._item_font, item.label, color, midleft=(row.x + 12, row.centery))
            if item.detail is not None:
                _blit(surface, self._item_font, item.detail(), color, midright=(row.right - 12, row.centery))
            y += row_h + gap

        footer = "Up/Down: Move  |  Enter/Space: Select  |  Esc: Back"
        _blit(surface, self._hint_font, footer, palette.muted, midbottom=(content.centerx, content.bottom))


class SequenceMemoryScreen:
    def __init__(
        self,
        app: App,
        *,
        engine_factory: Callable[[Callable[[Signal], None]], SequenceMemoryEngine],
        tones: ToneBank,
    ) -> None:
        self._app = app
        self._tones = tones
        self._engine = engine_factory(tones.emit)
        self._pressed: Signal | None = None
        self._press_timer: TimerHandle | None = None
        self._pad_rects: dict[Signal, pygame.Rect] = {}
        self._title_font = pygame.font.Font(None, 42)
        self._big_font = pygame.font.Font(None, 48)
        self._font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def engine(self) -> SequenceMemoryEngine:
        return self._engine

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._leave()
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                if self._engine.phase in (SequencePhase.IDLE, SequencePhase.GAME_OVER):
                    self._engine.start()
            elif event.key == pygame.K_r:
                self._engine.reset()
            elif event.key in PAD_KEYS:
                self._press(PAD_KEYS[event.key])
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for signal, rect in self._pad_rects.items():
                if rect.collidepoint(event.pos):
                    self._press(signal)
                    return

    def _press(self, signal: Signal) -> None:
        if self._engine.snapshot().accepting_input:
            self._tones.emit(signal)
            self._pressed = signal
            self._app.timers.cancel(self._press_timer)
            self._press_timer = self._app.timers.schedule_after(PRESS_FLASH_MS, self._release)
        self._engine.submit(signal)

    def _release(self) -> None:
        self._pressed = None
        self._press_timer = None

    def _leave(self) -> None:
        # No timer from this game may outlive its screen.
        self._engine.reset()
        self._app.timers.cancel(self._press_timer)
        self._release()
        self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        palette = self._app.palette
        snap = self._engine.snapshot()
        content = _draw_frame(surface, palette, "Simon Says", self._title_font)

        score_y = content.y + 18
        _blit(surface, self._font, f"Score: {snap.score}", palette.text, topleft=(content.x + 20, score_y))
        _blit(
            surface,
            self._font,
            f"High Score: {snap.high_score}",
            palette.text,
            topright=(content.right - 20, score_y),
        )
        _blit(surface, self._big_font, snap.status, palette.text, midtop=(content.centerx, score_y + 30))

        pad = max(60, min(110, (content.h - 150) // 2))
        gap = 16
        grid_w = pad * 2 + gap
        left = content.centerx - grid_w // 2
        top = score_y + 80
        self._pad_rects = {}
        for idx, signal in enumerate(PAD_ORDER):
            row, col = divmod(idx, 2)
            rect = pygame.Rect(left + col * (pad + gap), top + row * (pad + gap), pad, pad)
            self._pad_rects[signal] = rect
            lit = signal is snap.lit_signal or signal is self._pressed
            base = SIGNAL_COLORS[signal]
            if lit:
                color = tuple(min(255, int(c * 1.5) + 40) for c in base)
                rect = rect.inflate(10, 10)
            elif not snap.accepting_input:
                color = tuple(int(c * 0.5) for c in base)
            else:
                color = base
            pygame.draw.rect(surface, color, rect, border_radius=10)

        if snap.phase in (SequencePhase.IDLE, SequencePhase.GAME_OVER):
            action = "Enter: Start Game" if snap.phase is SequencePhase.IDLE else "Enter: Play Again"
        else:
            action = "R: Reset Game"
        hint = f"{action}  |  1-4 or Q/W/A/S or click: pads  |  Esc: Back"
        _blit(surface, self._hint_font, hint, palette.muted, midbottom=(content.centerx, content.bottom))


class TicTacToeScreen:
    def __init__(self, app: App, *, game_factory: Callable[[], TicTacToeGame]) -> None:
        self._app = app
        self._game = game_factory()
        self._cursor = 4
        self._cell_rects: list[pygame.Rect] = []
        self._title_font = pygame.font.Font(None, 42)
        self._mark_font = pygame.font.Font(None, 72)
        self._font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            key = event.key
            if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._app.pop()
            elif key == pygame.K_LEFT:
                self._cursor = self._cursor - 1 if self._cursor % 3 else self._cursor + 2
            elif key == pygame.K_RIGHT:
                self._cursor = self._cursor + 1 if self._cursor % 3 != 2 else self._cursor - 2
            elif key == pygame.K_UP:
                self._cursor = (self._cursor - 3) % 9
            elif key == pygame.K_DOWN:
                self._cursor = (self._cursor + 3) % 9
            elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._game.place(self._cursor)
            elif key == pygame.K_n:
                self._game.new_game()
            elif key == pygame.K_r:
                self._game.reset_score()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for idx, rect in enumerate(self._cell_rects):
                if rect.collidepoint(event.pos):
                    self._cursor = idx
                    self._game.place(idx)
                    return

    def render(self, surface: pygame.Surface) -> None:
        palette = self._app.palette
        snap = self._game.snapshot()
        content = _draw_frame(surface, palette, "Tic-tac-toe", self._title_font)

        score = f"X: {snap.x_wins}   O: {snap.o_wins}   Draws: {snap.draws}"
        _blit(surface, self._font, score, palette.text, midtop=(content.centerx, content.y + 10))
        _blit(surface, self._font, snap.status, palette.text, midtop=(content.centerx, content.y + 40))

        cell = max(50, min(100, (content.h - 130) // 3))
        left = content.centerx - (cell * 3) // 2
        top = content.y + 80
        highlight = set(snap.winning_line or ())
        self._cell_rects = []
        for idx, mark in enumerate(snap.board):
            row, col = divmod(idx, 3)
            rect = pygame.Rect(left + col * cell, top + row * cell, cell, cell)
            self._cell_rects.append(rect)
            if idx in highlight:
                pygame.draw.rect(surface, palette.active_bg, rect)
            pygame.draw.rect(surface, palette.border, rect, 2)
            if idx == self._cursor and not self._game.is_decided:
                pygame.draw.rect(surface, palette.muted, rect.inflate(-8, -8), 2)
            if mark is not None:
                color = (70, 120, 235) if mark is Mark.X else (225, 70, 70)
                _blit(surface, self._mark_font, mark.value, color, center=rect.center)

        hint = "Arrows + Enter or click: Place  |  N: New Game  |  R: Reset Score  |  Esc: Back"
        _blit(surface, self._hint_font, hint, palette.muted, midbottom=(content.centerx, content.bottom))


class RockPaperScissorsScreen:
    _KEYS: dict[int, Choice] = {
        pygame.K_1: Choice.ROCK,
        pygame.K_2: Choice.PAPER,
        pygame.K_3: Choice.SCISSORS,
    }

    def __init__(self, app: App, *, game_factory: Callable[[], RockPaperScissorsGame]) -> None:
        self._app = app
        self._game = game_factory()
        self._buttons: dict[Choice, pygame.Rect] = {}
        self._title_font = pygame.font.Font(None, 42)
        self._big_font = pygame.font.Font(None, 48)
        self._font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._app.pop()
            elif event.key in self._KEYS:
                self._game.play(self._KEYS[event.key])
            elif event.key == pygame.K_r:
                self._game.reset()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for choice, rect in self._buttons.items():
                if rect.collidepoint(event.pos):
                    self._game.play(choice)
                    return

    def render(self, surface: pygame.Surface) -> None:
        palette = self._app.palette
        snap = self._game.snapshot()
        content = _draw_frame(surface, palette, "Rock Paper Scissors", self._title_font)

        score = f"You {snap.player_score}  -  {snap.computer_score} Computer"
        _blit(surface, self._font, score, palette.text, midtop=(content.centerx, content.y + 10))

        mine = "?" if snap.player_choice is None else snap.player_choice.value.title()
        theirs = "?" if snap.computer_choice is None else snap.computer_choice.value.title()
        _blit(
            surface,
            self._big_font,
            f"{mine}   VS   {theirs}",
            palette.text,
            midtop=(content.centerx, content.y + 50),
        )
        if snap.banner:
            _blit(surface, self._font, snap.banner, palette.text, midtop=(content.centerx, content.y + 100))

        btn_w, btn_h, gap = 160, 44, 20
        left = content.centerx - (btn_w * 3 + gap * 2) // 2
        top = content.y + 140
        self._buttons = {}
        for idx, choice in enumerate(RockPaperScissorsGame.CHOICES):
            rect = pygame.Rect(left + idx * (btn_w + gap), top, btn_w, btn_h)
            self._buttons[choice] = rect
            pygame.draw.rect(surface, palette.active_bg, rect, border_radius=6)
            _blit(surface, self._font, f"{idx + 1}. {choice.value.title()}", palette.active_text, center=rect.center)

        y = top + btn_h + 20
        for line in snap.history:
            _blit(surface, self._hint_font, line, palette.muted, midtop=(content.centerx, y))
            y += 22

        hint = "1/2/3 or click: Choose  |  R: Reset  |  Esc: Back"
        _blit(surface, self._hint_font, hint, palette.muted, midbottom=(content.centerx, content.bottom))


class SnakeLadderScreen:
    _PLAYER_COLORS = {1: (48, 96, 220), 2: (220, 48, 48)}

    def __init__(self, app: App, *, game_factory: Callable[[], SnakeLadderGame]) -> None:
        self._app = app
        self._game = game_factory()
        self._title_font = pygame.font.Font(None, 42)
        self._font = pygame.font.Font(None, 28)
        self._cell_font = pygame.font.Font(None, 16)
        self._hint_font = pygame.font.Font(None, 22)
        self._roll_button: pygame.Rect | None = None

    @property
    def roll_button(self) -> pygame.Rect | None:
        return self._roll_button

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._game.reset()
                self._app.pop()
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._game.roll()
            elif event.key == pygame.K_r:
                self._game.reset()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._roll_button is not None and self._roll_button.collidepoint(event.pos):
                self._game.roll()

    def render(self, surface: pygame.Surface) -> None:
        palette = self._app.palette
        snap = self._game.snapshot()
        content = _draw_frame(surface, palette, "Snake & Ladder", self._title_font)

        cell = max(18, min(40, (content.h - 30) // 10))
        board = pygame.Rect(content.x + 10, content.y + 5, cell * 10, cell * 10)

        def center_of(square: int) -> tuple[int, int]:
            row, col = board_cell(square)
            return board.x + col * cell + cell // 2, board.y + row * cell + cell // 2

        for square in range(1, 101):
            row, col = board_cell(square)
            rect = pygame.Rect(board.x + col * cell, board.y + row * cell, cell, cell)
            pygame.draw.rect(surface, palette.border, rect, 1)
            _blit(surface, self._cell_font, str(square), palette.muted, topleft=(rect.x + 2, rect.y + 2))

        for foot, top in LADDERS.items():
            pygame.draw.line(surface, (40, 170, 80), center_of(foot), center_of(top), 3)
        for head, tail in SNAKES.items():
            pygame.draw.line(surface, (200, 60, 60), center_of(head), center_of(tail), 3)

        for player, square in ((1, snap.positions[0]), (2, snap.positions[1])):
            x, y = center_of(square)
            offset = -cell // 5 if player == 1 else cell // 5
            pygame.draw.circle(surface, self._PLAYER_COLORS[player], (x + offset, y), max(4, cell // 5))

        info_x = board.right + 24
        y = content.y + 10
        lines = [
            f"Player 1: {snap.positions[0]}",
            f"Player 2: {snap.positions[1]}",
            f"Dice: {'-' if snap.dice is None else snap.dice}",
            "",
        ]
        for line in lines:
            _blit(surface, self._font, line, palette.text, topleft=(info_x, y))
            y += 28

        self._roll_button = pygame.Rect(info_x, y, 160, 40)
        label = "Rolling..." if snap.rolling else "Roll Dice"
        bg = palette.active_bg if self._game.can_roll() else palette.border
        pygame.draw.rect(surface, bg, self._roll_button, border_radius=6)
        _blit(surface, self._font, label, palette.active_text, center=self._roll_button.center)
        y += 52
        _blit(surface, self._font, snap.message, palette.text, topleft=(info_x, y))
        y += 36
        for entry in snap.history:
            _blit(surface, self._hint_font, entry, palette.muted, topleft=(info_x, y))
            y += 20

        hint = "Space/Enter or click: Roll  |  R: Reset  |  Esc: Back"
        _blit(surface, self._hint_font, hint, palette.muted, bottomright=(content.right, content.bottom))


def _game_seed() -> int:
    raw = os.environ.get(SEED_ENV, "").strip()
    if raw == "":
        return new_seed()
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", SEED_ENV, raw)
        return new_seed()


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Game Hub")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()
    timers = TimerQueue(RealClock())

    app = App(surface=surface, font=font, timers=timers)
    tones = ToneBank()
    logger.info("Game Hub started (audio %s)", "on" if tones.available else "off")

    def open_rock_paper_scissors() -> None:
        seed = _game_seed()
        app.push(
            RockPaperScissorsScreen(app, game_factory=lambda: build_rock_paper_scissors_game(seed=seed))
        )

    def open_tic_tac_toe() -> None:
        app.push(TicTacToeScreen(app, game_factory=TicTacToeGame))

    def open_sequence_memory() -> None:
        seed = _game_seed()
        app.push(
            SequenceMemoryScreen(
                app,
                engine_factory=lambda emit: build_sequence_memory_game(timers=timers, seed=seed, emit=emit),
                tones=tones,
            )
        )

    def open_snake_ladder() -> None:
        seed = _game_seed()
        app.push(
            SnakeLadderScreen(app, game_factory=lambda: build_snake_ladder_game(timers=timers, seed=seed))
        )

    main_items = [
        MenuItem("Rock Paper Scissors", open_rock_paper_scissors),
        MenuItem("Tic-tac-toe", open_tic_tac_toe),
        MenuItem("Simon Says", open_sequence_memory),
        MenuItem("Snake & Ladder", open_snake_ladder),
        MenuItem("Theme", app.toggle_theme, detail=lambda: app.palette.name),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Game Hub", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            # One timer per frame, so a stalled loop still draws each pulse.
            timers.pump(max_fire=1)
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
