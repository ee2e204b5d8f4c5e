from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from .game_core import SeededRng
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

STATUS_IDLE = "Press Start to begin!"
STATUS_WATCH = "Watch the sequence..."
STATUS_YOUR_TURN = "Your turn! Repeat the sequence."
STATUS_GAME_OVER = "Game Over! Wrong sequence."


class Signal(StrEnum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


class SequencePhase(StrEnum):
    IDLE = "idle"
    SHOWING = "showing"
    AWAITING_INPUT = "awaiting_input"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class SequenceMemoryConfig:
    lead_in_ms: int = 1000  # trigger -> first on-pulse
    pulse_on_ms: int = 400  # on-pulse -> off-pulse
    pulse_gap_ms: int = 600  # off-pulse -> next on-pulse


@dataclass(frozen=True, slots=True)
class PulseEvent:
    generation: int
    index: int
    signal: Signal
    lit: bool
    at_ms: int


@dataclass(frozen=True, slots=True)
class SequenceMemoryEvent:
    level: int
    index: int
    expected: Signal
    response: Signal
    is_correct: bool


@dataclass(frozen=True, slots=True)
class SequenceMemorySnapshot:
    """View model for the UI (pure data)."""

    phase: SequencePhase
    sequence_length: int
    progress: int
    score: int
    high_score: int
    lit_signal: Signal | None
    status: str
    accepting_input: bool


class SequenceGenerator:
    SIGNALS: tuple[Signal, ...] = tuple(Signal)

    def __init__(self, rng: SeededRng) -> None:
        self._rng = rng

    def next_signal(self) -> Signal:
        return self._rng.choice(self.SIGNALS)


class PlaybackScheduler:
    """Reveals a sequence as timed on/off pulses, one timer at a time.

    Each ``play()`` starts a new generation. Every callback carries the
    generation it was scheduled under and does nothing unless that generation
    is still current, so a cancelled playback cannot touch later state even
    if one of its timers were to fire.
    """

    def __init__(
        self,
        *,
        timers: Scheduler,
        config: SequenceMemoryConfig,
        emit: Callable[[Signal], None],
        on_pulse: Callable[[PulseEvent], None] | None = None,
    ) -> None:
        self._timers = timers
        self._cfg = config
        self._emit = emit
        self._on_pulse = on_pulse

        self._generation = 0
        self._sequence: tuple[Signal, ...] = ()
        self._pending: TimerHandle | None = None
        self._on_complete: Callable[[], None] | None = None
        self._lit: Signal | None = None
        self._pulses: list[PulseEvent] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active(self) -> bool:
        return self._on_complete is not None

    @property
    def lit_signal(self) -> Signal | None:
        return self._lit

    def pulses(self) -> list[PulseEvent]:
        return list(self._pulses)

    def play(self, sequence: tuple[Signal, ...], *, on_complete: Callable[[], None]) -> int:
        self.cancel()
        self._generation += 1
        gen = self._generation
        self._sequence = tuple(sequence)
        self._on_complete = on_complete
        if not self._sequence:
            self._finish()
            return gen
        self._arm(self._cfg.lead_in_ms, lambda: self._pulse_on(gen, 0))
        return gen

    def cancel(self) -> None:
        if self._pending is not None:
            self._timers.cancel(self._pending)
            self._pending = None
        if self._on_complete is not None:
            logger.debug("playback generation %d cancelled", self._generation)
        self._generation += 1
        self._sequence = ()
        self._on_complete = None
        self._lit = None

    def _arm(self, delay_ms: int, callback: Callable[[], None]) -> None:
        # One outstanding reveal timer at any instant.
        assert self._pending is None
        self._pending = self._timers.schedule_after(delay_ms, callback)

    def _pulse_on(self, gen: int, index: int) -> None:
        if gen != self._generation:
            return
        self._pending = None
        signal = self._sequence[index]
        self._lit = signal
        self._record(gen, index, signal, lit=True)
        self._emit(signal)
        self._arm(self._cfg.pulse_on_ms, lambda: self._pulse_off(gen, index))

    def _pulse_off(self, gen: int, index: int) -> None:
        if gen != self._generation:
            return
        self._pending = None
        self._lit = None
        self._record(gen, index, self._sequence[index], lit=False)
        if index + 1 < len(self._sequence):
            self._arm(self._cfg.pulse_gap_ms, lambda: self._pulse_on(gen, index + 1))
            return
        self._finish()

    def _finish(self) -> None:
        on_complete = self._on_complete
        self._on_complete = None
        self._sequence = ()
        if on_complete is not None:
            on_complete()

    def _record(self, gen: int, index: int, signal: Signal, *, lit: bool) -> None:
        pulse = PulseEvent(
            generation=gen,
            index=index,
            signal=signal,
            lit=lit,
            at_ms=self._timers.now_ms(),
        )
        self._pulses.append(pulse)
        if self._on_pulse is not None:
            self._on_pulse(pulse)


@dataclass(slots=True)
class _Session:
    phase: SequencePhase = SequencePhase.IDLE
    sequence: list[Signal] = field(default_factory=list)
    progress: int = 0
    score: int = 0


def _silent(signal: Signal) -> None:
    pass


class SequenceMemoryEngine:
    """Sequence-memory game: watch the growing sequence, then repeat it.

    Phases run Idle -> Showing -> AwaitingInput, then either back to Showing
    (via LevelComplete) with one more signal, or to GameOver on the first
    wrong press. Commands are synchronous; the only deferred work is the
    playback, which advances when the owner pumps the scheduler.

    Commands that do not apply to the current phase are ignored.
    """

    def __init__(
        self,
        *,
        timers: Scheduler,
        seed: int = 0,
        random_signal: Callable[[], Signal] | None = None,
        emit: Callable[[Signal], None] | None = None,
        config: SequenceMemoryConfig | None = None,
    ) -> None:
        cfg = config or SequenceMemoryConfig()
        if cfg.lead_in_ms <= 0:
            raise ValueError("lead_in_ms must be > 0")
        if cfg.pulse_on_ms <= 0:
            raise ValueError("pulse_on_ms must be > 0")
        if cfg.pulse_gap_ms <= 0:
            raise ValueError("pulse_gap_ms must be > 0")

        self._cfg = cfg
        self._seed = int(seed)
        self._gen = SequenceGenerator(SeededRng(self._seed))
        self._random_signal = random_signal or self._gen.next_signal
        self._playback = PlaybackScheduler(
            timers=timers,
            config=cfg,
            emit=emit or _silent,
            on_pulse=self._on_pulse,
        )

        self._session = _Session()
        self._high_score = 0
        self._status = STATUS_IDLE
        self._events: list[SequenceMemoryEvent] = []

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def config(self) -> SequenceMemoryConfig:
        return self._cfg

    @property
    def phase(self) -> SequencePhase:
        return self._session.phase

    @property
    def sequence(self) -> tuple[Signal, ...]:
        return tuple(self._session.sequence)

    @property
    def progress(self) -> int:
        return self._session.progress

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def high_score(self) -> int:
        return self._high_score

    @property
    def lit_signal(self) -> Signal | None:
        return self._playback.lit_signal

    @property
    def status(self) -> str:
        return self._status

    def events(self) -> list[SequenceMemoryEvent]:
        return list(self._events)

    def pulses(self) -> list[PulseEvent]:
        return self._playback.pulses()

    def playback_generation(self) -> int:
        return self._playback.generation

    def start(self) -> None:
        """Begin a new game from any phase; the high score carries over."""

        self._playback.cancel()
        self._session = _Session(sequence=[self._random_signal()])
        self._status = STATUS_WATCH
        logger.debug("new game, first signal %s", self._session.sequence[0])
        self._show()

    def reset(self) -> None:
        self._playback.cancel()
        self._session = _Session()
        self._status = STATUS_IDLE
        logger.debug("reset to idle (high score %d)", self._high_score)

    def submit(self, signal: Signal | str) -> None:
        session = self._session
        if session.phase is not SequencePhase.AWAITING_INPUT:
            logger.debug("ignored %s during %s", signal, session.phase.value)
            return

        response = Signal(signal)
        index = session.progress
        expected = session.sequence[index]
        is_correct = response is expected
        self._events.append(
            SequenceMemoryEvent(
                level=session.score + 1,
                index=index,
                expected=expected,
                response=response,
                is_correct=is_correct,
            )
        )

        if not is_correct:
            session.phase = SequencePhase.GAME_OVER
            if session.score > self._high_score:
                self._high_score = session.score
            self._status = STATUS_GAME_OVER
            logger.debug(
                "game over at level %d: expected %s, got %s", session.score + 1, expected, response
            )
            return

        session.progress += 1
        if session.progress < len(session.sequence):
            return

        session.score += 1
        session.progress = 0
        session.phase = SequencePhase.LEVEL_COMPLETE
        session.sequence.append(self._random_signal())
        self._status = f"Great! Level {session.score + 1}"
        logger.debug("level %d complete, sequence now %d long", session.score, len(session.sequence))
        self._show()

    def snapshot(self) -> SequenceMemorySnapshot:
        session = self._session
        return SequenceMemorySnapshot(
            phase=session.phase,
            sequence_length=len(session.sequence),
            progress=session.progress,
            score=session.score,
            high_score=self._high_score,
            lit_signal=self._playback.lit_signal,
            status=self._status,
            accepting_input=session.phase is SequencePhase.AWAITING_INPUT,
        )

    def _show(self) -> None:
        session = self._session
        session.phase = SequencePhase.SHOWING

        def done() -> None:
            if session is not self._session:
                return
            session.phase = SequencePhase.AWAITING_INPUT
            self._status = STATUS_YOUR_TURN

        self._playback.play(tuple(session.sequence), on_complete=done)

    def _on_pulse(self, pulse: PulseEvent) -> None:
        if pulse.lit and pulse.index == 0:
            self._status = STATUS_WATCH


def build_sequence_memory_game(
    *,
    timers: Scheduler,
    seed: int,
    emit: Callable[[Signal], None] | None = None,
    random_signal: Callable[[], Signal] | None = None,
    config: SequenceMemoryConfig | None = None,
) -> SequenceMemoryEngine:
    return SequenceMemoryEngine(
        timers=timers,
        seed=seed,
        random_signal=random_signal,
        emit=emit,
        config=config,
    )
