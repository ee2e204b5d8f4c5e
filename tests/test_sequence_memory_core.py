from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass

import pytest

from game_hub.game_core import SeededRng
from game_hub.scheduler import TimerHandle, TimerQueue
from game_hub.sequence_memory import (
    STATUS_GAME_OVER,
    STATUS_IDLE,
    STATUS_WATCH,
    STATUS_YOUR_TURN,
    PlaybackScheduler,
    PulseEvent,
    SequenceGenerator,
    SequenceMemoryConfig,
    SequenceMemoryEngine,
    SequencePhase,
    Signal,
    build_sequence_memory_game,
)

R, B, G, Y = Signal.RED, Signal.BLUE, Signal.GREEN, Signal.YELLOW


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _scripted(signals: list[Signal]) -> Callable[[], Signal]:
    stream = iter(signals)
    return lambda: next(stream)


def _make(signals: list[Signal]) -> tuple[FakeClock, TimerQueue, SequenceMemoryEngine, list[Signal]]:
    clock = FakeClock()
    timers = TimerQueue(clock)
    emitted: list[Signal] = []
    engine = build_sequence_memory_game(
        timers=timers,
        seed=1,
        emit=emitted.append,
        random_signal=_scripted(signals),
    )
    return clock, timers, engine, emitted


def _advance(clock: FakeClock, timers: TimerQueue, dt_s: float) -> None:
    clock.advance(dt_s)
    timers.pump()


def _finish_playback(clock: FakeClock, timers: TimerQueue, engine: SequenceMemoryEngine) -> None:
    for _ in range(2000):
        if engine.phase is not SequencePhase.SHOWING:
            return
        _advance(clock, timers, 0.05)
    raise AssertionError("playback did not finish")


def _clear_level(clock: FakeClock, timers: TimerQueue, engine: SequenceMemoryEngine) -> None:
    _finish_playback(clock, timers, engine)
    assert engine.phase is SequencePhase.AWAITING_INPUT
    for signal in engine.sequence:
        engine.submit(signal)


def _generation_pulses(engine: SequenceMemoryEngine, generation: int) -> list[PulseEvent]:
    return [p for p in engine.pulses() if p.generation == generation]


def test_new_engine_is_idle_and_ignores_input() -> None:
    _, _, engine, emitted = _make([R])

    snap = engine.snapshot()
    assert snap.phase is SequencePhase.IDLE
    assert snap.sequence_length == 0
    assert snap.score == 0
    assert snap.high_score == 0
    assert snap.lit_signal is None
    assert snap.status == STATUS_IDLE
    assert snap.accepting_input is False

    engine.submit(R)
    assert engine.snapshot() == snap
    assert engine.events() == []
    assert emitted == []


def test_single_signal_round_then_level_up_replays_whole_sequence() -> None:
    clock, timers, engine, emitted = _make([R, B])

    engine.start()
    assert engine.phase is SequencePhase.SHOWING
    assert engine.sequence == (R,)
    assert engine.status == STATUS_WATCH

    _advance(clock, timers, 0.999)
    assert engine.lit_signal is None
    assert emitted == []

    _advance(clock, timers, 0.001)
    assert engine.lit_signal is R
    assert emitted == [R]
    assert engine.phase is SequencePhase.SHOWING

    _advance(clock, timers, 0.4)
    assert engine.lit_signal is None
    assert engine.phase is SequencePhase.AWAITING_INPUT
    assert engine.status == STATUS_YOUR_TURN

    engine.submit(R)
    assert engine.score == 1
    assert engine.sequence == (R, B)
    assert engine.progress == 0
    assert engine.phase is SequencePhase.SHOWING
    assert engine.status == "Great! Level 2"

    gen = engine.playback_generation()
    _finish_playback(clock, timers, engine)

    pulses = _generation_pulses(engine, gen)
    assert [(p.index, p.signal, p.lit) for p in pulses] == [
        (0, R, True),
        (0, R, False),
        (1, B, True),
        (1, B, False),
    ]
    # Level-up happened at 1400 ms.
    assert [p.at_ms for p in pulses] == [2400, 2800, 3400, 3800]
    assert emitted == [R, R, B]
    assert engine.phase is SequencePhase.AWAITING_INPUT


def test_next_signal_is_drawn_while_idle_then_while_level_complete() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    stream = iter([R, B, G])
    phases_at_draw: list[SequencePhase] = []
    engines: list[SequenceMemoryEngine] = []

    def draw() -> Signal:
        phases_at_draw.append(engines[0].phase)
        return next(stream)

    engines.append(build_sequence_memory_game(timers=timers, seed=1, random_signal=draw))
    engine = engines[0]

    engine.start()
    assert phases_at_draw == [SequencePhase.IDLE]

    _clear_level(clock, timers, engine)
    assert phases_at_draw == [SequencePhase.IDLE, SequencePhase.LEVEL_COMPLETE]
    assert engine.phase is SequencePhase.SHOWING
    assert engine.sequence == (R, B)


def test_stalled_frame_drains_playback_one_timer_per_pump() -> None:
    clock, timers, engine, emitted = _make([R, B, G])
    engine.start()
    _clear_level(clock, timers, engine)
    assert engine.phase is SequencePhase.SHOWING

    clock.advance(10.0)
    lit_seen: list[Signal] = []
    for _ in range(20):
        if engine.phase is not SequencePhase.SHOWING:
            break
        assert timers.pump(max_fire=1) == 1
        if engine.lit_signal is not None:
            lit_seen.append(engine.lit_signal)
    else:
        raise AssertionError("playback did not drain")

    assert lit_seen == [R, B]
    assert emitted[-2:] == [R, B]
    assert engine.phase is SequencePhase.AWAITING_INPUT


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
def test_playback_emits_n_ordered_pulse_pairs_with_fixed_delays(n: int) -> None:
    signals = [R, B, G, Y] * 3
    clock, timers, engine, _ = _make(signals)

    engine.start()
    for _ in range(n - 1):
        _clear_level(clock, timers, engine)
    assert len(engine.sequence) == n

    gen = engine.playback_generation()
    t0 = timers.now_ms()
    cfg = SequenceMemoryConfig()
    last_off_ms = t0 + cfg.lead_in_ms + (n - 1) * (cfg.pulse_on_ms + cfg.pulse_gap_ms) + cfg.pulse_on_ms

    # Still showing one millisecond before the final off-pulse.
    _advance(clock, timers, (last_off_ms - 1 - t0) / 1000.0)
    assert engine.phase is SequencePhase.SHOWING
    _advance(clock, timers, 0.001)
    assert engine.phase is SequencePhase.AWAITING_INPUT

    pulses = _generation_pulses(engine, gen)
    assert len(pulses) == 2 * n

    expected_ms = t0 + cfg.lead_in_ms
    for i in range(n):
        on, off = pulses[2 * i], pulses[2 * i + 1]
        assert (on.index, on.lit, on.signal) == (i, True, engine.sequence[i])
        assert (off.index, off.lit, off.signal) == (i, False, engine.sequence[i])
        assert on.at_ms == expected_ms
        assert off.at_ms == on.at_ms + cfg.pulse_on_ms
        expected_ms = off.at_ms + cfg.pulse_gap_ms

    stamps = [p.at_ms for p in pulses]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


def test_input_during_showing_is_dropped_not_queued() -> None:
    clock, timers, engine, _ = _make([R, B])
    engine.start()

    _advance(clock, timers, 1.1)
    assert engine.phase is SequencePhase.SHOWING
    before = engine.snapshot()
    engine.submit(R)
    engine.submit(G)
    after = engine.snapshot()
    assert after == before
    assert engine.events() == []

    _finish_playback(clock, timers, engine)
    assert engine.phase is SequencePhase.AWAITING_INPUT
    assert engine.progress == 0
    assert engine.score == 0
    assert engine.sequence == (R,)


def test_wrong_first_press_ends_game_without_touching_high_score() -> None:
    clock, timers, engine, _ = _make([R])
    engine.start()
    _finish_playback(clock, timers, engine)

    engine.submit(G)

    assert engine.phase is SequencePhase.GAME_OVER
    assert engine.status == STATUS_GAME_OVER
    assert engine.score == 0
    assert engine.high_score == 0
    [event] = engine.events()
    assert (event.level, event.index, event.expected, event.response, event.is_correct) == (1, 0, R, G, False)


def test_mismatch_on_second_position_compares_only_that_position() -> None:
    clock, timers, engine, _ = _make([R, B])
    engine.start()
    _clear_level(clock, timers, engine)
    assert engine.sequence == (R, B)

    _finish_playback(clock, timers, engine)
    engine.submit(R)
    assert engine.phase is SequencePhase.AWAITING_INPUT
    assert engine.progress == 1

    engine.submit(G)
    assert engine.phase is SequencePhase.GAME_OVER
    assert engine.high_score == 1
    assert engine.events()[-1].expected is B
    assert engine.events()[-1].index == 1


def test_game_over_ignores_submissions() -> None:
    clock, timers, engine, _ = _make([R])
    engine.start()
    _finish_playback(clock, timers, engine)
    engine.submit(Y)

    frozen = engine.snapshot()
    engine.submit(R)
    engine.submit(Y)
    assert engine.snapshot() == frozen
    assert len(engine.events()) == 1


def test_level_round_trip_grows_by_one_and_restarts_at_index_zero() -> None:
    clock, timers, engine, _ = _make([Y, G, R, B])
    engine.start()

    for n in (1, 2, 3):
        _finish_playback(clock, timers, engine)
        score_before = engine.score
        seq_before = engine.sequence
        assert len(seq_before) == n

        for signal in seq_before:
            engine.submit(signal)

        assert len(engine.sequence) == n + 1
        assert engine.sequence[:n] == seq_before
        assert engine.score == score_before + 1
        assert engine.progress == 0
        assert engine.phase is SequencePhase.SHOWING

        gen = engine.playback_generation()
        _advance(clock, timers, 1.0)
        first = _generation_pulses(engine, gen)[0]
        assert (first.index, first.signal, first.lit) == (0, engine.sequence[0], True)


def test_high_score_is_monotonic_across_games() -> None:
    signals = [R, B, G, Y] * 10
    clock, timers, engine, _ = _make(signals)
    seen: list[int] = []

    for levels_cleared in (2, 1, 3, 0):
        engine.start()
        assert engine.score == 0
        for _ in range(levels_cleared):
            _clear_level(clock, timers, engine)
        _finish_playback(clock, timers, engine)
        wrong = next(s for s in Signal if s is not engine.sequence[0])
        engine.submit(wrong)
        assert engine.phase is SequencePhase.GAME_OVER
        seen.append(engine.high_score)

    assert seen == [2, 2, 3, 3]


def test_reset_during_showing_cancels_old_pulses() -> None:
    clock, timers, engine, emitted = _make([R, B])
    engine.start()
    _advance(clock, timers, 1.0)
    assert engine.lit_signal is R

    engine.reset()
    frozen = engine.snapshot()
    assert frozen.phase is SequencePhase.IDLE
    assert frozen.lit_signal is None
    assert frozen.status == STATUS_IDLE
    pulses_before = engine.pulses()

    _advance(clock, timers, 30.0)

    assert engine.snapshot() == frozen
    assert engine.pulses() == pulses_before
    assert emitted == [R]
    assert timers.pending_count() == 0


def test_restart_during_showing_only_shows_new_sequence() -> None:
    clock, timers, engine, emitted = _make([R, G])
    engine.start()
    _advance(clock, timers, 0.5)

    engine.start()
    assert engine.sequence == (G,)
    gen = engine.playback_generation()

    # The old lead-in (1000 ms) would have fired here.
    _advance(clock, timers, 0.5)
    assert emitted == []
    assert engine.lit_signal is None

    _finish_playback(clock, timers, engine)
    assert emitted == [G]
    assert all(p.generation == gen for p in engine.pulses())
    assert [p.at_ms for p in engine.pulses()] == [1500, 1900]
    assert engine.phase is SequencePhase.AWAITING_INPUT


def test_start_after_game_over_keeps_high_score_and_discards_session() -> None:
    clock, timers, engine, _ = _make([R, B, Y])
    engine.start()
    _clear_level(clock, timers, engine)
    _finish_playback(clock, timers, engine)
    engine.submit(Y)
    assert engine.high_score == 1

    engine.start()
    assert engine.phase is SequencePhase.SHOWING
    assert engine.sequence == (Y,)
    assert engine.score == 0
    assert engine.progress == 0
    assert engine.high_score == 1

    engine.reset()
    assert engine.high_score == 1
    assert engine.sequence == ()


class _LeakyScheduler:
    """Scheduler whose cancel() does nothing, to prove the generation guard."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], None]] = []

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        self.callbacks.append(callback)
        return TimerHandle(timer_id=len(self.callbacks), deadline_ms=delay_ms, callback=callback)

    def cancel(self, handle: TimerHandle | None) -> None:
        _ = handle

    def now_ms(self) -> int:
        return 0


def test_stale_callback_from_cancelled_playback_has_no_effect() -> None:
    timers = _LeakyScheduler()
    emitted: list[Signal] = []
    completed: list[bool] = []
    playback = PlaybackScheduler(timers=timers, config=SequenceMemoryConfig(), emit=emitted.append)

    playback.play((R, B), on_complete=lambda: completed.append(True))
    stale = timers.callbacks[-1]
    playback.cancel()

    stale()

    assert emitted == []
    assert playback.pulses() == []
    assert playback.lit_signal is None
    assert completed == []
    assert playback.active is False


def test_playback_keeps_a_single_timer_outstanding() -> None:
    clock = FakeClock()
    timers = TimerQueue(clock)
    playback = PlaybackScheduler(timers=timers, config=SequenceMemoryConfig(), emit=lambda _s: None)

    playback.play((R, B, G), on_complete=lambda: None)
    for _ in range(100):
        assert timers.pending_count() <= 1
        _advance(clock, timers, 0.05)
    assert timers.pending_count() == 0
    assert playback.active is False


def test_string_signals_are_accepted_and_unknown_ones_rejected() -> None:
    clock, timers, engine, _ = _make([R, B])
    engine.start()
    _finish_playback(clock, timers, engine)

    engine.submit("red")
    assert engine.score == 1

    _finish_playback(clock, timers, engine)
    with pytest.raises(ValueError):
        engine.submit("purple")


def test_status_follows_the_level_banner_then_watch_prompt() -> None:
    clock, timers, engine, _ = _make([R, B])
    engine.start()
    _finish_playback(clock, timers, engine)
    engine.submit(R)
    assert engine.status == "Great! Level 2"

    _advance(clock, timers, 0.999)
    assert engine.status == "Great! Level 2"
    _advance(clock, timers, 0.001)
    assert engine.status == STATUS_WATCH

    _finish_playback(clock, timers, engine)
    assert engine.status == STATUS_YOUR_TURN


@pytest.mark.parametrize(
    "config",
    [
        SequenceMemoryConfig(lead_in_ms=0),
        SequenceMemoryConfig(pulse_on_ms=-5),
        SequenceMemoryConfig(pulse_gap_ms=0),
    ],
)
def test_invalid_config_is_rejected(config: SequenceMemoryConfig) -> None:
    with pytest.raises(ValueError):
        SequenceMemoryEngine(timers=TimerQueue(FakeClock()), config=config)


def test_generator_is_deterministic_and_covers_every_signal() -> None:
    g1 = SequenceGenerator(SeededRng(2024))
    g2 = SequenceGenerator(SeededRng(2024))

    draws1 = [g1.next_signal() for _ in range(400)]
    draws2 = [g2.next_signal() for _ in range(400)]
    assert draws1 == draws2

    counts = Counter(draws1)
    assert set(counts) == set(Signal)
    assert all(60 <= c <= 140 for c in counts.values())


def test_default_generator_is_seeded() -> None:
    clock = FakeClock()
    mirror = SequenceGenerator(SeededRng(77))
    engine = build_sequence_memory_game(timers=TimerQueue(clock), seed=77)

    engine.start()
    assert engine.sequence == (mirror.next_signal(),)
