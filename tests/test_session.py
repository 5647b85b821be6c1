import pytest

from skip_analyze.models import REASON_DISTANCE_SPIKE, REASON_GAP_JUMP, TraceRow
from skip_analyze.render import SegmentStroke
from skip_analyze.session import CaptureSession, RunState, SessionStateError, replay

from conftest import feed_line


def _record_two_spike_session(session: CaptureSession) -> None:
    """10 segments, 2 of them distance spikes."""

    t = 0.0
    x = 0.0
    session.pointer_move(x, 0, t)  # reference only
    for _ in range(4):
        x += 5
        t += 10
        session.pointer_move(x, 0, t)
    x += 500
    t += 5
    session.pointer_move(x, 0, t)
    for _ in range(3):
        x += 5
        t += 10
        session.pointer_move(x, 0, t)
    x += 500
    t += 5
    session.pointer_move(x, 0, t)
    x += 5
    t += 10
    session.pointer_move(x, 0, t)


# ── state machine ────────────────────────────────────────────────────────


def test_initial_state_is_idle():
    session = CaptureSession()
    assert session.state is RunState.IDLE
    assert session.countdown == 3
    assert session.stats.score == 100
    assert session.report is None


def test_countdown_ticks_into_capturing():
    session = CaptureSession()
    session.start()
    assert session.state is RunState.COUNTDOWN
    session.tick()
    session.tick()
    assert session.state is RunState.COUNTDOWN
    assert session.countdown == 1
    session.tick()
    assert session.state is RunState.CAPTURING


def test_tick_outside_countdown_is_noop():
    session = CaptureSession()
    session.tick()
    assert session.state is RunState.IDLE
    assert session.countdown == 3


def test_no_classification_outside_capturing():
    session = CaptureSession()
    assert session.pointer_move(0, 0, 0) is None
    assert session.pointer_move(100, 0, 10) is None
    session.start()
    assert session.pointer_move(0, 0, 20) is None
    assert session.pointer_move(100, 0, 30) is None
    assert session.segments == ()
    assert session.reference_point is None


def test_cancel_returns_to_idle_and_restores_countdown():
    session = CaptureSession()
    session.start()
    session.tick()
    session.cancel()
    assert session.state is RunState.IDLE
    assert session.countdown == 3


def test_toggle_walks_the_button_cycle():
    session = CaptureSession(countdown_seconds=1)
    assert session.toggle() is None
    assert session.state is RunState.COUNTDOWN
    assert session.toggle() is None
    assert session.state is RunState.IDLE

    session.toggle()
    session.tick()
    assert session.state is RunState.CAPTURING
    feed_line(session, 5)
    report = session.toggle()
    assert session.state is RunState.IDLE
    assert report is not None
    assert report.stats.sample_count == 4


def test_zero_countdown_starts_capturing_immediately():
    session = CaptureSession(countdown_seconds=0)
    session.start()
    assert session.state is RunState.CAPTURING


@pytest.mark.parametrize("method", ["stop", "cancel"])
def test_invalid_transitions_from_idle_raise(method):
    with pytest.raises(SessionStateError):
        getattr(CaptureSession(), method)()


def test_start_while_capturing_raises(capturing):
    with pytest.raises(SessionStateError):
        capturing.start()
    with pytest.raises(SessionStateError):
        capturing.cancel()


# ── pointer handling ─────────────────────────────────────────────────────


def test_first_sample_is_reference_only(capturing):
    assert capturing.pointer_move(10, 10, 0) is None
    assert capturing.segments == ()
    assert capturing.reference_point is not None
    seg = capturing.pointer_move(13, 14, 10)
    assert seg is not None
    assert seg.distance == pytest.approx(5.0)


def test_non_positive_dt_does_not_advance_reference(capturing):
    capturing.pointer_move(0, 0, 100)
    assert capturing.pointer_move(50, 0, 100) is None
    assert capturing.pointer_move(50, 0, 90) is None
    ref = capturing.reference_point
    assert (ref.x, ref.t) == (0, 100)
    seg = capturing.pointer_move(5, 0, 110)
    assert seg is not None
    assert seg.dt == 10
    assert seg.distance == pytest.approx(5.0)


def test_pointer_leave_resets_reference_but_keeps_segments(capturing):
    feed_line(capturing, 4)
    assert len(capturing.segments) == 3
    capturing.pointer_leave()
    assert capturing.reference_point is None
    assert capturing.pointer_move(900, 900, 1000) is None
    assert len(capturing.segments) == 3
    assert capturing.pointer_move(905, 900, 1010) is not None
    assert len(capturing.segments) == 4


def test_clean_motion_scenario(capturing):
    feed_line(capturing, 101)
    assert len(capturing.segments) == 100
    assert not any(s.is_skip for s in capturing.segments)
    assert capturing.stats.score == 100


def test_distance_spike_scenario(capturing):
    x, t = feed_line(capturing, 261)
    seg = capturing.pointer_move(x + 500, 0, t + 5)
    assert seg is not None and seg.is_skip
    assert seg.reason == REASON_DISTANCE_SPIKE
    assert capturing.stats.skip_count == 1
    assert capturing.recent_skips[0].reason == REASON_DISTANCE_SPIKE
    assert capturing.recent_skips[0].at == t + 5


def test_gap_jump_scenario(capturing):
    x, t = feed_line(capturing, 261)
    seg = capturing.pointer_move(x + 50, 0, t + 300)
    assert seg is not None and seg.is_skip
    assert seg.reason == REASON_GAP_JUMP
    assert capturing.stats.skip_count == 1


def test_segment_log_is_bounded_fifo():
    session = CaptureSession(sample_limit=50, countdown_seconds=0)
    session.start()
    feed_line(session, 80)
    segs = session.segments
    assert len(segs) == 50
    # oldest evicted: 79 segments produced, the first 29 are gone
    assert segs[0].t == 30 * 10
    assert segs[-1].t == 79 * 10
    assert [s.t for s in segs] == sorted(s.t for s in segs)


def test_default_segment_log_cap(capturing):
    feed_line(capturing, 12_010)
    assert len(capturing.segments) == 12_000


def test_recent_skips_are_newest_first_and_capped(capturing):
    x, t = feed_line(capturing, 30)
    spike_times = []
    for _ in range(10):
        x += 500
        t += 5
        assert capturing.pointer_move(x, 0, t).is_skip
        spike_times.append(t)
        for _ in range(30):
            x += 5
            t += 10
            capturing.pointer_move(x, 0, t)
    skips = capturing.recent_skips
    assert len(skips) == 8
    assert [e.at for e in skips] == list(reversed(spike_times))[:8]
    assert capturing.stats.skip_count == 10


def test_on_segment_receives_strokes():
    strokes: list[SegmentStroke] = []
    session = CaptureSession(on_segment=strokes.append, countdown_seconds=0)
    session.start()
    session.pointer_move(0, 0, 0)
    session.pointer_move(3, 4, 10)
    assert strokes == [SegmentStroke(0, 0, 3, 4, False)]


def test_determinism():
    rows = [TraceRow(t=i * 10.0, x=i * 5.0, y=(i % 7) * 2.0) for i in range(300)]
    rows.insert(150, TraceRow(t=1495.0, x=2000.0, y=0.0))
    a = replay(rows)
    b = replay(rows)
    assert a.segments == b.segments
    assert a.recent_skips == b.recent_skips
    assert a.stats == b.stats


# ── reports ──────────────────────────────────────────────────────────────


def test_stop_without_segments_issues_no_report(capturing):
    capturing.pointer_move(0, 0, 0)
    assert capturing.stop() is None
    assert capturing.report is None


def test_report_is_frozen_after_stop(capturing):
    _record_two_spike_session(capturing)
    assert len(capturing.segments) == 10
    report = capturing.stop()
    assert report is not None
    assert report.stats.sample_count == 10
    assert report.stats.skip_count == 2
    assert report.stats.score == 74
    assert len(report.recent_skips) == 2
    snapshot_stats = report.stats
    snapshot_skips = report.recent_skips

    # the live session moves on; the issued report does not
    capturing.start()
    capturing.skip_countdown()
    _record_two_spike_session(capturing)
    feed_line(capturing, 20, x0=5000, t0=5000)
    assert capturing.report is None
    assert report.stats == snapshot_stats
    assert report.recent_skips == snapshot_skips
    assert report.stats.sample_count == 10
    with pytest.raises(AttributeError):
        report.stats = None  # type: ignore[misc]


def test_start_after_stop_clears_previous_session(capturing):
    feed_line(capturing, 5)
    capturing.stop()
    assert capturing.report is not None
    assert len(capturing.segments) == 4
    capturing.start()
    assert capturing.segments == ()
    assert capturing.report is None


def test_reset_clears_everything(capturing):
    _record_two_spike_session(capturing)
    capturing.reset()
    assert capturing.state is RunState.IDLE
    assert capturing.segments == ()
    assert capturing.recent_skips == ()
    assert capturing.reference_point is None
    assert capturing.stats.score == 100


def test_replay_handles_leave_rows():
    rows = [TraceRow(t=0, x=0, y=0), TraceRow(t=10, x=5, y=0), TraceRow(t=15, x=0, y=0, event="leave"),
            TraceRow(t=20, x=900, y=900), TraceRow(t=30, x=905, y=900)]
    session = replay(rows)
    assert session.state is RunState.IDLE
    # the jump to (900, 900) happens across the leave and is not a segment
    assert len(session.segments) == 2
    assert session.stats.total_distance == pytest.approx(10.0)
    assert session.report is not None


def test_non_finite_samples_leave_session_intact(capturing):
    x, t = feed_line(capturing, 21)
    assert capturing.pointer_move(x + 5, 0, float("nan")) is None
    assert capturing.pointer_move(float("inf"), 0, t + 10) is None
    assert capturing.reference_point.t == t
    feed_line(capturing, 20, x0=x + 5, t0=t + 10)
    stats = capturing.stats
    assert stats.sample_count == 40
    assert all(s.dt > 0 for s in capturing.segments)
    assert stats.avg_speed == pytest.approx(0.5)
    assert stats.total_distance == pytest.approx(200.0)


def test_non_finite_first_sample_is_not_a_reference(capturing):
    assert capturing.pointer_move(float("nan"), 0, 0) is None
    assert capturing.reference_point is None
