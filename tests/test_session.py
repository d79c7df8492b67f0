"""Measurement session state machine."""
import pytest

import geodash.measure.session as session_module
from geodash.core.exceptions import SessionReentryError
from geodash.measure.geometry import Point, area, distance
from geodash.measure.session import EffectKind, MeasurementMode, MeasurementSession, SessionState

P1 = Point(0.0, 0.0)
P2 = Point(0.0, 0.01)
P3 = Point(0.01, 0.01)
P4 = Point(0.01, 0.0)


@pytest.fixture
def session():
    return MeasurementSession()


def test_starts_inactive(session):
    assert session.state is SessionState.INACTIVE
    assert session.active_mode is None
    assert session.captured_points == ()
    assert session.finalized_count == 0


def test_transitions_are_noops_while_inactive(session):
    for effect in (
        session.add_point(P1),
        session.move_cursor(P1),
        session.finalize(),
        session.cancel_in_progress(),
        session.clear_all(),
        session.deactivate(),
    ):
        assert effect.kind is EffectKind.NONE
    assert session.captured_points == ()


def test_add_point_keeps_insertion_order(session):
    session.activate(MeasurementMode.DISTANCE)
    for p in (P3, P1, P2):
        assert session.add_point(p).kind is EffectKind.POINT_ADDED
    assert session.captured_points == (P3, P1, P2)
    assert session.point_count == 3


def test_move_cursor_does_not_capture(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    effect = session.move_cursor(P2)
    assert effect.kind is EffectKind.CURSOR_MOVED
    assert session.captured_points == (P1,)
    assert session.cursor_point == P2
    assert session.finalized == ()


def test_distance_preview_tracks_cursor(session):
    session.activate(MeasurementMode.DISTANCE)
    session.move_cursor(P1)
    assert session.preview_value is None
    session.add_point(P1)
    session.add_point(P2)
    session.move_cursor(P3)
    assert session.preview_value == pytest.approx(distance([P1, P2, P3]))
    session.move_cursor(P4)
    assert session.preview_value == pytest.approx(distance([P1, P2, P4]))


def test_area_preview_needs_three_points(session):
    session.activate(MeasurementMode.AREA)
    session.add_point(P1)
    session.move_cursor(P2)
    assert session.preview_value is None
    session.add_point(P2)
    session.move_cursor(P3)
    assert session.preview_value == pytest.approx(area([P1, P2, P3]))


def test_finalize_distance(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)
    effect = session.finalize()
    assert effect.kind is EffectKind.FINALIZED
    m = effect.measurement
    assert m.mode is MeasurementMode.DISTANCE
    assert m.points == (P1, P2)
    assert m.raw_value == pytest.approx(1113.195, abs=0.01)
    assert m.created_order == 1
    # mode stays active, ready for the next shape
    assert session.active_mode is MeasurementMode.DISTANCE
    assert session.captured_points == ()
    assert session.finalized == (m,)


def test_finalize_below_minimum_is_noop(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    assert session.finalize().kind is EffectKind.NONE
    assert session.captured_points == (P1,)
    assert session.finalized_count == 0

    session.activate(MeasurementMode.AREA)
    session.add_point(P1)
    session.add_point(P2)
    assert session.finalize().kind is EffectKind.NONE
    assert session.captured_points == (P1, P2)


def test_finalize_drops_one_trailing_duplicate(session):
    session.activate(MeasurementMode.DISTANCE)
    for p in (P1, P2, P2):
        session.add_point(p)
    m = session.finalize().measurement
    assert m.points == (P1, P2)


def test_duplicate_that_leaves_too_few_points_is_noop(session):
    session.activate(MeasurementMode.AREA)
    for p in (P1, P2, P2):
        session.add_point(p)
    assert not session.can_finalize
    assert session.finalize().kind is EffectKind.NONE
    assert session.captured_points == (P1, P2, P2)


def test_finalize_area_and_sequence_numbers(session):
    session.activate(MeasurementMode.AREA)
    for p in (P1, P2, P3, P4):
        session.add_point(p)
    first = session.finalize().measurement
    for p in (P1, P2, P3):
        session.add_point(p)
    second = session.finalize().measurement
    assert first.raw_value == pytest.approx(area([P1, P2, P3, P4]))
    assert first.raw_value > 0
    assert (first.created_order, second.created_order) == (1, 2)
    assert session.finalized == (first, second)


def test_cancel_is_idempotent_and_keeps_finalized(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)
    kept = session.finalize().measurement
    session.add_point(P3)
    session.move_cursor(P4)

    assert session.cancel_in_progress().kind is EffectKind.CANCELLED
    snapshot = (session.active_mode, session.captured_points, session.cursor_point, session.finalized)
    assert session.cancel_in_progress().kind is EffectKind.NONE
    assert (session.active_mode, session.captured_points, session.cursor_point, session.finalized) == snapshot
    assert session.captured_points == ()
    assert session.cursor_point is None
    assert session.finalized == (kept,)
    assert session.active_mode is MeasurementMode.DISTANCE


def test_cancel_with_no_points(session):
    session.activate(MeasurementMode.AREA)
    assert session.cancel_in_progress().kind is EffectKind.NONE
    assert session.state is SessionState.COLLECTING


def test_switching_mode_discards_without_finalizing(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)
    effect = session.activate(MeasurementMode.AREA)
    assert effect.kind is EffectKind.ACTIVATED
    assert session.active_mode is MeasurementMode.AREA
    assert session.captured_points == ()
    assert session.finalized_count == 0


def test_activate_keeps_finalized_measurements(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)
    session.finalize()
    session.activate(MeasurementMode.AREA)
    assert session.finalized_count == 1


def test_clear_all_keeps_mode(session):
    session.activate(MeasurementMode.AREA)
    for p in (P1, P2, P3):
        session.add_point(p)
    m = session.finalize().measurement
    session.add_point(P4)
    effect = session.clear_all()
    assert effect.kind is EffectKind.CLEARED
    assert effect.removed == (m,)
    assert session.finalized == ()
    assert session.captured_points == ()
    assert session.active_mode is MeasurementMode.AREA


def test_deactivate_clears_and_goes_inactive(session):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)
    session.finalize()
    session.add_point(P3)
    effect = session.deactivate()
    assert effect.kind is EffectKind.DEACTIVATED
    assert effect.mode is MeasurementMode.DISTANCE
    assert len(effect.removed) == 1
    assert session.state is SessionState.INACTIVE
    assert session.captured_points == ()
    assert session.finalized == ()


def test_non_finite_point_rejected(session):
    session.activate(MeasurementMode.DISTANCE)
    assert session.add_point(Point(float("nan"), 0.0)).kind is EffectKind.NONE
    assert session.captured_points == ()


def test_reentrant_transition_raises(session, monkeypatch):
    session.activate(MeasurementMode.DISTANCE)
    session.add_point(P1)
    session.add_point(P2)

    def reenter(points, radius):
        session.add_point(P3)
        return 0.0

    monkeypatch.setattr(session_module, "distance", reenter)
    with pytest.raises(SessionReentryError):
        session.finalize()
    monkeypatch.undo()
    # guard is released after the failure
    assert session.finalize().kind is EffectKind.FINALIZED
