"""Tests for the scheduler, the playback controller and the Session."""

import pytest

from bst_engine import History, Node, collect_keys, preorder_nodes
from playback import (ManualScheduler, OperationKind, PlaybackConfig,
                      PlaybackController, PlaybackState, ScheduledTask,
                      Session, TkScheduler)


def filled_history(n):
    history = History()
    for i in range(n):
        history.append(Node(i), f"step {i}")
    return history


class LeakyScheduler(ManualScheduler):
    """Scheduler whose cancel() does nothing, like a timer that already fired."""

    def cancel(self, token):
        pass


# ─── ManualScheduler / ScheduledTask ────────────────────────────

def test_manual_scheduler_fires_in_due_order(scheduler):
    fired = []
    scheduler.schedule(300, lambda: fired.append("b"))
    scheduler.schedule(100, lambda: fired.append("a"))
    scheduler.schedule(300, lambda: fired.append("c"))
    assert scheduler.next_delay() == 100
    assert scheduler.advance(99) == 0
    assert scheduler.advance(1) == 1
    assert scheduler.advance(500) == 2
    assert fired == ["a", "b", "c"]
    assert scheduler.now == 600


def test_manual_scheduler_cancel(scheduler):
    fired = []
    token = scheduler.schedule(10, lambda: fired.append(1))
    scheduler.cancel(token)
    assert scheduler.pending == 0
    scheduler.advance(100)
    assert fired == []
    assert scheduler.next_delay() is None


def test_cancelled_task_ignores_late_timer():
    scheduler = LeakyScheduler()
    fired = []
    task = ScheduledTask(scheduler, 50, lambda: fired.append(1))
    task.cancel()
    scheduler.advance(100)
    assert fired == []
    assert task.cancelled and not task.active


def test_task_fires_once():
    scheduler = ManualScheduler()
    fired = []
    task = ScheduledTask(scheduler, 5, lambda: fired.append(1))
    scheduler.advance(5)
    task.cancel()
    assert fired == [1]
    assert task.fired and not task.cancelled


def test_tk_scheduler_delegates_to_after():
    calls = []

    class FakeWidget:
        def after(self, ms, cb):
            calls.append(("after", ms))
            return "after#1"

        def after_cancel(self, token):
            calls.append(("cancel", token))

    tk = TkScheduler(FakeWidget())
    token = tk.schedule(250, lambda: None)
    tk.cancel(token)
    assert calls == [("after", 250), ("cancel", "after#1")]


# ─── Controller: manual navigation ──────────────────────────────

def test_empty_history_is_idle_and_navigation_is_noop(scheduler, config):
    pb = PlaybackController(History(), scheduler, config)
    assert pb.state is PlaybackState.IDLE
    pb.start_playback()
    pb.step_forward()
    pb.step_backward()
    pb.restart()
    pb.go_end()
    pb.play()
    pb.pause()
    assert pb.cursor == -1
    assert pb.current_snapshot() is None
    assert not pb.can_step_back() and not pb.can_step_forward()
    assert not pb.history_non_empty()
    assert scheduler.pending == 0


def test_boundaries_and_predicates(scheduler, config):
    rendered = []
    pb = PlaybackController(filled_history(3), scheduler, config,
                            on_render=lambda s: rendered.append(s.status))
    pb.start_playback()
    assert pb.cursor == 0 and pb.state is PlaybackState.PAUSED
    assert not pb.can_step_back() and pb.can_step_forward()

    pb.step_backward()
    assert pb.cursor == 0

    pb.step_forward()
    pb.step_forward()
    assert pb.cursor == 2
    assert pb.can_step_back() and not pb.can_step_forward()

    pb.step_forward()
    assert pb.cursor == 2

    pb.step_backward()
    assert pb.cursor == 1
    assert rendered == ["step 0", "step 1", "step 2", "step 1"]


def test_go_end_and_restart_without_autoplay(scheduler, config):
    pb = PlaybackController(filled_history(4), scheduler, config)
    pb.start_playback()
    pb.go_end()
    assert pb.current_snapshot().status == "step 3"
    pb.restart()
    assert pb.cursor == 0
    assert pb.state is PlaybackState.PAUSED
    assert scheduler.pending == 0


# ─── Controller: auto-play ──────────────────────────────────────

def test_autoplay_advances_with_speed_delay(scheduler):
    cfg = PlaybackConfig(speed=600, auto_play=True)
    pb = PlaybackController(filled_history(3), scheduler, cfg)
    pb.start_playback()
    assert pb.state is PlaybackState.PLAYING
    assert pb.delay_ms() == 500
    assert scheduler.next_delay() == 500

    scheduler.advance(499)
    assert pb.cursor == 0
    scheduler.advance(1)
    assert pb.cursor == 1

    scheduler.advance(500)
    assert pb.cursor == 2
    assert pb.state is PlaybackState.PAUSED
    assert scheduler.pending == 0


def test_speed_is_read_when_each_tick_is_scheduled(scheduler):
    cfg = PlaybackConfig(speed=100, auto_play=True)
    pb = PlaybackController(filled_history(4), scheduler, cfg)
    pb.start_playback()
    assert scheduler.next_delay() == 1000
    cfg.speed = 1000
    scheduler.advance(1000)
    assert pb.cursor == 1
    assert scheduler.next_delay() == 100


def test_autoplay_single_snapshot_does_not_schedule(scheduler):
    pb = PlaybackController(filled_history(1), scheduler,
                            PlaybackConfig(auto_play=True))
    pb.start_playback()
    assert pb.state is PlaybackState.PAUSED
    assert scheduler.pending == 0


def test_manual_step_cancels_autoplay(scheduler):
    pb = PlaybackController(filled_history(5), scheduler,
                            PlaybackConfig(auto_play=True))
    pb.start_playback()
    pb.step_forward()
    assert pb.state is PlaybackState.PAUSED
    assert scheduler.pending == 0
    scheduler.run_all()
    assert pb.cursor == 1


def test_restart_reenters_playing_when_autoplay(scheduler):
    cfg = PlaybackConfig(auto_play=True)
    pb = PlaybackController(filled_history(3), scheduler, cfg)
    pb.start_playback()
    scheduler.run_all()
    assert pb.cursor == 2
    pb.restart()
    assert pb.cursor == 0
    assert pb.state is PlaybackState.PLAYING
    cfg.auto_play = False
    pb.restart()
    assert pb.state is PlaybackState.PAUSED


def test_play_and_pause_ignore_toggle(scheduler, config):
    pb = PlaybackController(filled_history(3), scheduler, config)
    pb.start_playback()
    pb.play()
    assert pb.state is PlaybackState.PLAYING
    pb.pause()
    assert pb.state is PlaybackState.PAUSED
    pb.play()
    scheduler.run_all()
    assert pb.cursor == 2
    pb.play()
    assert scheduler.pending == 0


def test_turning_autoplay_off_stops_the_running_loop(scheduler):
    cfg = PlaybackConfig(speed=1000, auto_play=True)
    pb = PlaybackController(filled_history(5), scheduler, cfg)
    pb.start_playback()
    scheduler.advance(100)
    assert pb.cursor == 1

    cfg.auto_play = False
    scheduler.run_all()
    # the tick already queued still lands, nothing after it
    assert pb.cursor == 2
    assert pb.state is PlaybackState.PAUSED
    assert scheduler.pending == 0


def test_play_keeps_running_when_autoplay_is_off(scheduler):
    cfg = PlaybackConfig(speed=1000, auto_play=True)
    pb = PlaybackController(filled_history(5), scheduler, cfg)
    pb.start_playback()
    pb.pause()
    cfg.auto_play = False
    pb.play()
    scheduler.run_all()
    assert pb.cursor == 4

    pb.restart()
    assert pb.state is PlaybackState.PAUSED


def test_listener_sees_playing_state_during_autoplay(scheduler):
    states = []
    pb = PlaybackController(filled_history(3), scheduler,
                            PlaybackConfig(auto_play=True))
    pb.on_render = lambda snap: states.append(pb.state)
    pb.start_playback()
    scheduler.run_all()
    assert states == [PlaybackState.PLAYING, PlaybackState.PLAYING,
                      PlaybackState.PAUSED]


# ─── Session ────────────────────────────────────────────────────

def test_session_insert_scenario(session):
    for key in (5, 3, 8):
        session.perform_operation(OperationKind.INSERT, key)
    assert collect_keys(session.root) == [3, 5, 8]
    assert session.history.statuses() == [
        "Compare 8 with 5", "Insert 8 on the right of 5", "Operation complete"]
    assert session.current_snapshot().status == "Compare 8 with 5"
    assert session.playback.cursor == 0


def test_session_first_insert_history(session):
    session.perform_operation("insert", 5)
    assert session.history.statuses() == ["Created root node 5",
                                          "Operation complete"]
    assert session.history.last.sequence == ()


def test_session_delete_scenario(seven_session):
    assert seven_session.root.key == 4
    assert not seven_session.history_non_empty()
    seven_session.perform_operation(OperationKind.DELETE, 5)
    assert collect_keys(seven_session.root) == [1, 2, 3, 4, 6, 7]
    assert seven_session.history.last.status == "Operation complete"
    assert collect_keys(seven_session.history.last.tree) == [1, 2, 3, 4, 6, 7]


def test_session_delete_missing_key(seven_session):
    seven_session.perform_operation(OperationKind.DELETE, 42)
    statuses = seven_session.history.statuses()
    assert statuses.count("Key 42 not found") == 1
    assert statuses[-2:] == ["Key 42 not found", "Operation complete"]
    assert collect_keys(seven_session.root) == [1, 2, 3, 4, 5, 6, 7]


def test_session_delete_on_empty_tree(session):
    session.perform_operation(OperationKind.DELETE, 1)
    assert session.history.statuses() == ["Key 1 not found",
                                          "Operation complete"]


def test_session_traversal_then_insert_clears_flags(seven_session):
    seq = seven_session.perform_traversal("inorder")
    assert seq == [1, 2, 3, 4, 5, 6, 7]
    assert all(n.visited for n in preorder_nodes(seven_session.root))

    seven_session.perform_operation(OperationKind.INSERT, 8)
    first = seven_session.history[0].tree
    assert not any(n.visited for n in preorder_nodes(first))


def test_session_traversal_on_empty_tree_is_idle(session):
    assert session.perform_traversal("postorder") == []
    assert session.playback.state is PlaybackState.IDLE
    assert session.current_snapshot() is None


def test_new_operation_cancels_running_playback():
    scheduler = ManualScheduler()
    cfg = PlaybackConfig(speed=1000, auto_play=True)
    sess = Session(scheduler=scheduler, config=cfg)
    sess.load_keys([1, 2, 3, 4, 5, 6, 7])
    sess.perform_traversal("preorder")
    scheduler.advance(100 * 3)
    assert sess.playback.cursor == 3

    sess.perform_operation(OperationKind.INSERT, 9)
    assert sess.playback.cursor == 0
    assert scheduler.pending == 1
    scheduler.run_all()
    assert sess.playback.cursor == len(sess.history) - 1
    assert sess.current_snapshot().status == "Operation complete"


def test_load_keys_stops_playback_and_resets(session, scheduler):
    session.playback.config.auto_play = True
    session.perform_operation(OperationKind.INSERT, 5)
    session.perform_operation(OperationKind.INSERT, 6)
    assert scheduler.pending == 1
    session.load_keys([1, 3, 4, 7])
    assert scheduler.pending == 0
    assert session.playback.cursor == -1
    assert session.root.key == 3


def test_clear_tree(seven_session):
    seven_session.perform_operation(OperationKind.INSERT, 8)
    seven_session.clear_tree()
    assert seven_session.root is None
    assert not seven_session.history_non_empty()


def test_session_navigation_delegates(seven_session):
    seven_session.perform_operation(OperationKind.DELETE, 4)
    assert seven_session.can_step_forward() and not seven_session.can_step_back()
    seven_session.step_forward()
    assert seven_session.current_snapshot().status == "Found target 4"
    seven_session.step_backward()
    seven_session.step_backward()
    assert seven_session.playback.cursor == 0
    seven_session.restart()
    assert seven_session.playback.cursor == 0


def test_session_renders_through_callback(scheduler, config):
    seen = []
    sess = Session(scheduler=scheduler, config=config, on_render=seen.append)
    sess.perform_operation(OperationKind.INSERT, 1)
    assert seen[-1].status == "Created root node 1"
    sess.load_keys([])
    assert seen[-1] is None


def test_session_needs_a_scheduler():
    with pytest.raises(TypeError):
        Session()


def test_unknown_operation_kind_rejected(session):
    with pytest.raises(ValueError):
        session.perform_operation("upsert", 3)
    with pytest.raises(ValueError):
        session.perform_traversal("levelorder")
