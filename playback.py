#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════╗
║         BST Step Visualizer  v1.0  —  PLAYBACK & SESSION         ║
║                                                                  ║
║  A cursor over the snapshot History plus a timer-driven          ║
║  auto-advance loop, and the Session object that owns the live    ║
║  tree, its History and the controller.                           ║
║                                                                  ║
║  Auto-play loop:                                                 ║
║    start_playback() → render(0) → schedule(tick)                 ║
║      → tick: cursor += 1, render → schedule(tick)                ║
║        → … → last step reached → no more ticks (PAUSED)          ║
║                                                                  ║
║  Every command cancels the pending tick FIRST, so two loops      ║
║  can never race on the cursor.  A cancelled ScheduledTask        ║
║  ignores its callback even if the underlying timer still fires.  ║
╚══════════════════════════════════════════════════════════════════╝
"""

import enum
import heapq
import itertools
import logging

from bst_engine import (BSTAnimated, History, MSG_COMPLETE,
                        TraversalOrder, build_balanced, clear_annotations)
from settings import SPEED_DEFAULT, SPEED_OFFSET, clamp_speed

logger = logging.getLogger(__name__)


class PlaybackState(enum.Enum):
    IDLE    = "idle"       # no history
    PAUSED  = "paused"     # cursor valid, timer inactive
    PLAYING = "playing"    # cursor valid, timer active


class OperationKind(enum.Enum):
    INSERT = "insert"
    DELETE = "delete"


# ═════════════════════════════════════════════════════════════════
#  SCHEDULERS
#
#  A scheduler only needs two methods:
#    schedule(delay_ms, callback) -> token
#    cancel(token)
#  TkScheduler backs them with widget.after / after_cancel;
#  ManualScheduler keeps a virtual clock for headless driving.
# ═════════════════════════════════════════════════════════════════
class TkScheduler:
    """Adapter over a Tk widget's ``after`` / ``after_cancel``."""

    def __init__(self, widget):
        self.widget = widget

    def schedule(self, delay_ms, callback):
        return self.widget.after(delay_ms, callback)

    def cancel(self, token):
        self.widget.after_cancel(token)


class ManualScheduler:
    """
    Virtual-clock scheduler.

    Callbacks run only when the clock is advanced, in due-time order
    (ties keep scheduling order).  Used by headless sessions and the
    test-suite.

    Attributes:
        now (int): Virtual time in milliseconds.
    """

    def __init__(self):
        self.now      = 0
        self._queue   = []                  # heap of (due, token)
        self._pending = {}                  # token → callback
        self._counter = itertools.count()

    def schedule(self, delay_ms, callback):
        token = next(self._counter)
        heapq.heappush(self._queue, (self.now + max(0, delay_ms), token))
        self._pending[token] = callback
        return token

    def cancel(self, token):
        self._pending.pop(token, None)

    @property
    def pending(self):
        return len(self._pending)

    def next_delay(self):
        """Milliseconds until the next live callback, or None."""
        for due, token in sorted(self._queue):
            if token in self._pending:
                return due - self.now
        return None

    def advance(self, ms):
        """
        Move the clock forward, firing every callback that comes due.

        Returns:
            int: Number of callbacks fired.
        """
        target = self.now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, token = heapq.heappop(self._queue)
            callback = self._pending.pop(token, None)
            if callback is None:
                continue
            self.now = due
            callback()
            fired += 1
        self.now = target
        return fired

    def run_all(self, limit=10000):
        """Fire callbacks until none remain (bounded by ``limit``)."""
        fired = 0
        while self._pending and fired < limit:
            delay = self.next_delay()
            fired += self.advance(delay if delay is not None else 0)
        return fired


class ScheduledTask:
    """
    Cancellable handle for one deferred callback.

    Once cancelled, or once fired, the handle is spent; a late timer
    firing after ``cancel()`` does nothing.
    """

    def __init__(self, scheduler, delay_ms, callback):
        self._scheduler = scheduler
        self._callback  = callback
        self.delay_ms   = delay_ms
        self.cancelled  = False
        self.fired      = False
        self._token     = scheduler.schedule(delay_ms, self._fire)

    @property
    def active(self):
        return not (self.cancelled or self.fired)

    def _fire(self):
        if not self.active:
            return
        self.fired = True
        self._callback()

    def cancel(self):
        if not self.active:
            return
        self.cancelled = True
        self._scheduler.cancel(self._token)


class PlaybackConfig:
    """Speed / auto-play pair for sessions that run without Settings."""

    def __init__(self, speed=SPEED_DEFAULT, auto_play=True):
        self.speed     = clamp_speed(speed)
        self.auto_play = auto_play


# ═════════════════════════════════════════════════════════════════
#  PLAYBACK CONTROLLER
#
#  Navigation methods:
#    start_playback() → cursor 0, optional auto-play
#    step_forward()   → one step forward (stops auto-play)
#    step_backward()  → one step back (stops auto-play)
#    restart()        → cursor 0, optional auto-play
#    play() / pause() → explicit transport control
#    go_end()         → jump to the last step
#
#  ``config.speed`` and ``config.auto_play`` are read each time a
#  tick is scheduled, so slider changes apply mid-playback.
# ═════════════════════════════════════════════════════════════════
class PlaybackController:
    """
    Cursor and auto-advance loop over a History.

    Attributes:
        history   (History)  : Snapshots of the current operation.
        scheduler            : Object with schedule()/cancel().
        config               : Object with ``speed`` and ``auto_play``.
        on_render (callable) : Called with the Snapshot under the
                               cursor (or None) after every move.
        cursor    (int)      : Current index; -1 when history is empty.
    """

    def __init__(self, history, scheduler, config=None, on_render=None):
        self.history   = history
        self.scheduler = scheduler
        self.config    = config if config is not None else PlaybackConfig()
        self.on_render = on_render
        self.cursor    = -1
        self._task     = None
        self._forced   = False              # run started by play()

    # ── State & predicates ──────────────────────────────────────
    @property
    def state(self):
        if not len(self.history):
            return PlaybackState.IDLE
        if self._task is not None and self._task.active:
            return PlaybackState.PLAYING
        return PlaybackState.PAUSED

    @property
    def last_index(self):
        return len(self.history) - 1

    def history_non_empty(self):
        return len(self.history) > 0

    def can_step_back(self):
        return self.history_non_empty() and self.cursor > 0

    def can_step_forward(self):
        return self.history_non_empty() and self.cursor < self.last_index

    def current_snapshot(self):
        """Snapshot under the cursor, or None when there is nothing to show."""
        if 0 <= self.cursor < len(self.history):
            return self.history[self.cursor]
        return None

    def delay_ms(self):
        """Delay before the next tick, derived from the live speed value."""
        return max(0, SPEED_OFFSET - clamp_speed(self.config.speed))

    # ── Timer management ────────────────────────────────────────
    def cancel(self):
        """Invalidate the pending tick, if any (forces PAUSED)."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _schedule_tick(self):
        self.cancel()
        self._task = ScheduledTask(self.scheduler, self.delay_ms(), self._tick)

    def _tick(self):
        self._task = None
        if self.cursor < self.last_index:
            self.cursor += 1
            if self.cursor >= self.last_index:
                logger.debug("Playback reached step %d, stopping", self.cursor)
            elif self._forced or self.config.auto_play:
                self._schedule_tick()
            else:
                logger.debug("Auto-play switched off at step %d", self.cursor)
            self._render()

    def _render(self):
        if self.on_render is not None:
            self.on_render(self.current_snapshot())

    # ── Commands ────────────────────────────────────────────────
    def reset(self):
        """Forget the cursor (history was cleared or replaced)."""
        self.cancel()
        self.cursor = 0 if self.history_non_empty() else -1
        self._render()

    def _rewind(self, auto_play):
        self.cancel()
        self.cursor  = 0
        self._forced = False
        if auto_play and self.can_step_forward():
            self._schedule_tick()
        self._render()

    def start_playback(self):
        """Show the first snapshot and start auto-play if it is enabled."""
        if not self.history_non_empty():
            self.reset()
            return
        self._rewind(self.config.auto_play)

    def step_forward(self):
        self.cancel()
        if self.can_step_forward():
            self.cursor += 1
            self._render()

    def step_backward(self):
        self.cancel()
        if self.can_step_back():
            self.cursor -= 1
            self._render()

    def restart(self):
        self.cancel()
        if self.history_non_empty():
            self._rewind(self.config.auto_play)

    def play(self):
        """Auto-advance from the current cursor, regardless of the toggle."""
        if self.can_step_forward():
            self._forced = True
            self._schedule_tick()
            self._render()

    def pause(self):
        self.cancel()
        if self.history_non_empty():
            self._render()

    def go_end(self):
        self.cancel()
        if self.history_non_empty() and self.cursor != self.last_index:
            self.cursor = self.last_index
            self._render()


# ═════════════════════════════════════════════════════════════════
#  SESSION
#
#  Owns the three pieces of mutable state: the live tree (inside
#  the engine), the History and the playback cursor.  Every
#  command follows the same order:
#    cancel pending tick → clear flags → clear history → run → play
# ═════════════════════════════════════════════════════════════════
class Session:
    """
    One visualizer session.

    Attributes:
        history  (History)            : Snapshots of the last operation.
        engine   (BSTAnimated)        : Live tree + recording algorithms.
        playback (PlaybackController) : Cursor / auto-play loop.

    ``scheduler`` is required: TkScheduler in the window, a
    ManualScheduler when driving the session headless.
    """

    def __init__(self, scheduler, config=None, on_render=None, layout=None):
        self.history  = History(layout=layout)
        self.engine   = BSTAnimated(None, self.history)
        self.playback = PlaybackController(self.history, scheduler,
                                           config, on_render)

    @property
    def root(self):
        return self.engine.root

    def _begin(self):
        self.playback.cancel()
        clear_annotations(self.engine.root)
        self.history.clear()

    # ── Commands ────────────────────────────────────────────────
    def perform_operation(self, kind, key):
        """
        Insert or delete ``key`` and start playing the recorded steps.

        Args:
            kind (OperationKind|str): "insert" or "delete".
            key                     : Already-parsed numeric key.
        """
        kind = OperationKind(kind)
        self._begin()
        if kind is OperationKind.INSERT:
            self.engine.insert(key)
        else:
            self.engine.delete(key)
        self.history.append(self.engine.root, MSG_COMPLETE, ())
        logger.debug("%s %r recorded %d snapshots",
                     kind.value, key, len(self.history))
        self.playback.start_playback()

    def perform_traversal(self, order):
        """
        Record a traversal of the live tree and start playback.

        Returns:
            list: Keys in visiting order.
        """
        order = TraversalOrder(order)
        self._begin()
        seq = self.engine.traverse(order)
        self.playback.start_playback()
        return seq

    def load_keys(self, keys):
        """
        Replace the live tree with a balanced build of ``keys``.

        The caller is expected to pass sorted, duplicate-free keys.
        """
        keys = list(keys)
        self.playback.cancel()
        self.engine.root = build_balanced(keys)
        self.history.clear()
        logger.debug("Loaded %d keys", len(keys))
        self.playback.reset()

    def clear_tree(self):
        self.playback.cancel()
        self.engine.root = None
        self.history.clear()
        self.playback.reset()

    # ── Read-through ────────────────────────────────────────────
    def current_snapshot(self):
        return self.playback.current_snapshot()

    def can_step_forward(self):
        return self.playback.can_step_forward()

    def can_step_back(self):
        return self.playback.can_step_back()

    def history_non_empty(self):
        return self.playback.history_non_empty()

    def step_forward(self):
        self.playback.step_forward()

    def step_backward(self):
        self.playback.step_backward()

    def restart(self):
        self.playback.restart()
