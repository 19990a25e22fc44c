"""Drill session state machine.

The engine is driven by discrete commands from the UI (``start_level``,
``submit_answer``, ``acknowledge``, ``exit_to_menu`` and ``advance`` for
delayed transitions). It performs no I/O and never raises: commands that make
no sense in the current state are logged and ignored.
"""

import random
import re
import time
from collections.abc import Callable
from typing import Any

import structlog

from times_trainer.drill.catalog import generate_levels
from times_trainer.drill.generator import generate_problems
from times_trainer.drill.session_queue import advance_on_correct, advance_on_wrong
from times_trainer.models.problem import Problem
from times_trainer.models.rules import DrillRules
from times_trainer.models.session import (
    DrillState,
    Feedback,
    LevelResult,
    PendingTransition,
    SessionSnapshot,
    SessionStats,
    TrainerContext,
)
from times_trainer.progress.aggregator import complete_level, summarize_session
from times_trainer.progress.leaderboard import submit_score

logger = structlog.get_logger()

_INTEGER = re.compile(r"[+-]?[0-9]+")

LevelCompleteCallback = Callable[[TrainerContext, LevelResult], None]


def parse_answer(raw: Any) -> int | None:
    """Parse learner input into an integer, or None if it is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


class DrillEngine:
    """Runs one drill session at a time against a ``TrainerContext``.

    The context (profile, level table, leaderboard) is replaced as a whole
    when a level is completed, so readers never observe a half-applied
    update.

    Args:
        context: Persistent state loaded by the caller. Defaults to a fresh
            profile and the full level catalog.
        rules: Drill policy settings.
        rng: Random source used for problem generation.
    """

    def __init__(
        self,
        context: TrainerContext | None = None,
        rules: DrillRules | None = None,
        rng: random.Random | None = None,
    ) -> None:
        context = context or TrainerContext()
        if not context.levels:
            context = context.model_copy(update={"levels": generate_levels()})
        self._context = context
        self.rules = rules or DrillRules()
        self._rng = rng or random.Random()
        self._callbacks: list[LevelCompleteCallback] = []
        self._state = DrillState.IDLE
        self._reset_session()

    @property
    def state(self) -> DrillState:
        return self._state

    @property
    def context(self) -> TrainerContext:
        return self._context

    @property
    def queue(self) -> list[Problem]:
        """Pending problems, head first."""
        return list(self._queue)

    def on_level_complete(self, callback: LevelCompleteCallback) -> None:
        """Register a callback for level completion.

        Args:
            callback: Callable(context, result), invoked once per completed
                level with the already-updated context.
        """
        self._callbacks.append(callback)

    # Commands

    def start_level(self, level_id: int) -> SessionSnapshot:
        """Start a session for an unlocked level. Only valid when idle."""
        if self._state is not DrillState.IDLE:
            return self._ignored("start_level")
        level = self._context.find_level(level_id)
        if level is None or not level.is_unlocked:
            logger.debug("level_not_available", level_id=level_id)
            return self.snapshot()

        problems = generate_problems(
            level,
            self._context.profile.rolling_accuracy,
            rules=self.rules,
            rng=self._rng,
        )
        self._reset_session()
        self._level_id = level.id
        self._queue = problems
        self._batch_size = len(problems)
        self._state = DrillState.PLAYING
        self._show_head()
        logger.info("level_started", level_id=level.id, problems=len(problems))
        return self.snapshot()

    def submit_answer(self, raw: Any) -> SessionSnapshot:
        """Check an answer for the current problem.

        Empty or non-numeric input is ignored without touching the stats.
        """
        if self._state is not DrillState.PLAYING or self._current is None:
            return self._ignored("submit_answer")
        # The answered problem stays on screen until the transition fires.
        if self._pending is not None:
            return self._ignored("submit_answer")
        value = parse_answer(raw)
        if value is None:
            logger.debug("answer_ignored", raw=str(raw)[:20])
            return self.snapshot()

        problem = self._current
        elapsed_ms = self._elapsed_ms()

        if value == problem.answer:
            self._stats.record(True, elapsed_ms)
            self._queue = advance_on_correct(self._queue)
            if not self._queue:
                self._complete()
                return self.snapshot()
            self._feedback = Feedback.CORRECT
            if self.rules.feedback_delay_ms > 0:
                self._pending = PendingTransition(delay_ms=self.rules.feedback_delay_ms)
            else:
                self._show_head()
        else:
            self._stats.record(False, elapsed_ms)
            # Repositioned now; the answered problem stays on screen.
            self._queue = advance_on_wrong(self._queue, self.rules.requeue_offset)
            self._feedback = Feedback.INCORRECT
            self._state = DrillState.AWAITING_ACKNOWLEDGEMENT
            logger.debug(
                "answer_wrong",
                level_id=self._level_id,
                expected=problem.answer,
                given=value,
                attempts=problem.attempts,
            )
        return self.snapshot()

    def acknowledge(self) -> SessionSnapshot:
        """Dismiss the correct-answer display after a wrong answer."""
        if self._state is not DrillState.AWAITING_ACKNOWLEDGEMENT:
            return self._ignored("acknowledge")
        self._state = DrillState.PLAYING
        self._show_head()
        return self.snapshot()

    def advance(self, transition_id: str | None = None) -> SessionSnapshot:
        """Fulfil the pending delayed transition to the next problem."""
        if self._pending is None:
            return self._ignored("advance")
        if transition_id is not None and transition_id != self._pending.transition_id:
            logger.debug("stale_transition", transition_id=transition_id)
            return self.snapshot()
        self._show_head()
        return self.snapshot()

    def exit_to_menu(self) -> SessionSnapshot:
        """Abandon the session. Nothing from it is kept."""
        if self._state in (DrillState.PLAYING, DrillState.AWAITING_ACKNOWLEDGEMENT):
            logger.info("level_abandoned", level_id=self._level_id, answered=self._stats.total)
        self._reset_session()
        self._state = DrillState.IDLE
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        """Current view state."""
        expected = None
        if self._feedback is Feedback.INCORRECT and self._current is not None:
            expected = self._current.answer
        progress = 0.0
        if self._batch_size:
            progress = min(100.0, self._stats.correct / self._batch_size * 100)
        return SessionSnapshot(
            state=self._state,
            level_id=self._level_id,
            current_problem=self._current.model_copy() if self._current else None,
            expected_answer=expected,
            feedback=self._feedback,
            stats=self._stats.model_copy(),
            remaining=len(self._queue),
            progress_percent=round(progress, 1),
            pending_transition=self._pending,
            last_result=self._last_result,
            levels=[level.model_copy(deep=True) for level in self._context.levels],
            profile=self._context.profile.model_copy(deep=True),
        )

    # Internals

    def _reset_session(self) -> None:
        self._level_id: int | None = None
        self._queue: list[Problem] = []
        self._batch_size = 0
        self._current: Problem | None = None
        self._feedback = Feedback.NONE
        self._stats = SessionStats()
        self._pending: PendingTransition | None = None
        self._problem_started_at: float | None = None
        self._last_result: LevelResult | None = None

    def _show_head(self) -> None:
        self._pending = None
        self._feedback = Feedback.NONE
        self._current = self._queue[0] if self._queue else None
        self._problem_started_at = time.monotonic()

    def _elapsed_ms(self) -> int:
        if self._problem_started_at is None:
            return 0
        return int((time.monotonic() - self._problem_started_at) * 1000)

    def _complete(self) -> None:
        level_id = self._level_id
        previous = self._context
        result = summarize_session(
            self._stats, level_id, previous.profile, xp_per_correct=self.rules.xp_per_correct
        )
        profile, levels = complete_level(
            previous.profile,
            previous.levels,
            self._stats,
            level_id,
            xp_per_correct=self.rules.xp_per_correct,
        )
        leaderboard = submit_score(
            previous.leaderboard,
            profile,
            result.xp_gained,
            name=self.rules.player_name,
            capacity=self.rules.leaderboard_capacity,
        )
        self._context = TrainerContext(profile=profile, levels=levels, leaderboard=leaderboard)

        self._state = DrillState.COMPLETED
        self._current = None
        self._pending = None
        self._feedback = Feedback.CORRECT
        self._last_result = result
        logger.info(
            "level_completed",
            level_id=level_id,
            xp_gained=result.xp_gained,
            accuracy=result.accuracy,
            perfect=result.is_perfect,
            streak=profile.current_streak,
        )

        for callback in self._callbacks:
            try:
                callback(self._context, result)
            except Exception:
                logger.exception("level_complete_callback_error", level_id=level_id)

    def _ignored(self, command: str) -> SessionSnapshot:
        logger.debug("command_ignored", command=command, state=self._state.value)
        return self.snapshot()
