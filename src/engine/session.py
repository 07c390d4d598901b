import json
import random
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from .dictionary import Dictionary, segment
from .errors import DataLoadError, EmptyPoolError, RankingIneligibleError, SessionError
from .matcher import MatchEngine
from .models import (
    FinishEvent,
    FinishReason,
    GameConfig,
    KeyResult,
    Mode,
    Question,
    QuestionRecord,
    RankingRecord,
    ScoreState,
    SessionState,
    SessionSummary,
    Snapshot,
)
from .normalize import is_typable_key
from .scoring import ScoringModel


Listener = Callable[[Union[KeyResult, FinishEvent]], None]
PoolItem = Union[Question, QuestionRecord, Dict[str, Any]]


def resolve_pool(pool: Iterable[PoolItem], mode: Mode, levels: List[int]) -> List[Question]:
    """
    Resolve raw pool entries for a mode and keep the allowed difficulty levels.

    Records whose reading is blank in the chosen mode are skipped.

    Raises:
        DataLoadError: If a raw record fails validation
    """
    questions: List[Question] = []
    for item in pool:
        if isinstance(item, Question):
            question = item
        else:
            try:
                record = item if isinstance(item, QuestionRecord) else QuestionRecord.model_validate(item)
            except ValidationError as e:
                raise DataLoadError(f"Malformed question in pool: {e}") from e
            question = Question.from_record(record, mode)
        if question is not None and question.difficulty_level in levels:
            questions.append(question)
    return questions


class SessionController:
    """
    Owns one play session: timer, target hp, question queue and scoring.

    Each controller is an independent context, so several sessions can run
    side by side without sharing mutable state.

    Attributes:
        dictionary: Pattern dictionary used to segment questions
        config: Game configuration (mode, difficulty, overrides)
        state: Session lifecycle, hp and timer
        score: Combo and hit counters
        engine: Match engine for the active question
        question: The active question
        questions_completed: Number of questions fully typed
    """

    def __init__(
        self,
        dictionary: Dictionary,
        config: Optional[GameConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.dictionary = dictionary
        self.config = config or GameConfig()
        self.clock = clock or time.monotonic
        self.state = SessionState()
        self.score = ScoreState()
        self.scoring = ScoringModel(self.config.scoring_rules, self.score, self.state)
        self.engine: Optional[MatchEngine] = None
        self.question: Optional[Question] = None
        self.pool: List[Question] = []
        self.questions_completed = 0
        self._last_index: Optional[int] = None
        self._rng = random.Random(self.config.seed)
        self._listeners: List[Listener] = []
        self._summary: Optional[SessionSummary] = None

    @property
    def is_active(self) -> bool:
        return self.state.status == "ACTIVE"

    @property
    def is_finished(self) -> bool:
        return self.state.status == "FINISHED"

    def subscribe(self, listener: Listener) -> Listener:
        """Register a callback for KeyResult and FinishEvent records."""
        self._listeners.append(listener)
        return listener

    def _emit(self, event: Union[KeyResult, FinishEvent]) -> None:
        for listener in self._listeners:
            listener(event)

    def start(
        self,
        question_pool: Iterable[PoolItem],
        time_limit: Optional[float] = None,
        max_hp: Optional[int] = None,
        now: Optional[float] = None,
    ) -> SessionState:
        """
        Start the session and load the first question.

        Args:
            question_pool: Questions or raw records; resolved for the mode
            time_limit: Seconds allowed (defaults to config, then difficulty preset)
            max_hp: Target hp (defaults to config, then difficulty preset)
            now: Monotonic start time (defaults to the controller clock)

        Returns:
            The session state, now ACTIVE

        Raises:
            SessionError: If the session was already started
            EmptyPoolError: If no question survives the difficulty filter
            DataLoadError: If a raw pool record is malformed
        """
        if self.state.status != "IDLE":
            raise SessionError(f"Cannot start a session that is {self.state.status}")

        config = self.config
        self.pool = resolve_pool(question_pool, config.mode, config.levels)
        if not self.pool:
            raise EmptyPoolError(
                f"No questions for difficulty '{config.difficulty}' "
                f"(levels {config.levels}) in mode '{config.mode}'"
            )

        preset = config.preset
        max_hp = max_hp or config.max_hp or preset.max_hp
        time_limit = time_limit or config.time_limit or preset.time_limit

        # Fresh counters for this session
        self.score = ScoreState()
        self.scoring = ScoringModel(config.scoring_rules, self.score, self.state)
        self.questions_completed = 0

        self.state.hp = max_hp
        self.state.max_hp = max_hp
        self.state.time_limit = float(time_limit)
        self.state.time_remaining = float(time_limit)
        self.state.start_timestamp = self.clock() if now is None else now
        self.state.ranking_eligible = not config.practice
        self.state.status = "ACTIVE"

        self._next_question()
        return self.state

    def _next_question(self) -> None:
        """Pick a random question, avoiding an immediate repeat."""
        indices = list(range(len(self.pool)))
        if len(indices) > 1 and self._last_index is not None:
            indices.remove(self._last_index)
        idx = self._rng.choice(indices)
        self._last_index = idx

        self.question = self.pool[idx]
        groups = segment(self.question.target_phrase, self.dictionary)
        self.engine = MatchEngine(groups, self.config.nasal)

    def consume_key(self, key: str, now: Optional[float] = None) -> Optional[KeyResult]:
        """
        Feed one keystroke to the active question.

        Args:
            key: Raw key from the input layer
            now: Monotonic time of the key; when given the timer is
                 brought up to date first

        Returns:
            KeyResult, or None if the key was ignored (not typable, or the
            session is no longer active)

        Raises:
            SessionError: If the session was never started
        """
        if self.state.status == "IDLE":
            raise SessionError("Session not started. Call start() first.")
        if not self.is_active or not is_typable_key(key):
            return None
        if now is not None and self.tick(now) is not None:
            return None

        engine = self.engine
        group_index = engine.state.current_group_index
        source_units = engine.current_group.source_units

        result = engine.consume_key(key)
        if result is None:
            return None
        outcome, question_complete = result

        damage = None
        if outcome == "CORRECT":
            damage = self.scoring.on_correct_unit()
        elif outcome == "MISS":
            self.scoring.on_miss()

        if question_complete:
            self.questions_completed += 1

        finish_event = None
        if self.state.hp == 0:
            # Clearing wins over a pending timeout
            finish_event = self._finish("CLEARED", now)
        elif question_complete:
            self._next_question()

        key_result = KeyResult(
            key=key,
            outcome=outcome,
            question_complete=question_complete,
            group_index=group_index,
            source_units=source_units,
            damage=damage,
            combo=self.score.combo_count,
            finish_reason=finish_event.reason if finish_event else None,
        )
        self._emit(key_result)
        if finish_event:
            self._emit(finish_event)
        return key_result

    def tick(self, now: Optional[float] = None) -> Optional[FinishReason]:
        """
        Recompute the remaining time from the start timestamp.

        Args:
            now: Monotonic time (defaults to the controller clock)

        Returns:
            "TIMED_OUT" if this tick ended the session, otherwise None
        """
        if not self.is_active:
            return None

        now = self.clock() if now is None else now
        elapsed = now - self.state.start_timestamp
        self.state.time_remaining = max(0.0, self.state.time_limit - elapsed)

        if self.state.time_remaining == 0:
            self._emit(self._finish("TIMED_OUT", now))
            return "TIMED_OUT"
        return None

    def abort(self, now: Optional[float] = None) -> SessionSummary:
        """
        End the session early. Repeated calls change nothing.

        Returns:
            The session summary
        """
        if not self.is_finished:
            self._emit(self._finish("ABORTED", now))
        return self._summary

    def _finish(self, reason: FinishReason, now: Optional[float]) -> FinishEvent:
        """Freeze the session and build its summary."""
        if self.engine is not None:
            self.engine.halt()

        self.state.status = "FINISHED"
        self.state.finish_reason = reason
        self.state.ended_at = self.clock() if now is None else now
        if reason == "ABORTED":
            self.state.ranking_eligible = False
        if reason == "TIMED_OUT":
            self.state.time_remaining = 0.0

        self._summary = self._build_summary(self.state.ended_at)
        return FinishEvent(reason=reason, summary=self._summary)

    def _elapsed(self, now: float) -> float:
        if self.state.start_timestamp is None:
            return 0.0
        elapsed = now - self.state.start_timestamp
        return min(max(0.0, elapsed), self.state.time_limit)

    def _build_summary(self, now: float) -> SessionSummary:
        elapsed = self._elapsed(now)
        return SessionSummary(
            reason=self.state.finish_reason,
            elapsed_time=elapsed,
            total_damage=self.scoring.reported_damage(),
            correct_count=self.score.correct_count,
            miss_count=self.score.miss_count,
            keys_per_second=self.score.correct_count / elapsed if elapsed > 0 else 0.0,
            max_combo=self.score.max_combo,
            questions_completed=self.questions_completed,
            ranking_eligible=self.state.ranking_eligible,
        )

    def summary(self, now: Optional[float] = None) -> SessionSummary:
        """Final summary once finished, otherwise a live one at `now`."""
        if self._summary is not None:
            return self._summary
        return self._build_summary(self.clock() if now is None else now)

    def snapshot(self) -> Snapshot:
        """Read-only view of the current question, input and gauges."""
        engine = self.engine
        question = self.question
        group = engine.current_group if engine else None
        return Snapshot(
            status=self.state.status,
            display_text=question.display_text if question else "",
            target_phrase=question.target_phrase if question else "",
            typed_text=engine.typed_text if engine else "",
            remaining_text=engine.remaining_text if engine else "",
            current_group=group.source_units if group else None,
            candidates=list(group.candidates) if group else [],
            partial_input=engine.partial_input if engine else "",
            guide=engine.guide() if engine and self.config.practice else None,
            hp=self.state.hp,
            max_hp=self.state.max_hp,
            combo=self.score.combo_count,
            time_remaining=self.state.time_remaining,
        )

    def export_record(self, name: Optional[str] = None) -> RankingRecord:
        """
        Build the record submitted to a ranking store.

        Raises:
            SessionError: If the session has not finished
            RankingIneligibleError: If the session was aborted or practice
        """
        if not self.is_finished:
            raise SessionError("Only finished sessions can be exported")
        if not self.state.ranking_eligible:
            raise RankingIneligibleError(
                f"Session is not eligible for ranking ({self.state.finish_reason}, "
                f"practice={self.config.practice})"
            )
        summary = self._summary
        return RankingRecord(
            name=name or self.config.player_name,
            elapsed_time=round(summary.elapsed_time, 2),
            total_damage=summary.total_damage,
            miss_count=summary.miss_count,
            keys_per_second=round(summary.keys_per_second, 2),
            mode=self.config.mode,
            difficulty=self.config.difficulty,
        )

    def get_state(self) -> Dict:
        """
        Get the current session state as a dictionary.

        Useful for serialization and logging.
        """
        return {
            "status": self.state.status,
            "finish_reason": self.state.finish_reason,
            "hp": self.state.hp,
            "max_hp": self.state.max_hp,
            "time_remaining": self.state.time_remaining,
            "score": self.score.model_dump(),
            "questions_completed": self.questions_completed,
            "pool_size": len(self.pool),
            "ranking_eligible": self.state.ranking_eligible,
        }

    def save_result(self, path: Union[str, Path]) -> None:
        """
        Save config, summary and state to a JSON file.

        Args:
            path: Path to save the result file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "config": self.config.model_dump(),
            "summary": self.summary().model_dump(),
            "state": self.get_state(),
        }
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False, default=str)
