"""Matching and scoring engine for the kana typing game."""

from .models import (
    Outcome,
    Status,
    FinishReason,
    Difficulty,
    Mode,
    MODE_FIELDS,
    DifficultyPreset,
    DIFFICULTY_PRESETS,
    NasalPolicy,
    ScoringRules,
    PatternEntry,
    QuestionRecord,
    Question,
    Group,
    MatchState,
    ScoreState,
    SessionState,
    SessionSummary,
    KeyResult,
    FinishEvent,
    Snapshot,
    RankingRecord,
    TypistConfig,
    GameConfig,
)
from .errors import (
    KanaStrikeError,
    DataLoadError,
    EmptyPoolError,
    SessionError,
    RankingIneligibleError,
)
from .normalize import normalize_key, normalize_phrase, fold_kana, literal_spelling, is_typable_key, drop_control
from .dictionary import Dictionary, build_dictionary, segment, literal_group
from .matcher import MatchEngine
from .scoring import ScoringModel, damage_for
from .session import SessionController, resolve_pool
from .ranking import rank_records, MAX_RANKING_ENTRIES
from .typist import Typist

__all__ = [
    # Models
    "Outcome",
    "Status",
    "FinishReason",
    "Difficulty",
    "Mode",
    "MODE_FIELDS",
    "DifficultyPreset",
    "DIFFICULTY_PRESETS",
    "NasalPolicy",
    "ScoringRules",
    "PatternEntry",
    "QuestionRecord",
    "Question",
    "Group",
    "MatchState",
    "ScoreState",
    "SessionState",
    "SessionSummary",
    "KeyResult",
    "FinishEvent",
    "Snapshot",
    "RankingRecord",
    "TypistConfig",
    "GameConfig",
    # Errors
    "KanaStrikeError",
    "DataLoadError",
    "EmptyPoolError",
    "SessionError",
    "RankingIneligibleError",
    # Normalization
    "normalize_key",
    "normalize_phrase",
    "drop_control",
    "fold_kana",
    "literal_spelling",
    "is_typable_key",
    # Components
    "Dictionary",
    "build_dictionary",
    "segment",
    "literal_group",
    "MatchEngine",
    "ScoringModel",
    "damage_for",
    "SessionController",
    "resolve_pool",
    "rank_records",
    "MAX_RANKING_ENTRIES",
    "Typist",
]
