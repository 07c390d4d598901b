"""
Pydantic models for the game core.

This module contains the data models (source records, configuration, match and
session state, emitted events) used throughout the engine. The logic classes
(Dictionary, MatchEngine, ScoringModel, SessionController, Typist) live in
their own files.
"""

from typing import List, Dict, Optional, Literal, Tuple, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator

from .normalize import drop_control, fold_kana, normalize_key, normalize_phrase


# Type aliases
Outcome = Literal["CORRECT", "MISS", "CONTINUE"]
Status = Literal["IDLE", "ACTIVE", "FINISHED"]
FinishReason = Literal["CLEARED", "TIMED_OUT", "ABORTED"]
Difficulty = Literal["easy", "normal", "hard"]
Mode = Literal["jp_jp", "kr_jp", "kr_kr", "jp_kr"]

# (display field, reading field) on a QuestionRecord for each mode
MODE_FIELDS: Dict[str, Tuple[str, str]] = {
    "jp_jp": ("jp_display", "jp_hiragana"),
    "kr_jp": ("kr_display", "jp_hiragana"),
    "kr_kr": ("kr_display", "kr_display"),
    "jp_kr": ("jp_display", "kr_display"),
}


class DifficultyPreset(BaseModel):
    """Session parameters attached to a difficulty name."""
    time_limit: float = Field(..., gt=0)
    max_hp: int = Field(..., ge=1)
    levels: List[int]
    combo_step: int = Field(..., ge=1)


DIFFICULTY_PRESETS: Dict[str, DifficultyPreset] = {
    "easy": DifficultyPreset(time_limit=60, max_hp=1000, levels=[1], combo_step=50),
    "normal": DifficultyPreset(time_limit=90, max_hp=3000, levels=[1, 2], combo_step=40),
    "hard": DifficultyPreset(time_limit=120, max_hp=8000, levels=[1, 2, 3], combo_step=30),
}


class NasalPolicy(BaseModel):
    """
    Lookahead rule for the standalone moraic nasal.

    A single trigger key completes the nasal unit when the next group's
    primary spelling starts with neither a vowel nor a blocking consonant.
    """
    unit: str = "ん"
    trigger: str = "n"
    vowels: str = "aiueo"
    consonants: str = "ny"

    @field_validator("unit")
    @classmethod
    def _fold_unit(cls, value: str) -> str:
        return fold_kana(normalize_phrase(value))

    @field_validator("trigger", "vowels", "consonants")
    @classmethod
    def _fold_keys(cls, value: str) -> str:
        return normalize_key(value)

    def allows_shortcut(self, next_spelling: Optional[str]) -> bool:
        """Whether the next group's spelling lets one trigger key close the nasal."""
        if not next_spelling:
            return False
        return next_spelling[0] not in self.vowels + self.consonants


class ScoringRules(BaseModel):
    """Damage formula parameters."""
    base_damage: int = Field(default=10, ge=0)
    damage_cap: int = Field(default=10, ge=0)
    combo_step: int = Field(default=50, ge=1)


class PatternEntry(BaseModel):
    """One dictionary row: a grapheme key and its accepted spellings."""
    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(..., min_length=1, alias="Pattern")
    romanizations: List[str] = Field(..., min_length=1, alias="TypePattern")

    @field_validator("key")
    @classmethod
    def _compose_key(cls, value: str) -> str:
        return normalize_phrase(value)

    @field_validator("romanizations")
    @classmethod
    def _clean_spellings(cls, value: List[str]) -> List[str]:
        cleaned: List[str] = []
        for spelling in value:
            spelling = normalize_key(spelling.strip())
            if spelling and spelling not in cleaned:
                cleaned.append(spelling)
        if not cleaned:
            raise ValueError("entry has no usable romanization")
        return cleaned

    @property
    def canonical(self) -> str:
        """Preferred spelling (the first one listed)."""
        return self.romanizations[0]


class QuestionRecord(BaseModel):
    """A raw question as stored in the question pool file."""
    jp_display: str = ""
    kr_display: str = ""
    jp_hiragana: Union[str, List[str]] = ""
    difficulty: int = Field(default=1, ge=1)

    @field_validator("jp_hiragana")
    @classmethod
    def _join_units(cls, value: Union[str, List[str]]) -> str:
        # Some pools store the reading as an array of kana units
        if isinstance(value, list):
            value = "".join(value)
        return normalize_phrase(value)


class Question(BaseModel):
    """A question resolved for one mode: what is shown and what is typed."""
    model_config = ConfigDict(frozen=True)

    display_text: str
    target_phrase: str = Field(..., min_length=1)
    difficulty_level: int = 1

    @field_validator("target_phrase", mode="before")
    @classmethod
    def _drop_control(cls, value: str) -> str:
        # Tabs or line breaks in a reading could never be typed
        return drop_control(value) if isinstance(value, str) else value

    @classmethod
    def from_record(cls, record: QuestionRecord, mode: Mode) -> Optional["Question"]:
        """Pick the display and reading fields for `mode`; None if the reading is blank."""
        display_field, reading_field = MODE_FIELDS[mode]
        reading = drop_control(normalize_phrase(getattr(record, reading_field))).strip()
        if not reading:
            return None
        return cls(
            display_text=getattr(record, display_field),
            target_phrase=reading,
            difficulty_level=record.difficulty,
        )


class Group(BaseModel):
    """The unit of matching: one segment of the phrase and its candidate spellings."""
    source_units: str
    romanizations: List[str]
    candidates: List[str] = Field(default_factory=list)
    literal: bool = False

    def model_post_init(self, __context) -> None:
        """Start with every spelling still possible."""
        if not self.candidates:
            self.candidates = list(self.romanizations)

    @property
    def canonical(self) -> str:
        """Preferred spelling of this group."""
        return self.romanizations[0]

    def reset(self) -> None:
        """Restore the full candidate list."""
        self.candidates = list(self.romanizations)


class MatchState(BaseModel):
    """Matching progress through the groups of the active question."""
    groups: List[Group] = Field(default_factory=list)
    current_group_index: int = 0
    partial_input: str = ""


class ScoreState(BaseModel):
    """Combo and hit counters for a session."""
    combo_count: int = 0
    max_combo: int = 0
    total_damage: int = 0
    correct_count: int = 0
    miss_count: int = 0


class SessionState(BaseModel):
    """Target hp, timer and lifecycle status for a session."""
    hp: int = 0
    max_hp: int = 0
    time_remaining: float = 0.0
    time_limit: float = 0.0
    start_timestamp: Optional[float] = None
    ended_at: Optional[float] = None
    status: Status = "IDLE"
    finish_reason: Optional[FinishReason] = None
    ranking_eligible: bool = True


class SessionSummary(BaseModel):
    """Final report of a finished session."""
    reason: Optional[FinishReason] = None
    elapsed_time: float = 0.0
    total_damage: int = 0
    correct_count: int = 0
    miss_count: int = 0
    keys_per_second: float = 0.0
    max_combo: int = 0
    questions_completed: int = 0
    ranking_eligible: bool = True


class KeyResult(BaseModel):
    """Classification of one keystroke, emitted to listeners."""
    model_config = ConfigDict(frozen=True)

    key: str
    outcome: Outcome
    question_complete: bool = False
    group_index: int = 0
    source_units: str = ""
    damage: Optional[int] = None
    combo: int = 0
    finish_reason: Optional[FinishReason] = None


class FinishEvent(BaseModel):
    """Emitted once when the session leaves ACTIVE."""
    model_config = ConfigDict(frozen=True)

    reason: FinishReason
    summary: SessionSummary


class Snapshot(BaseModel):
    """Read-only view of the session for the presentation layer."""
    model_config = ConfigDict(frozen=True)

    status: Status
    display_text: str = ""
    target_phrase: str = ""
    typed_text: str = ""
    remaining_text: str = ""
    current_group: Optional[str] = None
    candidates: List[str] = Field(default_factory=list)
    partial_input: str = ""
    guide: Optional[str] = None
    hp: int = 0
    max_hp: int = 0
    combo: int = 0
    time_remaining: float = 0.0


class RankingRecord(BaseModel):
    """Export record handed to a ranking store."""
    name: str = Field(..., min_length=1)
    elapsed_time: float
    total_damage: int
    miss_count: int
    keys_per_second: float
    mode: Mode
    difficulty: Difficulty


class TypistConfig(BaseModel):
    """Behaviour of the simulated typist."""
    keys_per_second: float = Field(default=6.0, gt=0)
    miss_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    seed: Optional[int] = None


class GameConfig(BaseModel):
    """Configuration for a session run."""
    mode: Mode = "jp_jp"
    difficulty: Difficulty = "normal"
    practice: bool = False
    seed: Optional[int] = None
    time_limit: Optional[float] = Field(default=None, gt=0)
    max_hp: Optional[int] = Field(default=None, ge=1)
    combo_step: Optional[int] = Field(default=None, ge=1)
    nasal: NasalPolicy = Field(default_factory=NasalPolicy)
    dictionary_path: Optional[str] = None
    questions_path: Optional[str] = None
    player_name: str = "guest"
    typist: TypistConfig = Field(default_factory=TypistConfig)

    @property
    def preset(self) -> DifficultyPreset:
        """Preset for the configured difficulty."""
        return DIFFICULTY_PRESETS[self.difficulty]

    @property
    def levels(self) -> List[int]:
        """Question difficulty levels allowed in this session."""
        return self.preset.levels

    @property
    def scoring_rules(self) -> ScoringRules:
        """Damage rules with the difficulty's combo step unless overridden."""
        return ScoringRules(combo_step=self.combo_step or self.preset.combo_step)
