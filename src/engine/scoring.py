"""Combo counting and damage against the target."""

from typing import Optional

from .models import ScoreState, ScoringRules, SessionState


def damage_for(combo_count: int, rules: ScoringRules) -> int:
    """
    Damage dealt by a completed group at a given combo.

    Non-decreasing in `combo_count` and bounded by base_damage + damage_cap.
    """
    bonus = min(combo_count // rules.combo_step, rules.damage_cap)
    return rules.base_damage + bonus


class ScoringModel:
    """Applies completed groups and misses to the score and the target hp."""

    def __init__(
        self,
        rules: ScoringRules,
        score: ScoreState,
        session: SessionState
    ):
        self.rules = rules
        self.score = score
        self.session = session

    def on_correct_unit(self) -> int:
        """
        Register a completed group.

        Returns:
            Damage dealt for this group
        """
        score = self.score
        score.combo_count += 1
        score.max_combo = max(score.max_combo, score.combo_count)

        damage = damage_for(score.combo_count, self.rules)
        self.session.hp = max(0, self.session.hp - damage)
        score.total_damage += damage
        score.correct_count += 1
        return damage

    def on_miss(self) -> None:
        """Register a rejected keystroke; breaks the combo."""
        self.score.miss_count += 1
        self.score.combo_count = 0

    def reported_damage(self, max_hp: Optional[int] = None) -> int:
        """Total damage capped at the target's max hp."""
        cap = self.session.max_hp if max_hp is None else max_hp
        return min(self.score.total_damage, cap)
