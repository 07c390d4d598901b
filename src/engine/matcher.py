"""
Per-question keystroke matching.

The MatchEngine owns the MatchState of the active question and classifies
every keystroke as CORRECT (a group was completed), MISS (the key fits no
remaining spelling) or CONTINUE (a spelling is in progress).
"""

from typing import List, Optional, Tuple

from .models import Group, MatchState, NasalPolicy, Outcome
from .normalize import fold_kana, normalize_key


class MatchEngine:
    """
    State machine matching keystrokes against the groups of one question.

    Attributes:
        state: Groups, current group index and partial input
        nasal_policy: Lookahead rule for the standalone nasal
    """

    def __init__(self, groups: List[Group], nasal_policy: Optional[NasalPolicy] = None):
        self.state = MatchState(groups=groups)
        self.nasal_policy = nasal_policy or NasalPolicy()
        self._halted = False

    @property
    def groups(self) -> List[Group]:
        return self.state.groups

    @property
    def is_complete(self) -> bool:
        """True once every group has been typed."""
        return self.state.current_group_index >= len(self.state.groups)

    @property
    def is_halted(self) -> bool:
        return self._halted

    @property
    def current_group(self) -> Optional[Group]:
        """Group being typed, None when the question is complete."""
        if self.is_complete:
            return None
        return self.state.groups[self.state.current_group_index]

    @property
    def next_group(self) -> Optional[Group]:
        idx = self.state.current_group_index + 1
        return self.state.groups[idx] if idx < len(self.state.groups) else None

    @property
    def partial_input(self) -> str:
        return self.state.partial_input

    @property
    def typed_text(self) -> str:
        """Source text of the groups already completed."""
        done = self.state.groups[:self.state.current_group_index]
        return "".join(g.source_units for g in done)

    @property
    def remaining_text(self) -> str:
        """Source text still to be typed, current group included."""
        rest = self.state.groups[self.state.current_group_index:]
        return "".join(g.source_units for g in rest)

    def guide(self) -> str:
        """
        Romanization still to type, using preferred spellings.

        For the current group the first surviving candidate is used, so the
        guide follows the spelling the player has already committed to.
        """
        group = self.current_group
        if group is None:
            return ""
        parts = [group.candidates[0][len(self.state.partial_input):]]
        for g in self.state.groups[self.state.current_group_index + 1:]:
            parts.append(g.canonical)
        return "".join(parts)

    def halt(self) -> None:
        """Make the engine inert; later keystrokes are ignored."""
        self._halted = True

    def consume_key(self, key: str) -> Optional[Tuple[Outcome, bool]]:
        """
        Classify one keystroke.

        Args:
            key: A single typed character

        Returns:
            (outcome, question_complete), or None if the engine is halted
            or the question is already complete
        """
        if self._halted or self.is_complete:
            return None

        key = normalize_key(key)
        group = self.current_group

        if self._nasal_shortcut(group, key):
            return "CORRECT", self._advance()

        attempt = self.state.partial_input + key
        matching = [c for c in group.candidates if c.startswith(attempt)]

        if not matching:
            # Rejected keys are not appended
            return "MISS", False

        group.candidates = matching
        self.state.partial_input = attempt

        if matching == [attempt]:
            return "CORRECT", self._advance()

        return "CONTINUE", False

    def _nasal_shortcut(self, group: Group, key: str) -> bool:
        """Whether `key` alone completes a standalone nasal group."""
        policy = self.nasal_policy
        if self.state.partial_input or key != policy.trigger:
            return False
        if fold_kana(group.source_units) != policy.unit:
            return False
        following = self.next_group
        return policy.allows_shortcut(following.canonical if following else None)

    def _advance(self) -> bool:
        """Close the current group; returns True when the question is done."""
        self.state.current_group_index += 1
        self.state.partial_input = ""
        group = self.current_group
        if group is not None:
            group.reset()
        return self.is_complete
