"""
Simulated typist for driving a session without a keyboard.

The typist reads the match engine's surviving candidates and types the
preferred spelling at a fixed rate, slipping a wrong key in now and then.
It plays against a simulated clock, so a full session runs instantly and
reproducibly for a given seed.
"""

import random
import string
from typing import Callable, Optional, Union
from pydantic import BaseModel, Field, ConfigDict

from .errors import SessionError
from .matcher import MatchEngine
from .models import FinishEvent, KeyResult, SessionSummary, TypistConfig
from .session import SessionController
from ..utils.hud import render_hud


class Typist(BaseModel):
    """
    A bot player with a steady typing speed and a miss rate.

    Attributes:
        keys_per_second: Typing speed on the simulated clock
        miss_rate: Probability that a keystroke is a wrong key
        seed: Optional random seed for reproducibility
        keys_typed: Number of keystrokes sent so far
        last_time: Simulated time of the last keystroke
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    keys_per_second: float = Field(default=6.0, gt=0)
    miss_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    seed: Optional[int] = None
    keys_typed: int = 0
    last_time: float = 0.0
    _rng: random.Random = None

    def model_post_init(self, __context) -> None:
        """Initialize the random generator after model creation."""
        self._rng = random.Random(self.seed)

    @classmethod
    def from_config(cls, config: TypistConfig) -> "Typist":
        """Create a typist from its config block."""
        return cls(
            keys_per_second=config.keys_per_second,
            miss_rate=config.miss_rate,
            seed=config.seed,
        )

    @property
    def interval(self) -> float:
        """Seconds between two keystrokes."""
        return 1.0 / self.keys_per_second

    def next_key(self, engine: MatchEngine) -> Optional[str]:
        """
        Choose the next keystroke for the current group.

        Args:
            engine: Match engine of the active question

        Returns:
            A single character, or None if the question is complete
        """
        group = engine.current_group
        if group is None:
            return None

        typed = len(engine.partial_input)
        expected = {c[typed] for c in group.candidates if len(c) > typed}

        if self.miss_rate and self._rng.random() < self.miss_rate:
            wrong = [ch for ch in string.ascii_lowercase if ch not in expected]
            if wrong:
                return self._rng.choice(wrong)

        return group.candidates[0][typed]

    def play(
        self,
        controller: SessionController,
        start: float = 0.0,
        on_event: Optional[Callable[[Union[KeyResult, FinishEvent]], None]] = None,
        verbose: bool = False,
    ) -> SessionSummary:
        """
        Type until the session finishes.

        Args:
            controller: A started session
            start: Simulated time the session was started at
            on_event: Optional callback for every emitted event
            verbose: If True, print progress to stdout

        Returns:
            The session summary
        """
        if not controller.is_active:
            raise SessionError("Typist needs an active session. Call start() first.")

        if on_event:
            controller.subscribe(on_event)

        if verbose:
            print(f"Typist: {self.keys_per_second:.1f} keys/s, miss rate {self.miss_rate:.0%}")
            print(render_hud(controller.snapshot()))
            print("-" * 40)

        now = self.last_time = start
        while controller.is_active:
            now += self.interval
            self.last_time = now
            if controller.tick(now):
                break

            key = self.next_key(controller.engine)
            result = controller.consume_key(key, now)
            self.keys_typed += 1

            if verbose and result is not None and result.question_complete:
                print(f"✓ Question {controller.questions_completed} complete (combo {result.combo})")
                if controller.is_active:
                    print(render_hud(controller.snapshot()))
                    print("-" * 40)

        summary = controller.summary()
        if verbose:
            print("-" * 40)
            print(f"Session finished: {summary.reason}")
            print(render_hud(controller.snapshot()))

        return summary
