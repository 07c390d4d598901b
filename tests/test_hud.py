"""Tests for the text HUD."""

from src.engine import Snapshot
from src.utils.hud import hp_bar, render_hud


class TestHud:

    def test_hp_bar(self):
        assert hp_bar(1000, 1000, width=10) == "█" * 10
        assert hp_bar(500, 1000, width=10) == "█" * 5 + "░" * 5
        assert hp_bar(0, 1000, width=10) == "░" * 10

    def test_hp_bar_without_target(self):
        """An unset target renders an empty bar."""
        assert hp_bar(0, 0, width=4) == "░░░░"

    def test_render_progress(self):
        snapshot = Snapshot(
            status="ACTIVE",
            display_text="漢字",
            target_phrase="かんじ",
            typed_text="か",
            remaining_text="んじ",
            current_group="ん",
            candidates=["nn", "xn"],
            partial_input="",
            guide="nji",
            hp=900,
            max_hp=1000,
            combo=1,
            time_remaining=58.5,
        )
        text = render_hud(snapshot)
        assert "900/1000" in text
        assert "Time 58.50s" in text
        assert "か|んじ" in text
        assert "guide: nji" in text
