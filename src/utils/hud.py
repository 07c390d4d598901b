"""Plain-text rendering of a session snapshot."""

from ..engine.models import Snapshot


def hp_bar(hp: int, max_hp: int, width: int = 20) -> str:
    """Render hp as a fixed-width bar."""
    if max_hp <= 0:
        return "░" * width
    filled = round(width * hp / max_hp)
    return "█" * filled + "░" * (width - filled)


def render_hud(snapshot: Snapshot) -> str:
    """
    Render the gauges and the current question as a few lines of text.

    The reading is split at the typing position with a '|' and the
    current partial input is shown in brackets.
    """
    lines = [
        f"HP [{hp_bar(snapshot.hp, snapshot.max_hp)}] {snapshot.hp}/{snapshot.max_hp}"
        f"  Time {snapshot.time_remaining:.2f}s  Combo {snapshot.combo}"
    ]
    if snapshot.display_text:
        lines.append(f"  {snapshot.display_text}")
    if snapshot.target_phrase:
        progress = f"  {snapshot.typed_text}|{snapshot.remaining_text}"
        if snapshot.partial_input:
            progress += f"  [{snapshot.partial_input}]"
        lines.append(progress)
    if snapshot.guide:
        lines.append(f"  guide: {snapshot.guide}")
    return "\n".join(lines)
