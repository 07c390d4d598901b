"""Ordering of ranking records. Storage is left to the caller."""

from typing import Iterable, List, Optional

from .models import Difficulty, Mode, RankingRecord


MAX_RANKING_ENTRIES = 100


def rank_records(
    records: Iterable[RankingRecord],
    mode: Optional[Mode] = None,
    difficulty: Optional[Difficulty] = None,
    limit: int = MAX_RANKING_ENTRIES,
) -> List[RankingRecord]:
    """
    Order ranking records best first.

    Higher damage ranks first; ties go to fewer misses, then to the faster
    clear. Records can be narrowed to one mode and difficulty board.

    Args:
        records: Records to rank
        mode: Keep only records of this mode
        difficulty: Keep only records of this difficulty
        limit: Maximum number of records returned

    Returns:
        Ranked records, at most `limit` of them
    """
    selected = [
        r for r in records
        if (mode is None or r.mode == mode)
        and (difficulty is None or r.difficulty == difficulty)
    ]
    selected.sort(key=lambda r: (-r.total_damage, r.miss_count, r.elapsed_time))
    return selected[:limit]
