"""Achievement tiers, juz completion and next targets derived from point totals."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .db.session import session_scope
from .domain import TOTAL_JUZ, CompletionLabel
from .repositories import labels, point_ledger_rows

# Highest threshold first; the first one met wins.
TIER_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (1000, "Master"),
    (500, "Expert"),
    (200, "Advanced"),
    (100, "Intermediate"),
    (0, "Beginner"),
)
MASTER_TIER = TIER_THRESHOLDS[0][1]


class NextTargets(BaseModel):
    next_juz: Optional[int] = None
    next_tier: Optional[str] = None
    points_to_next_tier: Optional[int] = None
    points_to_master: Optional[int] = None


class AchievementSummary(BaseModel):
    siswa_id: str
    total_poin: int = 0
    tier: str = "Beginner"
    completed_juz: List[int] = Field(default_factory=list)
    completed_count: int = 0
    completion_percentage: float = 0.0
    labels: List[CompletionLabel] = Field(default_factory=list)
    targets: NextTargets = Field(default_factory=NextTargets)


def achievement_tier(total_points: int) -> str:
    for threshold, name in TIER_THRESHOLDS:
        if total_points >= threshold:
            return name
    return TIER_THRESHOLDS[-1][1]


def completion_percentage(completed_units: int) -> float:
    """Share of the 30 juz completed, clamped to [0, 100] for display."""
    percentage = completed_units / TOTAL_JUZ * 100
    return max(0.0, min(100.0, percentage))


def next_juz(completed: Iterable[int]) -> Optional[int]:
    done = set(completed)
    for juz in range(1, TOTAL_JUZ + 1):
        if juz not in done:
            return juz
    return None


def next_targets(total_points: int, completed: Sequence[int]) -> NextTargets:
    targets = NextTargets(next_juz=next_juz(completed))
    if achievement_tier(total_points) == MASTER_TIER:
        return targets
    # Walk upward from the lowest threshold to the first one not yet reached.
    for threshold, name in reversed(TIER_THRESHOLDS):
        if total_points < threshold:
            targets.next_tier = name
            targets.points_to_next_tier = threshold - total_points
            break
    targets.points_to_master = TIER_THRESHOLDS[0][0] - total_points
    return targets


def summarize(siswa_id: str, total_points: int, completion_labels: Sequence[CompletionLabel]) -> AchievementSummary:
    completed = sorted({label.juz for label in completion_labels})
    return AchievementSummary(
        siswa_id=siswa_id,
        total_poin=total_points,
        tier=achievement_tier(total_points),
        completed_juz=completed,
        completed_count=len(completed),
        completion_percentage=completion_percentage(len(completed)),
        labels=list(completion_labels),
        targets=next_targets(total_points, completed),
    )


def achievement_summary(siswa_id: str) -> AchievementSummary:
    with session_scope(commit=False) as session:
        completion_labels = labels.list_for_student(session, siswa_id)
        balance = point_ledger_rows.get(session, siswa_id)
    return summarize(siswa_id, balance.total_poin, completion_labels)


__all__ = [
    "AchievementSummary",
    "MASTER_TIER",
    "NextTargets",
    "TIER_THRESHOLDS",
    "achievement_summary",
    "achievement_tier",
    "completion_percentage",
    "next_juz",
    "next_targets",
    "summarize",
]
