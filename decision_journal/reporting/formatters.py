"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept analytics models and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Activity chart
--------------
``format_activity_chart()`` draws one row per day, quick decisions as
``#`` and deep decisions as ``=``::

    Mon   ##=        3  (quick 2, deep 1)
    Tue              0
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from decision_journal.models.analytics import (
    DashboardStats,
    DayBucket,
    HistorySummary,
    StreakResult,
)
from decision_journal.models.decision import Decision
from decision_journal.models.recommendation import RecommendationResult
from decision_journal.models.reflection import ReflectionStats
from decision_journal.utils.time_utils import format_relative_date

_MAX_TITLE = 40


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _format_seconds(seconds: float) -> str:
    seconds = int(round(seconds))
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


# ── Streaks and activity ──────────────────────────────────────────────────────


def format_streak(streak: StreakResult, user_id: str) -> str:
    """Streak summary block."""
    day_word = "day" if streak.current == 1 else "days"
    lines = [
        "",
        "=== Decision Streak ===",
        f"  User:            {user_id}",
        f"  Current streak:  {streak.current} {day_word}",
        f"  Longest streak:  {streak.longest}",
        f"  This month:      {streak.this_month}",
        f"  Total decisions: {streak.total}",
    ]
    return "\n".join(lines)


def format_activity_chart(buckets: Sequence[DayBucket]) -> str:
    """One row per day, oldest first."""
    lines = ["", f"=== Activity (last {len(buckets)} days) ==="]
    width = max((b.total for b in buckets), default=0)
    for b in buckets:
        bar = ("#" * b.quick_count + "=" * b.deep_count).ljust(width)
        detail = f"  (quick {b.quick_count}, deep {b.deep_count})" if b.total else ""
        lines.append(f"  {b.day_label:<4} {b.day.isoformat()}  {bar}  {b.total:>3}{detail}")
    lines.append("  Legend: # quick   = deep")
    return "\n".join(lines)


# ── Reflections ───────────────────────────────────────────────────────────────


def format_reflection_stats(stats: ReflectionStats) -> str:
    """Reflection statistics block."""
    lines = [
        "",
        "=== Reflection Statistics ===",
        f"  User:               {stats.user_id or '-'}",
        f"  Reflections:        {stats.total_reflections}",
        f"  Avg satisfaction:   {stats.average_satisfaction:.2f} / 5",
        f"  Would repeat:       {stats.would_repeat_percentage:.0f}%",
        f"  Trend:              {stats.reflection_trend}",
        f"  Last updated:       {stats.last_updated.isoformat(timespec='seconds')}",
        "",
        "  Outcomes:",
    ]
    for outcome, count in stats.satisfaction_counts.items():
        lines.append(f"    {outcome:<18} {count:>4}")

    if stats.satisfaction_by_category:
        lines.append("")
        lines.append("  By category (avg satisfaction):")
        for category in sorted(stats.satisfaction_by_category):
            lines.append(f"    {category:<18} {stats.satisfaction_by_category[category]:>5.2f}")

    lines.append("")
    lines.append("  Learnings by type:")
    for learning_type, count in stats.learnings_by_type.items():
        lines.append(f"    {learning_type:<18} {count:>4}")
    return "\n".join(lines)


# ── Dashboard ─────────────────────────────────────────────────────────────────


def format_dashboard(stats: DashboardStats) -> str:
    """Dashboard summary block."""
    counts = stats.decision_counts
    tm = stats.time_metrics
    sm = stats.satisfaction_metrics
    lines = [
        "",
        f"=== Dashboard ({stats.time_range}) ===",
        f"  User:              {stats.user_id or '-'}",
        f"  Decisions:         {counts.total}"
        f"  (quick {counts.by_type.get('quick', 0)}, deep {counts.by_type.get('deep', 0)})",
        f"  Current streak:    {stats.streaks.current}",
        f"  Avg satisfaction:  {sm.average_satisfaction:.2f} ({sm.trend_direction})",
        f"  Followed recs:     {sm.percent_followed_recommendations:.0f}%",
    ]
    if tm.total_time_spent:
        lines.append(
            f"  Time spent:        {_format_seconds(tm.total_time_spent)} total, "
            f"{_format_seconds(tm.average_time_spent)} avg "
            f"({_format_seconds(tm.quickest_decision)} - {_format_seconds(tm.longest_decision)})"
        )

    active_categories = {k: v for k, v in counts.by_category.items() if v}
    if active_categories:
        lines.append("")
        lines.append("  By category:")
        for category, n in sorted(active_categories.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"    {category:<16} {n:>4}")

    active_statuses = {k: v for k, v in counts.by_status.items() if v}
    if active_statuses:
        lines.append("")
        lines.append("  By status:")
        for status, n in active_statuses.items():
            lines.append(f"    {status:<16} {n:>4}")
    return "\n".join(lines)


# ── History ───────────────────────────────────────────────────────────────────


def format_history(
    decisions: Sequence[Decision],
    summary: HistorySummary,
    now: Optional[datetime] = None,
) -> str:
    """Decision history table with header counts."""
    lines = [
        "",
        "=== Decision History ===",
        f"  Total {summary.total} | quick {summary.quick} | deep {summary.deep} | "
        f"completed {summary.completed} ({summary.completion_rate}%) | "
        f"recent {summary.recent}",
    ]
    if not decisions:
        lines.append("")
        lines.append("  (no decisions match)")
        return "\n".join(lines)

    lines.append("")
    lines.append(f"  {'When':<12}  {'Type':<5}  {'Category':<13}  {'Status':<11}  Title")
    lines.append("  " + "-" * 78)
    for d in decisions:
        lines.append(
            f"  {format_relative_date(d.created_at, now):<12}  {d.type:<5}  "
            f"{d.category:<13}  {d.status:<11}  {_truncate(d.title, _MAX_TITLE)}"
        )
    return "\n".join(lines)


# ── Recommendation ────────────────────────────────────────────────────────────


def format_recommendation(result: RecommendationResult) -> str:
    """Recommendation block; a mismatch is shown as a warning, not a pick."""
    lines = ["", f"=== Recommendation ({result.decision_type}) ==="]
    if result.is_mismatch:
        lines.append(
            f"  [WARN] The recommendation {result.recommendation_text!r} does not match "
            "any option. Try rephrasing the decision."
        )
    else:
        assert result.recommended_option is not None
        lines.append(f"  Best option: {result.recommended_option.text}")
        lines.append(
            f"  Confidence:  {result.confidence}% ({result.confidence_label}) "
            f"[matched by {result.match_method}]"
        )
    if result.reasoning:
        lines.append(f"  Reasoning:   {result.reasoning}")

    lines.append("")
    for option in result.options:
        marker = "*" if option.selected else " "
        lines.append(
            f"  [{marker}] {option.text}  (+{len(option.pros)} / -{len(option.cons)})"
        )
    return "\n".join(lines)
