"""
Context text rendering.

Sections are emitted in a fixed priority order (user summary, active goals,
relevant insights, knowledge, similar patterns) so that truncating the tail
of the joined text always sacrifices the lowest-priority material first.

Dependencies: knowledge_context.configs
System role: Formatting for assembled agent context
"""

import json

from knowledge_context.configs.retrieval import RetrievalSettings
from knowledge_context.core.context.models import (
    KnowledgeChunkHit,
    RelevantInsight,
    SimilarPatterns,
    UserContextSummary,
)


def summary_line(summary: UserContextSummary) -> str:
    if summary.goals or summary.insights:
        return f"User has {len(summary.goals)} goals and {len(summary.insights)} insights recorded."
    return "No recent activity found."


def render_context(
    summary: UserContextSummary,
    insights: list[RelevantInsight],
    chunks: list[KnowledgeChunkHit],
    patterns: SimilarPatterns | None,
    settings: RetrievalSettings,
) -> str:
    """
    Render all sources into one text block.

    Args:
        summary: User summary (goals come from here)
        insights: Query-relevant insights, most similar first
        chunks: Query-relevant knowledge chunks, most similar first
        patterns: Cross-user patterns, if any
        settings: Per-section caps and per-item character limits

    Returns:
        str: Sections joined by newlines, untruncated
    """
    lines = [f"USER CONTEXT:\n{summary_line(summary)}\n"]

    if summary.goals:
        lines.append("ACTIVE GOALS:")
        for n, goal in enumerate(summary.goals[: settings.goal_render_limit], start=1):
            detail = f": {goal.description[: settings.goal_text_limit]}" if goal.description else ""
            lines.append(f"{n}. {goal.label}{detail}")
        lines.append("")

    if insights:
        lines.append("RELEVANT INSIGHTS:")
        for n, insight in enumerate(insights[: settings.insight_render_limit], start=1):
            text = (insight.description or "")[: settings.insight_text_limit]
            lines.append(f"{n}. [{insight.label}] {text} ({round(insight.similarity * 100)}% relevant)")
        lines.append("")

    if chunks:
        lines.append("KNOWLEDGE BASE:")
        for n, chunk in enumerate(chunks, start=1):
            lines.append(f'{n}. From "{chunk.document_title}": {chunk.content[: settings.chunk_text_limit]}')
        lines.append("")

    if patterns is not None:
        lines.append("SIMILAR USER PATTERNS:")
        lines.append(
            f"Found {patterns.similar_goals_count} similar goals with "
            f"{round(patterns.avg_completion_rate * 100)}% average completion rate."
        )
        if patterns.common_strategies:
            lines.append(f"Common strategies: {json.dumps(patterns.common_strategies)}")
        lines.append("")

    return "\n".join(lines)
