"""
Embedding text builders.

Turns a stored record into the text that gets embedded. Graph nodes get a
type-aware rendering so that, for example, a goal's category and target
date contribute to its vector; chunks embed their content as-is.

Dependencies: knowledge_context.boundary.db.models
System role: Text preparation for backlog embedding
"""

from knowledge_context.boundary.db.models import GraphNodeModel, KnowledgeChunkModel, NodeType


def _joined(value) -> str | None:
    if isinstance(value, list) and value:
        return ", ".join(str(v) for v in value)
    return None


def prepare_node_text(node: GraphNodeModel) -> str:
    """
    Build the embedding text for a graph node.

    Args:
        node: Graph node with label, description and properties

    Returns:
        str: Multi-line text, "{node_type}: {label}" first
    """
    text = f"{node.node_type}: {node.label}"
    if node.description:
        text += f"\nDescription: {node.description}"

    props = node.properties or {}

    if node.node_type == NodeType.GOAL:
        if props.get("category"):
            text += f"\nCategory: {props['category']}"
        if props.get("priority"):
            text += f"\nPriority: {props['priority']}"
        if props.get("target_date"):
            text += f"\nTarget Date: {props['target_date']}"

    elif node.node_type == NodeType.SKILL:
        if props.get("level"):
            text += f"\nLevel: {props['level']}"
        transferable = _joined(props.get("transferable_from"))
        if transferable:
            text += f"\nTransferable from: {transferable}"

    elif node.node_type == NodeType.EMOTION:
        if props.get("emotion_type"):
            text += f"\nEmotion: {props['emotion_type']}"
        if props.get("intensity"):
            text += f"\nIntensity: {props['intensity']}"

    elif node.node_type == NodeType.SESSION:
        if props.get("duration"):
            text += f"\nDuration: {props['duration']} minutes"
        topics = _joined(props.get("topics"))
        if topics:
            text += f"\nTopics: {topics}"

    elif node.node_type == NodeType.ACCOMPLISHMENT:
        if props.get("impact"):
            text += f"\nImpact: {props['impact']}"
        if props.get("evidence"):
            text += f"\nEvidence: {props['evidence']}"

    return text


def prepare_chunk_text(chunk: KnowledgeChunkModel) -> str:
    """Chunks embed their raw content."""
    return chunk.content
