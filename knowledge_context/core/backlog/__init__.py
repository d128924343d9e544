"""
Embedding backlog package.

Exports:
  - BacklogManager: Status, Generate, Process-queue, Validate, Clear-errors
  - EmbeddingTarget, NODE_TARGET, CHUNK_TARGET: Tables the backlog can manage
  - prepare_node_text: Node embedding text builder
"""

from knowledge_context.core.backlog.manager import (
    CHUNK_TARGET,
    NODE_TARGET,
    BacklogManager,
    EmbeddingTarget,
    parse_record_ids,
)
from knowledge_context.core.backlog.node_text import prepare_chunk_text, prepare_node_text

__all__ = [
    "BacklogManager",
    "EmbeddingTarget",
    "NODE_TARGET",
    "CHUNK_TARGET",
    "parse_record_ids",
    "prepare_node_text",
    "prepare_chunk_text",
]
