"""
Graph node CRUD operations.

Read access to a user's graph nodes plus the embedding backlog
operations inherited from EmbeddableCRUD. Soft-deleted nodes are
invisible to every query here.

Dependencies: sqlalchemy, knowledge_context.boundary.db.models
System role: Graph node persistence for context assembly and backlog
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_context.boundary.db.CRUD.embeddable_crud import EmbeddableCRUD
from knowledge_context.boundary.db.models.graph_node_model import GraphNodeModel


class GraphNodeCRUD(EmbeddableCRUD[GraphNodeModel]):
    """
    CRUD operations for GraphNodeModel.

    Owner scope is the user; status breakdowns group by node_type.
    """

    type_label = "node"

    def __init__(self) -> None:
        """Initialize GraphNodeCRUD with GraphNodeModel."""
        super().__init__(
            GraphNodeModel,
            owner_column=GraphNodeModel.user_id,
            type_column=GraphNodeModel.node_type,
        )

    def _base_filters(self) -> list:
        return [GraphNodeModel.deleted_at.is_(None)]

    async def get_user_nodes(
        self,
        session: AsyncSession,
        user_id: UUID,
        node_type: str,
        limit: int | None = None,
        since: datetime | None = None,
    ) -> Sequence[GraphNodeModel]:
        """
        Retrieve a user's nodes of one type, newest first.

        Args:
            session: Async database session
            user_id: Owning user
            node_type: Node type to fetch
            limit: Maximum nodes returned
            since: Only nodes created at or after this time

        Returns:
            Sequence of GraphNodeModels ordered by (created_at desc, id)
        """
        stmt = self._scoped(select(GraphNodeModel), owner_id=user_id).where(
            GraphNodeModel.node_type == node_type
        )
        if since is not None:
            stmt = stmt.where(GraphNodeModel.created_at >= since)
        stmt = stmt.order_by(GraphNodeModel.created_at.desc(), GraphNodeModel.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


graph_node_crud = GraphNodeCRUD()
