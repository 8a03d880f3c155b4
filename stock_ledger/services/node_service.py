"""
Node service — the directory of sources and destinations.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_ledger.errors import ReferenceNotFound
from stock_ledger.models.node import Node
from stock_ledger.schemas.reference import NodeCreate


class NodeService:

    def __init__(self, db: Session):
        self.db = db

    def create_node(self, request: NodeCreate) -> Node:
        """
        Register a node.

        Raises ValueError if the code is already taken.
        """
        existing = self.db.execute(
            select(Node).where(Node.code == request.code)
        ).scalar_one_or_none()

        if existing:
            raise ValueError(f"Node with code '{request.code}' already exists")

        node = Node(
            code=request.code,
            name=request.name,
            reference_id=request.reference_id,
            is_ref_data_facility=request.is_ref_data_facility,
        )
        self.db.add(node)
        self.db.flush()
        return node

    def lookup(self, node_id: int) -> Node:
        """Return an active node or raise ReferenceNotFound."""
        node = self.db.get(Node, node_id)
        if not node or not node.is_active:
            raise ReferenceNotFound("Node", node_id)
        return node
