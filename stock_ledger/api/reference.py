"""
Reason catalog and node directory endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stock_ledger.errors import ReferenceNotFound
from stock_ledger.models.base import get_db
from stock_ledger.schemas.reference import (
    ReasonCreate,
    ReasonResponse,
    NodeCreate,
    NodeResponse,
)
from stock_ledger.services.node_service import NodeService
from stock_ledger.services.reason_service import ReasonService

router = APIRouter(tags=["Reference data"])


# --- Reasons ---

@router.post("/reasons", response_model=ReasonResponse, status_code=201)
def create_reason(
    request: ReasonCreate,
    db: Session = Depends(get_db),
):
    service = ReasonService(db)
    try:
        reason = service.create_reason(request)
        db.commit()
        return reason
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/reasons", response_model=list[ReasonResponse])
def list_reasons(db: Session = Depends(get_db)):
    return ReasonService(db).list_reasons()


@router.get("/reasons/{reason_id}", response_model=ReasonResponse)
def get_reason(reason_id: int, db: Session = Depends(get_db)):
    try:
        return ReasonService(db).lookup(reason_id)
    except ReferenceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


# --- Nodes ---

@router.post("/nodes", response_model=NodeResponse, status_code=201)
def create_node(
    request: NodeCreate,
    db: Session = Depends(get_db),
):
    service = NodeService(db)
    try:
        node = service.create_node(request)
        db.commit()
        return node
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/nodes/{node_id}", response_model=NodeResponse)
def get_node(node_id: int, db: Session = Depends(get_db)):
    try:
        return NodeService(db).lookup(node_id)
    except ReferenceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
