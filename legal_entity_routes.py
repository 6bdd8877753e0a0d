"""
Legal Entity API Routes for the Minka Platform
Lookup of registered organizations that can receive campaign funds
"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models import LegalEntity, legal_entity_to_dict

logger = logging.getLogger(__name__)

legal_entity_router = APIRouter()


@legal_entity_router.get("/legal-entities")
async def get_legal_entities(
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """List active legal entities, optionally filtered by name or tax id - PUBLIC ACCESS"""
    try:
        query = db.query(LegalEntity).filter(LegalEntity.is_active.is_(True))

        if search and search.strip():
            term = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    LegalEntity.name.ilike(term),
                    LegalEntity.tax_id.ilike(term)
                )
            )

        entities = query.order_by(LegalEntity.name).limit(limit).all()
        return [legal_entity_to_dict(entity) for entity in entities]

    except Exception as e:
        logger.error(f"Get legal entities error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve legal entities"
        )
