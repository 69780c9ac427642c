"""
Table Semantics Router: read-only view of the stored table descriptors.
"""

import logging
from typing import List

import psycopg2
from fastapi import APIRouter, HTTPException

from app.graph.nodes import table_index
from app.models.schemas import TableSemanticsInfo

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=List[TableSemanticsInfo])
def list_table_semantics() -> List[TableSemanticsInfo]:
    """List every table descriptor with its embedding status."""
    try:
        descriptors = table_index.fetch_descriptors()
    except psycopg2.Error as e:
        logger.error(f"Could not load table descriptors: {e}")
        raise HTTPException(status_code=503, detail="Table semantics unavailable")

    logger.info(f"Listing {len(descriptors)} table descriptors")
    return [TableSemanticsInfo(**d.summary()) for d in descriptors]
