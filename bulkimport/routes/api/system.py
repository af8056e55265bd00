from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from bulkimport.dependencies import get_schema

router = APIRouter()


@router.get("/health")
def health_check(schema=Depends(get_schema)) -> Response:
    return JSONResponse(
        content={
            "status": "ok",
            "models": len(schema.models),
            "relations": len(schema.relations),
        }
    )
