from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from bulkimport.dependencies import get_executor, get_max_body_bytes, get_schema
from bulkimport.imports import ImportParseError, parse_bundle_bytes, run_import
from bulkimport.imports.uploads import (
    BodyTooLargeError,
    describe_size_limit,
    read_body_limited,
)

router = APIRouter()


@router.post("/import")
async def import_bundle(
    request: Request,
    dry_run: bool = Query(default=False, alias="dry_run"),
    schema=Depends(get_schema),
    executor=Depends(get_executor),
):
    max_bytes = get_max_body_bytes()
    try:
        payload = await read_body_limited(request.stream(), max_bytes=max_bytes)
    except BodyTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request body exceeds maximum size of {describe_size_limit(max_bytes)}.",
        ) from exc

    try:
        bundle = parse_bundle_bytes(payload)
        report = await run_import(schema, executor, bundle, dry_run=dry_run)
    except ImportParseError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "location": exc.location},
        )
    return JSONResponse(content=report)
