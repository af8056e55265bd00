from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from bulkimport.routes.api import router as api_router
from bulkimport.startup import configure_logging, init_database


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    init_database()
    yield


app = FastAPI(title="bulkimport", lifespan=lifespan)
app.include_router(api_router)
