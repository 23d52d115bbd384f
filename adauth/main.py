from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .bootstrap import initialize_application
from .routers import auth, index


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_application()
    yield


app = FastAPI(title="AD Auth", lifespan=lifespan)
app.include_router(auth.router)
app.include_router(index.router)


@app.get("/health")
def health():
    return {"status": "ok"}
