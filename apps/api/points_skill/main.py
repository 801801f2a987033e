from __future__ import annotations

from fastapi import FastAPI

from .routes import alexa as alexa_routes

app = FastAPI(
    title="Family Points Skill",
    version="0.1.0",
    description="Voice skill backend for tracking family points",
)

app.include_router(alexa_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    return {"message": "Family Points skill ready"}
