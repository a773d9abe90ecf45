"""FastAPI application that exposes the user directory and prompt endpoints."""
from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List, Optional, Sequence

import anthropic
from fastapi import APIRouter, FastAPI, HTTPException, Path, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .database import Database
from .models import User
from .prompts import PromptGateway

logger = logging.getLogger("userhub.api")

# SQLite INTEGER PRIMARY KEY range
MIN_USER_ID = -(2**63)
MAX_USER_ID = 2**63 - 1


class UserPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = Field(default=None, ge=MIN_USER_ID, le=MAX_USER_ID)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None


class PromptRequest(BaseModel):
    prompt: str = Field(..., description="Text sent to the model as the only user message")


class PromptResponse(BaseModel):
    response: str


def payload_to_user(payload: UserPayload) -> User:
    return User(
        id=payload.id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        department=payload.department,
    )


def user_to_payload(user: User) -> UserPayload:
    return UserPayload(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        department=user.department,
    )


def create_app(
    *,
    database: Database,
    gateway: PromptGateway | None = None,
    cors_origins: Sequence[str] = ("*",),
) -> FastAPI:
    app = FastAPI(
        title="UserHub API",
        description="User directory and prompt gateway",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.database = database
    app.state.gateway = gateway

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    users_router = APIRouter(prefix="/users")

    @users_router.post("", response_model=UserPayload, response_model_exclude_none=True)
    async def save_user(payload: UserPayload) -> UserPayload:
        saved = database.save_user(payload_to_user(payload))
        logger.info("Saved user %s", saved.id)
        return user_to_payload(saved)

    @users_router.get("", response_model=List[UserPayload], response_model_exclude_none=True)
    async def list_users() -> List[UserPayload]:
        return [user_to_payload(user) for user in database.list_users()]

    @users_router.get("/{user_id}", response_model=UserPayload, response_model_exclude_none=True)
    async def read_user(user_id: int = Path(..., ge=MIN_USER_ID, le=MAX_USER_ID)):
        user = database.get_user(user_id)
        if user is None:
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return user_to_payload(user)

    @users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_user(user_id: int = Path(..., ge=MIN_USER_ID, le=MAX_USER_ID)) -> Response:
        database.delete_user(user_id)
        logger.info("Deleted user %s", user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    app.include_router(users_router)

    if gateway is not None:

        @app.post("/prompt", response_model=PromptResponse)
        def ask_prompt(payload: PromptRequest) -> PromptResponse:
            try:
                answer = gateway.ask(payload.prompt)
            except anthropic.APIError as exc:
                logger.warning("Prompt provider request failed: %s", exc)
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
            return PromptResponse(response=answer)

    @app.exception_handler(sqlite3.Error)
    async def handle_database_error(_: object, exc: sqlite3.Error):
        logger.exception("Database operation failed", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Database error"},
        )

    return app


__all__ = ["create_app", "payload_to_user", "user_to_payload"]
