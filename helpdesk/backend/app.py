from __future__ import annotations

"""FastAPI backend for the Helpdesk support chat.

Run with:
    uvicorn helpdesk.backend.app:create_app --factory --port 4000

or simply ``helpdesk-server`` once the package is installed.

Env vars required:
    DATABASE_URL
    OPENAI_API_KEY
"""

from datetime import datetime
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import ConfigurationError, Settings, load_settings, setup_logging
from helpdesk.llm.policies import PolicyDocument, load_policy, load_policy_file
from helpdesk.llm.reply_generator import ReplyGenerator
from helpdesk.memory.crud import ConversationStore
from helpdesk.memory.db import init_db, make_engine, make_session_factory
from helpdesk.memory.models import SENDER_AI, SENDER_USER
from helpdesk.utils.openai_client import get_openai_client

MAX_MESSAGE_LENGTH = 1000

ERR_EMPTY = "Message cannot be empty."
ERR_TOO_LONG = f"Message too long (max {MAX_MESSAGE_LENGTH} chars)."
ERR_NOT_FOUND = "Conversation not found."
ERR_SESSION_REQUIRED = "sessionId is required."
ERR_BAD_REQUEST = "Invalid request body."
ERR_INTERNAL = "Internal server error"

HEALTH_TEXT = "AI Chat Backend is running"

# ---------------------------------------------------------------------------
# Pydantic Schemas
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Typed loosely so that a missing or non-string message is reported as
    # "Message cannot be empty." rather than a schema error.
    message: Any = None
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    session_id: str = Field(alias="sessionId")


class MessageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    conversation_id: str = Field(alias="conversationId")
    sender: str
    text: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    messages: List[MessageOut]


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_store(request: Request) -> ConversationStore:
    return request.app.state.store


def get_reply_generator(request: Request) -> ReplyGenerator:
    return request.app.state.reply_generator


def get_history_limit(request: Request) -> int:
    return request.app.state.history_limit


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def validate_message(message: Any) -> str:
    """Return ``message`` unchanged or raise a 400 ``HTTPException``."""
    if not isinstance(message, str) or not message.strip():
        raise HTTPException(status_code=400, detail=ERR_EMPTY)
    if len(message) > MAX_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail=ERR_TOO_LONG)
    return message


def resolve_policy(settings: Settings) -> PolicyDocument:
    if settings.policy_file:
        return load_policy_file(settings.policy_file)
    return load_policy(settings.policy_name)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def register_routes(app: FastAPI) -> None:

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return HEALTH_TEXT

    @app.post("/chat/message", response_model=ChatResponse)
    async def post_message(
        req: ChatRequest,
        store: ConversationStore = Depends(get_store),
        generator: ReplyGenerator = Depends(get_reply_generator),
        history_limit: int = Depends(get_history_limit),
    ):
        message = validate_message(req.message)

        try:
            conversation_id = req.session_id
            if not conversation_id:
                conversation = await run_in_threadpool(store.create_conversation)
                conversation_id = conversation.id
            elif await run_in_threadpool(store.get_conversation, conversation_id) is None:
                raise HTTPException(status_code=404, detail=ERR_NOT_FOUND)

            await run_in_threadpool(store.append_message, conversation_id, SENDER_USER, message)

            history = await run_in_threadpool(
                store.list_recent_messages, conversation_id, limit=history_limit
            )
            reply = await generator.generate_reply(history)

            await run_in_threadpool(store.append_message, conversation_id, SENDER_AI, reply)
        except HTTPException:
            raise
        except Exception:
            logger.exception("Chat error")
            return _error(500, ERR_INTERNAL)

        return ChatResponse(reply=reply, session_id=conversation_id)

    @app.get("/chat/history", response_model=HistoryResponse)
    async def get_history(
        session_id: Optional[str] = Query(default=None, alias="sessionId"),
        store: ConversationStore = Depends(get_store),
    ):
        if not session_id:
            raise HTTPException(status_code=400, detail=ERR_SESSION_REQUIRED)

        try:
            messages = await run_in_threadpool(store.list_messages, session_id)
        except Exception:
            logger.exception("History error")
            return _error(500, ERR_INTERNAL)

        return HistoryResponse(messages=[MessageOut.model_validate(m) for m in messages])


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected request body: {}", exc.errors())
        return _error(400, ERR_BAD_REQUEST)


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ConversationStore] = None,
    reply_generator: Optional[ReplyGenerator] = None,
) -> FastAPI:
    """Build the FastAPI app with explicitly constructed handles.

    Any handle that is not passed in is built from ``settings`` (loaded from
    the environment when omitted). Missing credentials raise
    ``ConfigurationError``, which aborts startup.
    """
    if settings is None:
        settings = load_settings()
    setup_logging(settings.log_level)

    if store is None:
        engine = make_engine(settings.database_url)
        init_db(engine)
        store = ConversationStore(make_session_factory(engine))

    if reply_generator is None:
        policy = resolve_policy(settings)
        reply_generator = ReplyGenerator(
            client=get_openai_client(settings.openai_api_key),
            policy=policy,
            model=settings.completion_model,
        )

    app = FastAPI(title="Helpdesk Support Chat", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.store = store
    app.state.reply_generator = reply_generator
    app.state.history_limit = settings.history_limit

    register_error_handlers(app)
    register_routes(app)

    logger.info(
        "Helpdesk ready | policy={} | model={} | history_limit={}",
        reply_generator.policy.name,
        reply_generator.model,
        settings.history_limit,
    )
    return app


def main() -> None:
    """Console entry point: load settings, build the app and serve it."""
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        raise SystemExit(1)

    app = create_app(settings)
    logger.info("Server running on http://localhost:{}", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
