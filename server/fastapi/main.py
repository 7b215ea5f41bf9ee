import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from langchain_core.language_models.chat_models import BaseChatModel

from config import Settings, get_settings
from errors import BadRequest, ChatError, ChatFailure, Misconfigured
from graph import run_chat_turn
from llm import build_llm
from logging_config import setup_logging
from models import ChatMetadata, ChatRequest, ChatResponse, ErrorResponse

app_settings = get_settings()
setup_logging(app_settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pooled client for every outbound call (geocoding + weather)
    async with httpx.AsyncClient(timeout=app_settings.http_timeout) as client:
        app.state.http_client = client
        yield


app = FastAPI(
    title="Weather Agent API",
    description="Chat backend answering weather questions with live data",
    version="0.1.0",
    lifespan=lifespan,
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(app_settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %s (%.3fs)",
        request.method,
        request.url.path,
        response.status_code,
        time.perf_counter() - start,
    )
    return response


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# --- Dependencies ---


def get_llm(settings: Settings = Depends(get_settings)) -> BaseChatModel | None:
    """The configured chat model, or None when its API key is missing."""
    if not settings.api_key:
        return None
    return build_llm(settings)


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


# --- Endpoints ---


@app.get("/")
async def root():
    return {"message": "Hello from Weather Agent API"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post(
    "/api/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(
    request: Request,
    settings: Settings = Depends(get_settings),
    llm: BaseChatModel | None = Depends(get_llm),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Answer a chat message, looking up live weather when a city is mentioned."""
    # Checked before the body is read so no network call happens
    if llm is None:
        raise Misconfigured(settings.missing_credential_message)

    try:
        payload = ChatRequest.model_validate(await request.json())
    except ValueError:
        # invalid JSON or a body that is not an object
        raise BadRequest()
    if not payload.message:
        raise BadRequest()

    try:
        state = await run_chat_turn(payload.message, llm, http_client, settings)
    except Exception as exc:
        logger.exception("Error processing chat")
        raise ChatFailure() from exc

    weather = state.get("weather")
    if weather is None:
        return ChatResponse(response=state["response"])

    return ChatResponse(
        response=state["response"],
        metadata=ChatMetadata(city=state["city"], weatherData=weather.to_text()),
    )
