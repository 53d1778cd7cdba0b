"""
A2UI Restaurant Agent - Main Entry Point

A2A JSON-RPC server for the restaurant finder agent. Clients that request
the A2UI extension get rich UI (A2UI JSON data parts), everyone else plain
text.

Usage:
    python -m a2ui_agent.main

Environment Variables:
    A2UI_HOST           - Server host (default: localhost)
    A2UI_PORT           - Server port (default: 10002)
    OPENROUTER_API_KEY  - OpenRouter key (checked first)
    OPENAI_API_KEY      - OpenAI key
    GEMINI_API_KEY      - Gemini key
    LLM_BASE_URL        - Any OpenAI-compatible endpoint (e.g. Ollama /v1)
    LLM_MODEL           - Model override
    STREAM_TIMEOUT      - Max seconds between agent stream items (0 = off)
    HISTORY_TTL         - Seconds before an idle conversation is forgotten (default: 1800)
"""

import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from .agent import RestaurantAgent
from .config import LLM_CONFIG_ERROR_MESSAGE, Config, load_config
from .executor import QueryAgent, RestaurantAgentExecutor
from .extension import get_a2ui_agent_extension
from .models import (
    AgentCapabilities,
    AgentCard,
    JSONRPCError,
    JSONRPCRequest,
    JSONRPCResponse,
    Skill,
    TaskState,
)
from .request_handler import A2AError, RequestHandler
from .task_store import InMemoryTaskStore

logger = logging.getLogger(__name__)

IMAGES_DIR = Path(__file__).resolve().parent.parent / "images"
EXTENSIONS_HEADER = "X-A2A-Extensions"


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_agent_card(config: Config) -> AgentCard:
    """A2A Agent Card for discovery"""
    return AgentCard(
        name="Restaurant Agent",
        description="This agent helps find restaurants based on user criteria.",
        url=config.base_url,
        version="1.0.0",
        defaultInputModes=RestaurantAgent.SUPPORTED_CONTENT_TYPES,
        defaultOutputModes=RestaurantAgent.SUPPORTED_CONTENT_TYPES,
        capabilities=AgentCapabilities(
            streaming=True,
            extensions=[get_a2ui_agent_extension()],
        ),
        skills=[
            Skill(
                id="find_restaurants",
                name="Find Restaurants Tool",
                description="Helps find restaurants based on user criteria (e.g., cuisine, location).",
                tags=["restaurant", "finder"],
                examples=["Find me the top 10 chinese restaurants in the US"],
            ),
        ],
    )


def jsonrpc_error(request_id: Optional[str | int], code: int, message: str) -> JSONResponse:
    """Create JSON-RPC error response"""
    return JSONResponse(content=JSONRPCResponse(
        id=request_id,
        error={"code": code, "message": message}
    ).model_dump(exclude_none=True))


def sse_data(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def create_app(config: Config, agent: Optional[QueryAgent] = None) -> FastAPI:
    """
    Build the FastAPI app.

    ``agent`` defaults to a RestaurantAgent for ``config``; tests pass a fake.
    """
    if agent is None:
        agent = RestaurantAgent(config)

    task_store = InMemoryTaskStore()
    executor = RestaurantAgentExecutor(agent, stream_timeout=config.stream_timeout or None)
    handler = RequestHandler(executor, task_store)
    agent_card = build_agent_card(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        provider = config.provider
        logger.info("=" * 60)
        logger.info(f"Starting Restaurant Agent server at {config.base_url}")
        logger.info(f"Agent card available at {config.base_url}/.well-known/agent.json")
        logger.info(f"LLM provider: {provider.name if provider else 'none'}, model: {config.model}")
        logger.info("=" * 60)

        yield

        logger.info("Shutting down...")
        close = getattr(agent, "close", None)
        if close is not None:
            await close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="A2UI Restaurant Agent",
        description="A2A agent that answers with A2UI rich UI when the client supports it",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.tasks = task_store
    app.state.executor = executor
    app.state.handler = handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", EXTENSIONS_HEADER],
    )

    if IMAGES_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=IMAGES_DIR), name="static")
    else:
        logger.warning(f"Images directory {IMAGES_DIR} not found, /static is disabled")

    # =========================================================================
    # A2A Discovery
    # =========================================================================

    @app.get("/.well-known/agent.json")
    @app.get("/.well-known/agent-card.json")
    async def get_agent_card():
        return agent_card.model_dump(exclude_none=True)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        provider = config.provider
        return {
            "status": "ok",
            "provider": provider.name if provider else None,
            "model": config.model,
            "tasks": len(task_store),
            "working_tasks": len(await task_store.list_tasks(TaskState.WORKING)),
        }

    # =========================================================================
    # A2A JSON-RPC Endpoint
    # =========================================================================

    @app.post("/")
    async def a2a_jsonrpc(request: Request):
        """
        A2A JSON-RPC endpoint

        Methods:
            message/send    - Run a turn, return the final task
            message/stream  - Run a turn, stream events via SSE
            tasks/get       - Get task by ID
            tasks/cancel    - Cancel a task
        """
        try:
            body = await request.json()
        except ValueError as e:
            return jsonrpc_error(None, JSONRPCError.PARSE_ERROR, f"Parse error: {e}")

        try:
            rpc_request = JSONRPCRequest.model_validate(body)
        except ValidationError as e:
            request_id = body.get("id") if isinstance(body, dict) else None
            return jsonrpc_error(request_id, JSONRPCError.INVALID_REQUEST, f"Invalid request: {e}")

        method = rpc_request.method
        params = rpc_request.params or {}
        request_id = rpc_request.id
        header_extensions = request.headers.get(EXTENSIONS_HEADER)

        logger.info(f"Received request: {json.dumps(body)[:500]}")

        handlers = {
            "message/send": lambda: handler.on_message_send(params, header_extensions),
            "message/stream": lambda: handler.on_message_stream(params, header_extensions),
            "tasks/get": lambda: handler.on_get_task(params),
            "tasks/cancel": lambda: handler.on_cancel_task(params),
        }

        call = handlers.get(method)
        if not call:
            return jsonrpc_error(request_id, JSONRPCError.METHOD_NOT_FOUND, f"Unknown method: {method}")

        try:
            result = await call()
        except A2AError as e:
            logger.warning(f"{method} rejected: {e.message}")
            return jsonrpc_error(request_id, e.code, e.message)
        except Exception as e:
            logger.error(f"Handler error: {e}", exc_info=True)
            return jsonrpc_error(request_id, JSONRPCError.INTERNAL_ERROR, f"Internal server error: {e}")

        if method == "message/stream":
            return StreamingResponse(
                stream_response(request_id, result),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )

        return JSONResponse(content=JSONRPCResponse(
            id=request_id,
            result=result
        ).model_dump(exclude_none=True))

    return app


async def stream_response(request_id: Optional[str | int], events) -> AsyncGenerator[str, None]:
    """Wrap each handler event in a JSON-RPC response and emit it as SSE."""
    try:
        async for event in events:
            yield sse_data(JSONRPCResponse(id=request_id, result=event).model_dump(exclude_none=True))
    except Exception as e:
        logger.error(f"Streaming error: {e}", exc_info=True)
        yield sse_data(JSONRPCResponse(
            id=request_id,
            error={"code": JSONRPCError.INTERNAL_ERROR, "message": str(e)},
        ).model_dump(exclude_none=True))


def main():
    """Run the agent server."""
    config = load_config()
    setup_logging(config.log_level)

    if not config.has_llm_provider():
        logger.error(LLM_CONFIG_ERROR_MESSAGE)
        sys.exit(1)

    app = create_app(config)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
