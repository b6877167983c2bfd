"""
FastAPI application for the remote skills server.
"""

import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..skills.schemas import RemoteSkillMetadata, RemoteSkillRequest, RemoteSkillResponse
from .config import SkillServerConfig
from .executor import execute_skill

logger = logging.getLogger("reviewflow.server.app")


def create_app(config: Optional[SkillServerConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = SkillServerConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.config = config
        app.state.started_at = time.time()
        logger.info(f"Skills server listening on http://{config.host}:{config.port}")
        yield
        logger.info("Skills server stopped")

    app = FastAPI(
        title="ReviewFlow Skills Server",
        description="Remote execution of ReviewFlow skills",
        version=config.server_version,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "uptime": int(time.time() - app.state.started_at),
            "version": app.state.config.server_version,
        }

    @app.post("/skills/execute")
    async def execute(request: Request):
        t0 = time.time()
        try:
            body = await request.json()
        except ValueError as e:
            logger.error(f"Request body is not valid JSON: {e}")
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid request schema", "details": str(e)},
            )

        try:
            skill_request = RemoteSkillRequest.model_validate(body)
        except ValidationError as e:
            logger.error(f"Invalid request schema: {e}")
            return JSONResponse(
                status_code=400,
                content={"error": "Invalid request schema", "details": json.loads(e.json())},
            )

        skill_name = skill_request.skill_name
        correlation_id = skill_request.correlation_id
        logger.info(
            f"Received skill {skill_name} (correlation_id={correlation_id}, "
            f"test_mode={skill_request.test_mode})"
        )
        if skill_request.context_hint:
            logger.info(f"Context: {skill_request.context_hint}")

        ok = True
        error: Optional[str] = None
        output: dict[str, Any] = {}
        try:
            output = execute_skill(
                skill_name,
                skill_request.input_summary,
                skill_request.test_mode,
                correlation_id,
            )
        except Exception as e:
            ok = False
            error = getattr(e, "message", None) or str(e)
            logger.error(f"Error executing {skill_name} (correlation_id={correlation_id}): {error}")

        response = RemoteSkillResponse(
            ok=ok,
            skill_name=skill_name,
            output_summary=output,
            duration_ms=max(1, round((time.time() - t0) * 1000)),
            error=error,
            metadata=RemoteSkillMetadata(
                server_version=app.state.config.server_version,
                executed_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
        logger.info(
            f"Completed {skill_name} in {response.duration_ms}ms "
            f"(correlation_id={correlation_id}, ok={ok})"
        )
        return response.model_dump(exclude_none=True)

    return app


class SkillServer:
    """High-level server class for running the remote skills server."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 4010,
        **kwargs,
    ):
        self.config = SkillServerConfig(host=host, port=port, **kwargs)
        self.app = create_app(self.config)

    def run(self):
        """Run the server (blocking)."""
        import uvicorn

        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
        )

    async def run_async(self):
        """Run the server asynchronously."""
        import uvicorn

        config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
        )
        server = uvicorn.Server(config)
        await server.serve()
