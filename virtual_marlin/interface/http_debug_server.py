"""
HTTP debug server for programmatic access to a virtual executor.

Provides a REST API that lets test harnesses and other tools open and close
the executor, push commands through it and inspect its lifecycle state.
"""

import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .. import __version__
from .. import constants as const
from ..exceptions import CommandError
from ..exceptions import CommunicationError
from ..exceptions import ExecutorStateError
from ..executor import Open, VirtualExecutor
from ..firmware_model import SimulatedFirmware

logger = logging.getLogger(__name__)


# Pydantic Models for Request Validation
class CommandPayload(BaseModel):
    command: str
    timeout: Optional[float] = None


class ValidatePayload(BaseModel):
    reply: str
    command: str = ""


class DebugHTTPServer:
    """
    HTTP server wrapping a VirtualExecutor.

    Commands go through ``send_command``, so a request returns only once the
    simulated board has acknowledged it with 'ok'.
    """

    def __init__(
        self,
        executor: VirtualExecutor,
        port: int = const.DEFAULT_DEBUG_API_PORT,
        host: str = const.DEFAULT_DEBUG_API_HOST,
    ):
        """
        Initialize HTTP debug server.

        Args:
            executor: VirtualExecutor instance to expose
            port: Port to bind server to
            host: Host address to bind to
        """
        self.executor = executor
        self.port = port
        self.host = host

        self.app = FastAPI(
            title="Virtual Marlin Debug API",
            description="Drive a virtual Marlin executor over HTTP",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def get_status(self) -> Dict[str, Any]:
        state = self.executor.state
        return {
            "state": "open" if isinstance(state, Open) else "closed",
            "commands_processed": self.executor.get_commands_processed(),
            "busy": self.executor.is_busy,
        }

    def _setup_routes(self):
        """Setup API routes"""

        @self.app.get("/", summary="API information")
        async def root():
            return {
                "name": "Virtual Marlin Debug API",
                "version": __version__,
                "description": "Programmatic access to a virtual Marlin executor",
                "endpoints": {
                    "/status": "Executor lifecycle state and processed count",
                    "/health": "Health check",
                    "/open": "Open the executor (POST)",
                    "/close": "Close the executor (POST)",
                    "/command": "Send a command and wait for 'ok' (POST)",
                    "/validate": "Check whether a reply is complete (POST)",
                    "/docs": "Interactive API documentation",
                },
            }

        @self.app.get("/health", summary="Health check")
        async def health_check():
            return {"status": "healthy", "executor_open": self.executor.is_open}

        @self.app.get("/status", summary="Executor status")
        async def get_status():
            return self.get_status()

        @self.app.post("/open", summary="Open the executor")
        async def open_executor():
            try:
                await self.executor.open()
            except ExecutorStateError as e:
                raise HTTPException(status_code=409, detail=str(e))
            return self.get_status()

        @self.app.post("/close", summary="Close the executor")
        async def close_executor():
            try:
                await self.executor.close()
            except ExecutorStateError as e:
                raise HTTPException(status_code=409, detail=str(e))
            return self.get_status()

        @self.app.post("/command", summary="Send a command")
        async def send_command(payload: CommandPayload):
            """
            Send one command and wait for the board's 'ok'.

            Returns 400 for blank or comment-only commands, 409 if the
            executor is closed or busy, 504 on timeout.
            """
            if not SimulatedFirmware.normalize_command(payload.command):
                raise HTTPException(status_code=400, detail="Command is empty after stripping comments.")
            try:
                reply = await self.executor.send_command(payload.command, timeout=payload.timeout)
            except (ExecutorStateError, CommandError) as e:
                raise HTTPException(status_code=409, detail=str(e))
            except CommunicationError as e:
                raise HTTPException(status_code=504, detail=str(e))
            return {
                "command": payload.command,
                "reply": reply,
                "complete": VirtualExecutor.validator(payload.command, reply),
                "commands_processed": self.executor.get_commands_processed(),
            }

        @self.app.post("/validate", summary="Validate a reply")
        async def validate_reply(payload: ValidatePayload):
            return {
                "reply": payload.reply,
                "complete": VirtualExecutor.validator(payload.command, payload.reply),
            }

    async def start_server(self):
        """Runs the server until cancelled."""
        logger.info(f"Starting debug API on http://{self.host}:{self.port}")
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
