"""
Job Agent HTTP Server
=====================

FastAPI service exposing the job search, the agent tools, provider
status and result export.

Usage:
    python -m job_agent.server --port 3000
    job-agent serve --port 3000

Endpoints:
    GET  /api/health                     - Service health
    GET  /api/providers                  - Provider availability
    POST /api/providers/reset            - Forget provider failures
    POST /api/settings                   - (Re)configure providers and keys
    POST /api/search-jobs                - Run a job search, save a report
    POST /api/tools/...                  - Individual agent tools
    POST /api/export/{csv|excel|pdf}     - Export posted jobs
    GET  /api/history                    - Saved reports, newest first
    GET  /api/export/{filename}/{format} - Re-export a saved report
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from .config import Settings
from .export import MEDIA_TYPES, export_jobs, export_to_text, parse_jobs_from_text
from .providers import (
    ConfigurationError,
    FallbackDispatcher,
    ProviderConfig,
    ProviderRegistry,
    build_registry,
)
from .tools import Toolbox
from .tools.browse import fetch_page
from .tools.judge import check_goal_done

logger = logging.getLogger(__name__)


# =============================================================================
# Request Models
# =============================================================================

class SearchJobsRequest(BaseModel):
    query: str = "Software Engineer"
    location: str = "San Francisco, CA"
    remote: bool = False
    count: int = 10


class AddTodosRequest(BaseModel):
    newTodos: List[str]


class TodoRequest(BaseModel):
    todo: str


class GoalRequest(BaseModel):
    goal: str
    answer: str


class QueryRequest(BaseModel):
    query: str


class UrlRequest(BaseModel):
    url: str


class ExportRequest(BaseModel):
    jobs: List[Dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# Helpers
# =============================================================================

def _now() -> str:
    return datetime.now().isoformat()


def _error(e: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": str(e)})


def _attachment(content: bytes, fmt: str, filename: str) -> Response:
    media_type, _ = MEDIA_TYPES[fmt]
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


class AgentState:
    """Per-app state: providers, tools, last results."""

    def __init__(self, settings: Settings, registry: ProviderRegistry):
        self.settings = settings
        self.registry = registry
        self.dispatcher = FallbackDispatcher(registry)
        self.toolbox = Toolbox(settings.serpapi_key, dispatcher=self.dispatcher)
        self.downloads_dir = Path(settings.downloads_dir)
        self.current_jobs: List[Dict[str, Any]] = []

    def apply_settings(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Reconfigure from a settings payload; returns the provider status.

        A payload that carries an empty ``apiKey`` (and no credentials)
        clears the provider configuration, so LLM calls fail until a new
        key is posted.
        """
        serpapi_key = data.get("serpApiKey") or data.get("serpapi_key")
        if serpapi_key:
            self.settings.serpapi_key = serpapi_key
            self.toolbox.search.update_api_key(serpapi_key)

        key_fields = ("apiKey", "api_key", "credentials")
        if any(data.get(k) for k in key_fields):
            self.registry.configure(ProviderConfig.from_settings(data))
        elif any(k in data for k in key_fields):
            self.registry.clear()
        return self.dispatcher.get_status()


# =============================================================================
# App Factory
# =============================================================================

def create_app(
    registry: Optional[ProviderRegistry] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        registry: Provider registry (built from ``settings`` if None)
        settings: Operator settings (loaded from the environment if None)
    """
    settings = settings or Settings.load()
    if registry is None:
        registry = build_registry(settings.variant)
        if settings.has_llm_credentials():
            try:
                registry.configure(settings.to_provider_config())
            except ConfigurationError as e:
                logger.warning(f"LLM providers not configured: {e}; POST /api/settings to fix")
        else:
            logger.warning("No LLM API key configured; POST /api/settings to configure")

    state = AgentState(settings, registry)

    app = FastAPI(
        title="Job Agent",
        description="Job search agent with LLM provider fallback",
        version="1.0.0",
    )
    app.state.agent = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Health and providers
    # -------------------------------------------------------------------------

    @app.get("/api/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": _now(),
            "jobsInMemory": len(state.current_jobs),
        }

    @app.get("/api/providers")
    async def providers():
        try:
            return {"success": True, "providers": state.dispatcher.get_status(), "timestamp": _now()}
        except Exception as e:
            return _error(e)

    @app.post("/api/providers/reset")
    async def reset_providers():
        try:
            state.registry.reset()
            return {
                "success": True,
                "message": "Provider cache reset successfully",
                "timestamp": _now(),
            }
        except Exception as e:
            return _error(e)

    @app.post("/api/settings")
    async def update_settings(data: Dict[str, Any] = Body(...)):
        try:
            return {"success": True, "providers": state.apply_settings(data)}
        except Exception as e:
            logger.error(f"Settings update failed: {e}")
            return _error(e)

    # -------------------------------------------------------------------------
    # Job search
    # -------------------------------------------------------------------------

    @app.post("/api/search-jobs")
    async def search_jobs(request: SearchJobsRequest):
        logger.info(
            f"Job search request: {request.query} in {request.location}, "
            f"Remote: {request.remote}, Count: {request.count}"
        )
        try:
            jobs = await state.toolbox.search.search_jobs(
                request.query, request.location, request.remote, request.count
            )
            state.current_jobs = jobs
            path = export_to_text(jobs, downloads_dir=state.downloads_dir)
            logger.info(f"Results saved to: {path}")
            return {"success": True, "jobs": jobs, "count": len(jobs), "filename": str(path)}
        except Exception as e:
            logger.error(f"Job search failed: {e}")
            return _error(e)

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    @app.post("/api/tools/add-todos")
    async def add_todos(request: AddTodosRequest):
        try:
            return {"success": True, "result": state.toolbox.todo_list.add_todos(request.newTodos)}
        except Exception as e:
            return _error(e)

    @app.post("/api/tools/mark-todo-done")
    async def mark_todo_done(request: TodoRequest):
        try:
            return {"success": True, "result": state.toolbox.todo_list.mark_todo_done(request.todo)}
        except Exception as e:
            return _error(e)

    @app.get("/api/tools/check-todos")
    async def check_todos():
        try:
            return {"success": True, "result": state.toolbox.todo_list.check_todos()}
        except Exception as e:
            return _error(e)

    @app.post("/api/tools/check-goal-done")
    async def goal_done(request: GoalRequest):
        try:
            result = await check_goal_done(request.goal, request.answer, dispatcher=state.dispatcher)
            return {"success": True, "result": result}
        except Exception as e:
            return _error(e)

    @app.post("/api/tools/search-google")
    async def search_google(request: QueryRequest):
        try:
            return {"success": True, "result": await state.toolbox.search.search_google(request.query)}
        except Exception as e:
            return _error(e)

    @app.post("/api/tools/browse-web")
    async def browse_web(request: UrlRequest):
        try:
            return {"success": True, "result": await fetch_page(request.url)}
        except Exception as e:
            return _error(e)

    # -------------------------------------------------------------------------
    # Export and history
    # -------------------------------------------------------------------------

    @app.post("/api/export/{fmt}")
    async def export_posted(fmt: str, request: ExportRequest):
        if fmt not in MEDIA_TYPES:
            return _error(ValueError("Invalid format"), status_code=400)
        try:
            content = export_jobs(request.jobs, fmt)
        except Exception as e:
            logger.error(f"Error exporting to {fmt}: {e}")
            return _error(e)
        _, suffix = MEDIA_TYPES[fmt]
        return _attachment(content, fmt, f"jobs_{date.today().isoformat()}{suffix}")

    @app.get("/api/history")
    async def history():
        try:
            if not state.downloads_dir.exists():
                return {"success": True, "files": []}
            files = []
            for path in state.downloads_dir.glob("*.txt"):
                stat = path.stat()
                files.append({
                    "filename": path.name,
                    "size": stat.st_size,
                    "created": datetime.fromtimestamp(stat.st_ctime).isoformat(),
                    "modified": datetime.fromtimestamp(stat.st_mtime).isoformat(),
                    "downloadUrl": f"/downloads/{path.name}",
                    "csvUrl": f"/api/export/{path.name}/csv",
                    "excelUrl": f"/api/export/{path.name}/excel",
                    "pdfUrl": f"/api/export/{path.name}/pdf",
                })
            files.sort(key=lambda f: f["modified"], reverse=True)
            return {"success": True, "files": files}
        except Exception as e:
            logger.error(f"Error reading history: {e}")
            return _error(e)

    @app.get("/api/export/{filename}/{fmt}")
    async def export_saved(filename: str, fmt: str):
        path = state.downloads_dir / filename
        if Path(filename).name != filename or not path.is_file():
            return _error(FileNotFoundError("File not found"), status_code=404)
        if fmt not in MEDIA_TYPES:
            return _error(ValueError("Invalid format"), status_code=400)
        try:
            jobs = parse_jobs_from_text(path.read_text(encoding="utf-8"))
            content = export_jobs(jobs, fmt)
        except Exception as e:
            logger.error(f"Error exporting file: {e}")
            return _error(e)
        _, suffix = MEDIA_TYPES[fmt]
        return _attachment(content, fmt, path.with_suffix(suffix).name)

    app.mount(
        "/downloads",
        StaticFiles(directory=str(state.downloads_dir), check_dir=False),
        name="downloads",
    )

    return app


def main(argv: Optional[List[str]] = None):
    """Run the server."""
    parser = argparse.ArgumentParser(description="Job Agent Server")
    parser.add_argument("--host", default=None, help="Server host")
    parser.add_argument("--port", type=int, default=None, help="Server port")
    parser.add_argument("--config", default=None, help="Settings YAML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    from .cli import setup_logging
    setup_logging(args.verbose)

    settings = Settings.load(args.config)
    serve(settings, host=args.host, port=args.port)


def serve(settings: Settings, host: Optional[str] = None, port: Optional[int] = None):
    """Build the app from ``settings`` and run it with uvicorn."""
    app = create_app(settings=settings)
    host = host or settings.host
    port = port or settings.port
    logger.info(f"Job Agent Server running on http://{host}:{port}")
    logger.info(f"Available tools: {', '.join(app.state.agent.toolbox.names)}")
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
