from contextlib import asynccontextmanager
from typing import Optional
import datetime, logging, os

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import ServiceConfig
from observability.logging import configure_logging
from services.shared.errors import (
    DuplicateToolError,
    InvalidURL,
    SearchError,
    ToolNotFoundError,
    ToolScoutError,
)
from services.shared.models import ToolCreate
from services.toolscout import ToolScoutService

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

router = APIRouter()


class AnalyzeRequest(BaseModel):
    url: Optional[str] = None


class SearchRequest(BaseModel):
    query: Optional[str] = None
    limit: Optional[int] = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


async def get_service(request: Request) -> ToolScoutService:
    """Dependency to get the tool service."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise RuntimeError("Tool service not initialized")
    return service


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "toolscout API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


@router.get("/health")
async def health(service: ToolScoutService = Depends(get_service)):
    catalog = await service.catalog.health_check()
    return {
        "ok": catalog["status"] == "healthy",
        "time": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "catalog": catalog
    }


@router.get("/tools")
async def list_tools(service: ToolScoutService = Depends(get_service)):
    tools = await service.list_tools()
    return {"success": True, "tools": [t.model_dump() for t in tools]}


@router.post("/tools")
async def create_tool(payload: ToolCreate, service: ToolScoutService = Depends(get_service)):
    """Add a tool to the catalog."""
    if not payload.name or not payload.url or not payload.summary:
        return error_response(400, "Name, URL, and summary are required")

    tool = await service.create_tool(payload)
    return {"success": True, "tool": tool.model_dump()}


@router.put("/tools/{tool_id}")
async def update_tool(tool_id: int, payload: ToolCreate, service: ToolScoutService = Depends(get_service)):
    """Replace a tool's fields."""
    if not payload.name or not payload.url or not payload.summary:
        return error_response(400, "Name, URL, and summary are required")

    tool = await service.update_tool(tool_id, payload)
    return {"success": True, "tool": tool.model_dump()}


@router.delete("/tools/{tool_id}")
async def delete_tool(tool_id: int, service: ToolScoutService = Depends(get_service)):
    await service.delete_tool(tool_id)
    return {"success": True}


@router.post("/analyze")
async def analyze(req: AnalyzeRequest, service: ToolScoutService = Depends(get_service)):
    """Fetch a URL and propose a name, summary and categories for it."""
    if not req.url or not req.url.strip():
        return error_response(400, "URL is required")

    analysis = await service.analyze_url(req.url)
    return {"success": True, "analysis": analysis}


@router.post("/search")
async def search(req: SearchRequest, service: ToolScoutService = Depends(get_service)):
    """Semantic search over the whole catalog."""
    if not req.query or not req.query.strip():
        return error_response(400, "Search query is required")

    results = await service.search_tools(req.query, req.limit)
    return {"success": True, "results": [r.model_dump() for r in results]}


@router.post("/api/clear-cache")
async def clear_cache(service: ToolScoutService = Depends(get_service)):
    service.clear_caches()
    return {"success": True, "message": "All caches cleared successfully"}


@router.get("/api/cache-stats")
async def cache_stats(service: ToolScoutService = Depends(get_service)):
    return {"success": True, "caches": service.cache_stats()}


@router.get("/api/test")
async def api_test():
    return {"message": "Server is working!"}


@router.get("/api/db-test")
async def db_test(service: ToolScoutService = Depends(get_service)):
    """Check the catalog connection."""
    catalog = await service.catalog.health_check()
    if catalog["status"] != "healthy":
        return JSONResponse({"success": False, "error": catalog.get("error"), "details": catalog},
                            status_code=500)
    return {"success": True, "message": "Successfully connected to the tool catalog", "data": catalog}


async def invalid_url_handler(request: Request, exc: InvalidURL):
    logger.info(f"Rejected URL: {exc}")
    return error_response(
        400, "Invalid URL format. Please enter a valid URL (e.g., example.com or https://example.com)")


async def duplicate_tool_handler(request: Request, exc: DuplicateToolError):
    return error_response(400, str(exc))


async def not_found_handler(request: Request, exc: ToolNotFoundError):
    return error_response(404, str(exc))


async def search_error_handler(request: Request, exc: SearchError):
    logger.error(f"Search error: {exc}")
    return error_response(502, "Failed to search tools")


async def toolscout_error_handler(request: Request, exc: ToolScoutError):
    logger.error(f"Unhandled toolscout error on {request.url.path}: {exc}")
    return error_response(500, str(exc))


def create_app(service: Optional[ToolScoutService] = None,
               config: Optional[ServiceConfig] = None) -> FastAPI:
    """Create the API application.

    A ``service`` passed in is used as-is and never started or closed here;
    otherwise one is built from ``config`` (or the environment) at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.service is None:
            cfg = config or ServiceConfig.load()
            configure_logging(cfg)
            owned = ToolScoutService.from_config(cfg)
            await owned.start()
            app.state.service = owned
            logger.info("Tool service initialized")
        try:
            yield
        finally:
            if owned is not None:
                await owned.close()
                app.state.service = None
                logger.info("Tool service closed")

    app = FastAPI(title="toolscout API", version=API_VERSION, lifespan=lifespan)
    app.state.service = service
    app.include_router(router)

    app.add_exception_handler(InvalidURL, invalid_url_handler)
    app.add_exception_handler(DuplicateToolError, duplicate_tool_handler)
    app.add_exception_handler(ToolNotFoundError, not_found_handler)
    app.add_exception_handler(SearchError, search_error_handler)
    app.add_exception_handler(ToolScoutError, toolscout_error_handler)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.tools_api:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3000")))
