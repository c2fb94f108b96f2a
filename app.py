import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fastmcp import FastMCP

from core.config import CORS_ORIGINS, SERVICE_NAME, VERSION
from core.logs import setup_logging
from core.results import Failure, ToolRequest
from tools import default_registry, dispatch
from tools.checks import run_tool_checks

setup_logging()
logger = logging.getLogger("app")

# Built once, read-only for the life of the process.
REGISTRY = default_registry()

def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

def service_info() -> Dict[str, Any]:
    return {
        "ok": True,
        "message": "SOS Chatbot tools alive",
        "service": SERVICE_NAME,
        "version": VERSION,
        "ts": utc_iso(),
    }

# -----------------------------
# MCP over HTTP
# -----------------------------
mcp = FastMCP(name=SERVICE_NAME)

@mcp.tool()
async def health_check() -> Dict[str, Any]:
    return {**service_info(), "tools": len(REGISTRY)}

@mcp.tool()
async def list_tools() -> Dict[str, Any]:
    return {"tools": [spec.to_dict() for spec in REGISTRY.specs()]}

@mcp.tool()
async def run_tool(tool: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    result = await dispatch(tool, parameters or {}, registry=REGISTRY)
    return result.to_dict()

mcp_app = mcp.http_app(path="/mcp")

# -----------------------------
# FastAPI
# -----------------------------
app = FastAPI(title=SERVICE_NAME, version=VERSION, lifespan=mcp_app.lifespan)
app.state.registry = REGISTRY

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def root():
    return {**service_info(), "tools": "/tools", "mcp": "/mcp"}

@app.get("/health")
def health():
    return {"ok": True, "ts": utc_iso(), "service": SERVICE_NAME, "version": VERSION}

@app.get("/tools")
def get_tools(request: Request):
    registry = request.app.state.registry
    return {"tools": [spec.to_dict() for spec in registry.specs()]}

@app.get("/tools/refresh")
async def refresh_tools(request: Request):
    try:
        results = await run_tool_checks(request.app.state.registry)
    except Exception as e:
        logger.exception("Error refreshing tool checks")
        return JSONResponse(status_code=500, content={"success": False, "message": str(e) or "Unknown error refreshing tool checks"})

    passed = sum(1 for r in results.values() if r["ok"])
    return {
        "success": True,
        "message": "Tool checks refreshed successfully",
        "summary": {
            "total": len(results),
            "passed": passed,
            "failed": len(results) - passed,
            "timestamp": utc_iso(),
        },
        "results": results,
    }

@app.post("/tools")
async def post_tool(request: Request):
    try:
        body = await request.json()
    except Exception as e:
        logger.error(f"Error reading tool request body: {e}")
        return JSONResponse(status_code=500, content={"error": f"Invalid request body: {e}"})

    tool_request = ToolRequest.from_body(body if isinstance(body, dict) else {})
    if not tool_request.tool_name:
        return JSONResponse(status_code=400, content={"error": "Tool name is required"})

    logger.info(f"Executing tool: {tool_request.tool_name} {dict(tool_request.parameters)}")
    try:
        result = await dispatch(tool_request.tool_name, tool_request.parameters, registry=request.app.state.registry)
    except Exception as e:
        logger.exception("Error executing tool")
        return JSONResponse(status_code=500, content={"error": str(e) or "An error occurred"})

    if isinstance(result, Failure):
        return JSONResponse(status_code=400, content=result.to_dict())
    return result.to_dict()

# MCP-endepunkt (gir /mcp). Monteres sist så API-rutene over vinner.
app.mount("/", mcp_app)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=8000)
