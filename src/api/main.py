import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.models import HealthResponse, ServiceInfo, error_body
from src.api.routes.insights import router as insights_router
from src.api.routes.notion import router as notion_router
from src.config import settings
from src.insight.recent import RecentInsights

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

SERVICE_NAME = "Wisdom Vault API"
VERSION = "1.0.0"

app = FastAPI(
    title=SERVICE_NAME,
    description="Podcast moments to key takeaways, saved to Notion",
    version=VERSION,
)

# The browser extension calls from a chrome-extension:// origin that varies per install.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.recent_insights = RecentInsights(settings.recent_insights_capacity)

app.include_router(insights_router)
app.include_router(notion_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same 400 envelope as a missing title."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        loc = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Invalid request body: {loc} {errors[0].get('msg', '')}".strip()
    return JSONResponse(status_code=400, content=error_body(message))


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@app.get("/", response_model=ServiceInfo)
async def root() -> ServiceInfo:
    return ServiceInfo(
        name=SERVICE_NAME,
        version=VERSION,
        endpoints=[
            "POST /process-insight",
            "POST /save-to-notion",
            "GET /recent-insights",
            "GET /health",
        ],
    )


def run() -> None:
    import uvicorn

    uvicorn.run("src.api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
