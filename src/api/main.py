import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes.meetings import router as meetings_router
from src.api.routes.transcribe import router as transcribe_router
from src.config import settings
from src.ingestion.errors import PipelineError
from src.logging_config import configure_logging

configure_logging(settings.log_level)

app = FastAPI(
    title="Meeting Minutes API",
    description="Meeting audio transcription, tone analysis, and minutes extraction",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(transcribe_router)
app.include_router(meetings_router)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    """Render pipeline errors as ``{error}`` (client errors) or ``{error, details}``."""
    content: dict[str, str] = {"error": exc.message}
    if exc.status_code >= 500 or exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
