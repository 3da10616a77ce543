from dotenv import load_dotenv

# Load environment variables before the config module reads them
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from extract_colors.api.observability import router as observability_router  # noqa: E402
from extract_colors.api.v1 import router as v1_router  # noqa: E402
from extract_colors.config import config  # noqa: E402
from extract_colors.schemas import HealthResponse  # noqa: E402
from extract_colors.services.colors import __version__  # noqa: E402
from extract_colors.utils.logging import get_logger  # noqa: E402

logger = get_logger()

app = FastAPI(
    title="Extract Colors",
    description="Dominant color palette extraction from raster images",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)
if config.METRICS_ENABLED:
    app.include_router(observability_router, prefix="/api")


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(ok=True, version=__version__)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Extract Colors API",
        "version": __version__,
        "docs": "/docs"
    }


logger.info("Extract Colors API initialised", extra={"version": __version__})
