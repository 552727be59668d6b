"""
Whiteboard Layout Server
========================

FastAPI server around the whiteboard layout engine.

Features:
- Semantic event batches turned into pixel-accurate shape commands
- Content-type classification with a 12-column grid layout
- Camera moves that keep new content in view
- Grid state persisted per session as JSON
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import load_config, POSITIONING_MODES

# Configure logging
config = load_config()
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from .canvas.state_manager import StateManager
from .models.content_type_models import get_all_content_types
from .models.grid_models import GridMetadata
from .api import whiteboard_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("[WHITEBOARD] Starting up...")

    engine_config = load_config()
    state_manager = StateManager(sessions_dir=engine_config.sessions_dir)

    # Inject into route modules
    whiteboard_routes.state_manager = state_manager
    whiteboard_routes.engine_config = engine_config

    logger.info(
        f"[WHITEBOARD] Services initialized (mode={engine_config.positioning_mode}, "
        f"reference_viewport={engine_config.use_reference_viewport})"
    )

    yield

    logger.info("[WHITEBOARD] Shutting down...")
    whiteboard_routes.state_manager = None
    whiteboard_routes.engine_config = None


app = FastAPI(
    title="Whiteboard Layout",
    description="Layout and event-transformation engine for AI-generated whiteboards",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(whiteboard_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "whiteboard-layout",
    }


@app.get("/api/info")
async def api_info():
    """Get API information, content types and grid geometry."""
    grid = GridMetadata()
    return {
        "service": "Whiteboard Layout",
        "version": "1.0.0",
        "positioning_modes": list(POSITIONING_MODES),
        "content_types": get_all_content_types(),
        "grid": {
            "columns": grid.total_columns,
            "row_height_px": grid.row_height,
            "column_width_px": grid.column_width,
        },
        "endpoints": {
            "session": "/api/whiteboard/session",
            "events": "/api/whiteboard/{session_id}/events",
            "grid": "/api/whiteboard/{session_id}/grid",
            "classify": "/api/whiteboard/classify",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "whiteboard.server:app",
        host="0.0.0.0",
        port=8080,
        reload=True
    )
