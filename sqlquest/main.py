"""
FastAPI application for SQL exercise solution checking
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .database import create_tables
from .exercise_routes import exercise_router

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SQLQuest API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Include routers
app.include_router(exercise_router)


@app.on_event("startup")
async def startup_event():
    Config.print_config_summary()
    try:
        create_tables()
    except Exception as e:
        logger.error(f"Startup initialization failed, continuing anyway: {e}")


# Health check endpoint
@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "SQLQuest API", "version": "1.0.0"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=Config.HOST, port=Config.PORT)
