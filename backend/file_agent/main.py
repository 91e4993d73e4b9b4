import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from file_agent.api.routes import chat, files, settings
from file_agent.api import websocket
from file_agent.api.deps import reset_agent
from file_agent.core.config import settings as app_settings

logging.basicConfig(
    level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="File Agent API",
    version="0.1.0",
    description="Conversational agent for searching, reading and downloading files"
)

# TODO: add authentication before exposing the file routes beyond localhost

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat.router, prefix="/api")
app.include_router(files.router, prefix="/api")
app.include_router(settings.router, prefix="/api")
app.include_router(websocket.router)


@app.get("/")
async def root():
    return {
        "name": "File Agent API",
        "version": "0.1.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup():
    logger.info(
        "File agent started: search base %s, downloads to %s",
        app_settings.search_base_path,
        app_settings.download_directory,
    )


@app.on_event("shutdown")
async def shutdown():
    """Close the language model client."""
    await reset_agent()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("file_agent.main:app", host="0.0.0.0", port=app_settings.backend_port)
