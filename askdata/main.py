"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import Settings, settings
from .db import DatabaseConnection, DataSourceRepository, MessageLogRepository, MessageRepository
from .providers import (
    DuckDBQueryRunner,
    EmbeddingSemanticSearch,
    JinaWebSearch,
    OpenAIAgentRunProvider,
    OpenAICompletionClient,
    build_openai_client,
)
from .services import InstructionsBuilder, TitleGenerator, TranscriptRecorder
from .tools import ToolDependencies, build_default_registry
from .utils.logger import init_app_logger
from .api.v1 import conversations


# Initialize logger
logger = init_app_logger(settings)

# Global database connection
db_conn: DatabaseConnection = None


def _mask(secret: str) -> str:
    if not secret:
        return "Not set"
    return secret[:8] + "..." + secret[-4:] if len(secret) > 12 else "***"


def init_services(app_settings: Settings, db: DatabaseConnection):
    """
    Build the shared collaborators and inject them into the routers.

    Args:
        app_settings: Application settings
        db: Open database connection
    """
    client = build_openai_client(app_settings)
    completion = OpenAICompletionClient(client, app_settings.nl_query_model)
    semantic_search = EmbeddingSemanticSearch(
        client,
        model=app_settings.embedding_model,
        threshold=app_settings.semantic_search_threshold,
    )

    registry = build_default_registry(ToolDependencies(
        db=db,
        settings=app_settings,
        completion=completion,
        semantic_search=semantic_search,
        query_runner=DuckDBQueryRunner(app_settings.datasources_dir),
        web=JinaWebSearch(
            reader_url=app_settings.web_reader_url,
            search_url=app_settings.web_search_url,
            timeout=app_settings.web_timeout,
        ),
    ))

    conversations.db_conn = db
    conversations.settings = app_settings
    conversations.provider_factory = lambda workspace: OpenAIAgentRunProvider(client, workspace.assistant_id)
    conversations.tool_registry = registry
    conversations.recorder = TranscriptRecorder(
        MessageRepository(db.conn),
        registry.recorded_tool_names(),
        poll_interval=app_settings.recorder_poll_interval,
    )
    conversations.instructions_builder = InstructionsBuilder(
        semantic_search,
        DataSourceRepository(db.conn),
        MessageLogRepository(db.conn),
    )
    conversations.title_generator = TitleGenerator(
        OpenAICompletionClient(client, app_settings.title_model),
        max_attempts=3,
        retry_delay=app_settings.nl_query_retry_delay,
    )
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("=" * 70)
    logger.info("Starting AskData Conversation Service...")
    logger.info("=" * 70)

    # Print server configuration
    logger.info("")
    logger.info("📡 Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")

    # Print storage configuration
    logger.info("")
    logger.info("💾 Storage Configuration:")
    logger.info(f"  Database: {settings.database_path}")
    logger.info(f"  Data Sources: {settings.datasources_dir}")

    # Print model configuration
    logger.info("")
    logger.info("🤖 Model Configuration:")
    logger.info(f"  Query Model: {settings.nl_query_model}")
    logger.info(f"  Title Model: {settings.title_model}")
    logger.info(f"  Embedding Model: {settings.embedding_model}")
    logger.info(f"  API Base: {settings.openai_base_url or 'default'}")
    logger.info(f"  API Key (from .env): {_mask(settings.openai_api_key)}")
    logger.info(f"  Query Attempts: {settings.nl_query_max_attempts}")

    # Initialize database and services
    logger.info("")
    logger.info("🚀 Initializing Services...")
    global db_conn
    db_conn = DatabaseConnection(settings.database_path)
    registry = init_services(settings, db_conn)
    logger.info(f"  Tools: {', '.join(registry.list())}")

    logger.info("")
    logger.info("=" * 70)
    logger.info("✅ AskData Conversation Service started successfully!")
    logger.info(f"📍 Access at: http://{settings.host}:{settings.port}")
    logger.info(f"📚 API Docs: http://{settings.host}:{settings.port}/docs")
    logger.info("=" * 70)

    yield

    # Shutdown
    logger.info("")
    logger.info("=" * 70)
    logger.info("Shutting down AskData Conversation Service...")
    logger.info("=" * 70)

    if conversations.recorder:
        await conversations.recorder.wait_idle()

    if db_conn:
        db_conn.close()

    logger.info("✅ AskData Conversation Service shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="AskData Conversation Service",
    description="Streams agent runs that query data sources, render reports and search the web",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(conversations.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "AskData Conversation Service",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "askdata.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
