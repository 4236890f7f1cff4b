import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from . import config, models  # noqa: F401
from .database import Base, engine
from .domain.actions.router import router as actions_router
from .domain.bookings.router import router as bookings_router
from .domain.creators.router import router as creators_router
from .domain.slots.router import router as slots_router
from .services.solana_rpc import SolanaRpcClient, cluster_rpc_url

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    # Shared clients live as long as the process; routes reach them through app.state
    app.state.http_client = httpx.AsyncClient(
        timeout=config.IMAGE_FETCH_TIMEOUT,
        headers={"User-Agent": config.HTTP_USER_AGENT},
        follow_redirects=True,
    )
    rpc_url = config.SOLANA_RPC or cluster_rpc_url(config.SOLANA_NETWORK)
    app.state.ledger_client = SolanaRpcClient(
        rpc_url=rpc_url,
        http_client=httpx.AsyncClient(),
        timeout=config.SOLANA_RPC_TIMEOUT,
    )
    logger.info(f"Solana RPC: {rpc_url} (network={config.SOLANA_NETWORK})")

    yield

    logger.info("Application shutting down...")
    await app.state.ledger_client.http_client.aclose()
    await app.state.http_client.aclose()


app = FastAPI(title="Interval API", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# Routes
app.include_router(actions_router)
app.include_router(bookings_router)
app.include_router(slots_router)
app.include_router(creators_router)


@app.get("/")
def root():
    return {"message": "Interval API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
