"""FastAPI application exposing metadata lookups for the media catalog."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from common.logger import get_logger, setup_logging
from lookup.cancellation import CancellationToken
from lookup.dispatcher import LookupDispatcher
from lookup.factory import build_lookup_service
from lookup.types import (
    ConfigurationError,
    LookupCancelledError,
    LookupRejectedError,
    ProviderError,
    QuotaExhaustedError,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    service = build_lookup_service()
    app.state.lookup_service = service
    try:
        yield
    finally:
        service.close()


app = FastAPI(
    title="Mediaset Lookup API",
    description="Look up book, movie, game and music metadata by identifier",
    version="0.1.0",
    lifespan=lifespan,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],  # Next.js dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_dispatcher(request: Request) -> LookupDispatcher:
    """Dispatcher built at startup; tests override this dependency."""
    return request.app.state.lookup_service.dispatcher


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Mediaset Lookup API",
        "version": "0.1.0",
        "lookup_endpoint": "/lookup/{entity_type}/{identifier_type}/{identifier_value}",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/lookup/capabilities")
def capabilities(dispatcher: LookupDispatcher = Depends(get_dispatcher)):
    """Identifier types accepted per configured entity type."""
    return dispatcher.capabilities()


DISCONNECT_POLL_SECONDS = 0.5


async def cancel_on_disconnect(request: Request, cancellation: CancellationToken) -> None:
    """Cancel `cancellation` once the client goes away."""
    while not cancellation.cancelled:
        if await request.is_disconnected():
            logger.info(f"Client disconnected, cancelling lookup {request.url.path}")
            cancellation.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@app.get("/lookup/{entity_type}/{identifier_type}/{identifier_value}")
async def lookup(
    entity_type: str,
    identifier_type: str,
    identifier_value: str,
    request: Request,
    dispatcher: LookupDispatcher = Depends(get_dispatcher),
):
    """Look up metadata for one identifier.

    Provider calls block while throttled, so the lookup runs in the
    threadpool. A client disconnect cancels it, which frees the provider
    lock for the callers queued behind it.
    """
    cancellation = CancellationToken()
    watcher = asyncio.create_task(cancel_on_disconnect(request, cancellation))
    try:
        result = await run_in_threadpool(
            dispatcher.lookup, entity_type, identifier_type, identifier_value, cancellation
        )
    except LookupRejectedError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": e.message, "valid_identifier_types": e.valid_identifier_types},
        ) from e
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    except QuotaExhaustedError as e:
        raise HTTPException(status_code=429, detail=str(e)) from e
    except ProviderError as e:
        logger.error(f"Lookup failed for {entity_type}/{identifier_type}/{identifier_value}: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except LookupCancelledError as e:
        raise HTTPException(status_code=503, detail="Lookup cancelled") from e
    finally:
        watcher.cancel()

    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {entity_type} found for {identifier_type} {identifier_value}",
        )
    return result.to_dict()
