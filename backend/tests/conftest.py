"""
Combs of Honey — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── db_engine: Async engine on a temporary SQLite file, tables created
    ├── session_factory: Session factory bound to db_engine
    ├── db_session: One session on db_engine
    ├── stored_visits: Reads honey.visits straight from the store
    ├── asgi_app: The app wired to the temporary database
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    ├── span_exporter: In-memory OpenTelemetry exporter
    └── clean_tracer_provider: Resets global tracing state
"""

import os
import tempfile

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="combs_test_"), "app.db")
)
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = ""
os.environ.pop("ATOMIC_VISITS", None)
os.environ.pop("EMBED_HONEY", None)
os.environ.pop("ATOMIC_LIST_VISITS", None)

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from combs_of_honey.database import build_engine, get_db_session, init_models
from combs_of_honey.models import Honey


# ══════════════════════════════════════════════════════════════════════════
# Mocked persistence
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_comb(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
            with pytest.raises(NotFoundError):
                await comb_service.get_comb(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_timestamps():
    """created_at / updated_at values for building ORM rows by hand."""
    now = datetime.now(timezone.utc)
    return {"created_at": now, "updated_at": now}


# ══════════════════════════════════════════════════════════════════════════
# Real persistence (temporary SQLite database)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Async engine on a fresh SQLite file with the combs / honey tables."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'combs.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def stored_visits(session_factory):
    """
    Returns an async function reading honey.visits for (comb_id, type)
    through its own session, bypassing the handlers.
    """

    async def _read(comb_id: int, honey_type: str):
        async with session_factory() as session:
            result = await session.execute(
                select(Honey.visits).where(
                    Honey.comb_id == comb_id, Honey.type == honey_type
                )
            )
            return result.scalar_one_or_none()

    return _read


@pytest.fixture
def asgi_app(session_factory):
    """
    The application with get_db_session bound to the temporary database.

    The override mirrors get_db_session: services commit, the dependency
    only rolls back on error.
    """
    from combs_of_honey.main import app

    async def _override_session():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(asgi_app):
    """
    Provides an async HTTP test client for endpoint testing.

    How:   Uses ASGITransport to route requests directly to the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=asgi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Tracing
# ══════════════════════════════════════════════════════════════════════════

def _reset_otel_global_state():
    """Fully reset the OpenTelemetry global tracer provider state."""
    trace._TRACER_PROVIDER_SET_ONCE = trace.Once()
    trace._TRACER_PROVIDER = None


@pytest.fixture
def span_exporter():
    """Install an in-memory TracerProvider for one test, then tear down."""
    _reset_otel_global_state()
    exporter = InMemorySpanExporter()
    provider = TracerProvider(resource=Resource.create({"service.name": "combs-test"}))
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    yield exporter
    provider.shutdown()
    _reset_otel_global_state()


@pytest.fixture
def clean_tracer_provider():
    """Reset the global tracer provider around a test that installs its own."""
    _reset_otel_global_state()
    yield
    _reset_otel_global_state()
