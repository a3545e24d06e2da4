"""
Database connection pool management.

One SQLAlchemy async engine (and its connection pool) is current at any time.
Fatal connection errors reported by the driver replace it with a fresh engine
built from the same configuration.
"""
import asyncio
import socket
from typing import Optional, Set, Tuple

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vipride.core.config import settings
from vipride.core.errors import FATAL_POOL_KINDS, classify_db_error
from vipride.core.logger import logger
from vipride.models.db_models import Base


class DatabasePool:
    def __init__(self):
        self._handle: Optional[Tuple[AsyncEngine, async_sessionmaker]] = None
        self._database_url: Optional[str] = None
        self._lock = asyncio.Lock()
        self._health_task: Optional[asyncio.Task] = None
        self._rebuild_tasks: Set[asyncio.Task] = set()
        self._engines_rebuilding: Set[AsyncEngine] = set()
        self.rebuild_count = 0

    @property
    def engine(self) -> AsyncEngine:
        if self._handle is None:
            raise RuntimeError("Database pool is not initialized")
        return self._handle[0]

    def session(self) -> AsyncSession:
        """New session bound to whichever engine is current right now."""
        if self._handle is None:
            raise RuntimeError("Database pool is not initialized")
        return self._handle[1]()

    @property
    def is_initialized(self) -> bool:
        return self._handle is not None

    def _engine_options(self, url) -> dict:
        if url.get_backend_name() == "sqlite":
            # Local development / tests
            options = {"connect_args": {"check_same_thread": False}}
            if url.database in (None, "", ":memory:"):
                options["poolclass"] = StaticPool
            return options

        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": 0,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
            "connect_args": {"connect_timeout": settings.DB_CONNECT_TIMEOUT},
        }

    def _create_handle(self) -> Tuple[AsyncEngine, async_sessionmaker]:
        url = make_url(self._database_url)
        engine = create_async_engine(url, echo=False, **self._engine_options(url))

        if url.get_backend_name() == "mysql":
            event.listen(engine.sync_engine, "connect", self._enable_keepalive)

        @event.listens_for(engine.sync_engine, "handle_error")
        def _on_error(context):
            self.handle_pool_error(context.original_exception, engine)

        sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        return engine, sessionmaker

    @staticmethod
    def _enable_keepalive(dbapi_connection, connection_record):
        """Turns on TCP keep-alive for every new MySQL socket."""
        driver_connection = getattr(dbapi_connection, "driver_connection", None)
        writer = getattr(driver_connection, "_writer", None)
        sock = writer.get_extra_info("socket") if writer is not None else None
        if sock is None:
            logger.debug("Keep-alive not applied: socket not reachable")
            return

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        if hasattr(socket, "TCP_KEEPIDLE"):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, settings.DB_KEEPALIVE_INITIAL_DELAY)

    async def initialize(self, database_url: Optional[str] = None):
        """
        Builds the pool. Errors propagate so a broken configuration stops startup.
        """
        self._database_url = database_url or settings.database_url
        async with self._lock:
            self._handle = self._create_handle()
        logger.info(f"✅ Database pool ready ({make_url(self._database_url).render_as_string()})")

    async def init_db(self):
        """Creates the reservations table if it does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables initialized (created if not existed)")

    def handle_pool_error(self, exc: BaseException, engine: Optional[AsyncEngine] = None) -> bool:
        """
        Error hook for every statement run through the pool.
        Returns True when a rebuild was scheduled.
        """
        kind = classify_db_error(exc)
        if kind not in FATAL_POOL_KINDS:
            logger.error(f"⚠️ Database error (pool kept): {exc}")
            return False

        failed_engine = engine if engine is not None else (self._handle[0] if self._handle else None)
        if self._handle is not None and failed_engine is not self._handle[0]:
            logger.info(f"ℹ️ {kind} on a retired pool, already replaced")
            return False

        if failed_engine is not None and failed_engine in self._engines_rebuilding:
            logger.info(f"ℹ️ {kind} while a rebuild of this pool is already scheduled")
            return False

        logger.error(f"🔌 Database connection failure ({kind}): {exc}. Rebuilding pool...")
        if failed_engine is not None:
            self._engines_rebuilding.add(failed_engine)
        task = asyncio.get_running_loop().create_task(self._rebuild_after_error(kind, failed_engine))
        self._rebuild_tasks.add(task)
        task.add_done_callback(self._rebuild_tasks.discard)
        return True

    async def _rebuild_after_error(self, reason: str, failed_engine: Optional[AsyncEngine]):
        try:
            await self.rebuild(reason, failed_engine=failed_engine)
        except Exception as e:
            logger.error(f"❌ Pool rebuild failed ({reason}): {e}", exc_info=True)
        finally:
            self._engines_rebuilding.discard(failed_engine)

    async def rebuild(self, reason: str = "manual", failed_engine: Optional[AsyncEngine] = None) -> bool:
        """
        Swaps in a brand-new engine and disposes of the old one.
        With `failed_engine` set, nothing happens if that engine was already replaced.
        """
        async with self._lock:
            old_handle = self._handle
            if failed_engine is not None and old_handle is not None and old_handle[0] is not failed_engine:
                logger.info(f"ℹ️ Pool already rebuilt, skipping rebuild for {reason}")
                return False
            self._handle = self._create_handle()
            self.rebuild_count += 1

        logger.warning(f"♻️ Database pool rebuilt (reason: {reason}, rebuild #{self.rebuild_count})")

        if old_handle is not None:
            try:
                await old_handle[0].dispose()
            except Exception as e:
                logger.warning(f"⚠️ Ignoring error while disposing old pool: {e}")
        return True

    async def health_check(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.debug("💓 Database health check OK")
            return True
        except Exception as e:
            logger.error(f"❌ Database health check failed: {e}")
            return False

    async def _health_check_loop(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            await self.health_check()

    def start_health_checks(self, interval: Optional[float] = None):
        if self._health_task is None or self._health_task.done():
            interval = interval or settings.DB_HEALTH_CHECK_INTERVAL
            self._health_task = asyncio.get_running_loop().create_task(self._health_check_loop(interval))
            logger.info(f"💓 Database health check every {interval}s")

    async def close(self):
        if self._health_task is not None:
            self._health_task.cancel()
            try:
                await self._health_task
            except asyncio.CancelledError:
                pass
            self._health_task = None

        if self._handle is not None:
            await self._handle[0].dispose()
            self._handle = None
            logger.info("Database connection closed")


db_pool = DatabasePool()
