from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vipride.api import payment, reservations, transfers
from vipride.core.config import settings
from vipride.core.logger import logger, setup_logging
from vipride.services.db_service import db_pool

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} backend")
    await db_pool.initialize()
    try:
        await db_pool.init_db()
    except Exception as e:
        # The payment flow still answers while the database is down
        logger.warning(f"⚠️ Failed to initialize database tables: {e}")
    db_pool.start_health_checks()
    yield
    # Shutdown
    await db_pool.close()
    logger.info("🛑 Shutting down backend")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    allow_credentials=False,
)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"🔥 UNHANDLED ERROR: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error"}
    )


app.include_router(payment.router, prefix=settings.API_PREFIX, tags=["Payment"])
app.include_router(transfers.router, prefix=settings.API_PREFIX, tags=["Transfers"])
app.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])


@app.get("/")
async def root():
    return {"status": "active", "time": datetime.now().isoformat()}


@app.get("/health")
async def health_check():
    database_ok = db_pool.is_initialized and await db_pool.health_check()
    return {
        "status": "ok",
        "database": "ok" if database_ok else "unavailable",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now().isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("vipride.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.ENVIRONMENT == "development")
