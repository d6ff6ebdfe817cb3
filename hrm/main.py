from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from apscheduler.schedulers.background import BackgroundScheduler
import logging
import time

import pytz

logging.basicConfig(level=logging.INFO)
from hrm.core.config import settings
from hrm.database import get_db
from hrm.models.models import Users
from hrm.routers import (
    attendance, auth, dashboard, employees, history, holidays, master, mysql, notifications, org_structure,
    payroll, requests, role_permission, shifts, users,
)
from hrm.services.audit import cleanup_old_events, record_request, should_audit
from hrm.services.att_log_job import run_att_log_sync

logger = logging.getLogger("hrm")

# ─── Scheduler ────────────────────────────────────────────────────────────
_scheduler = BackgroundScheduler(timezone=pytz.timezone(settings.TIMEZONE))


@asynccontextmanager
async def lifespan(app):
    """Start APScheduler on startup, stop on shutdown."""
    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=0)")
        yield
        return

    # Sync fingerprint taps: 01:00, 10:00, 18:00 WIB
    _scheduler.add_job(
        run_att_log_sync,
        trigger='cron',
        hour='1,10,18',
        minute=0,
        id='att_log_sync',
        replace_existing=True,
        max_instances=1
    )

    # Purge audit trail: setiap hari 00:00
    _scheduler.add_job(
        cleanup_old_events,
        trigger='cron',
        hour=0,
        minute=0,
        id='audit_cleanup',
        replace_existing=True,
        max_instances=1
    )

    _scheduler.start()
    logging.getLogger("att_log_job").info("✅ AttLog sync scheduled (01:00, 10:00, 18:00)")
    logging.getLogger("audit").info(f"✅ Audit cleanup scheduled (00:00, keep {settings.AUDIT_RETENTION_DAYS} days)")
    yield
    _scheduler.shutdown(wait=False)
    logger.info("🛑 Scheduler stopped")


# Initialize FastAPI App
app_fastapi = FastAPI(
    title=settings.APP_NAME,
    description="HR management API: employees, attendance, shifts, payroll, leave requests and legacy MySQL migration",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app_fastapi.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app_fastapi.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.monotonic()
    response = await call_next(request)
    elapsed = (time.monotonic() - started) * 1000
    logging.getLogger("http").info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.0f} ms)")
    return response


async def audit_requests(request: Request, call_next):
    """Write successful mutations to sys_event_history after the response is built."""
    response = await call_next(request)
    if should_audit(request.method, request.url.path, response.status_code):
        await run_in_threadpool(
            record_request,
            request.method,
            request.url.path,
            request.url.query,
            request.headers.get("authorization"),
            request.client.host if request.client else None,
            request.headers.get("user-agent"),
        )
    return response


if settings.AUDIT_ENABLED:
    app_fastapi.middleware("http")(audit_requests)


# Include Routers
app_fastapi.include_router(auth.router)
app_fastapi.include_router(users.router)
app_fastapi.include_router(role_permission.router)
app_fastapi.include_router(role_permission.menu_router)
app_fastapi.include_router(notifications.router)
app_fastapi.include_router(employees.router)
app_fastapi.include_router(attendance.router)
app_fastapi.include_router(dashboard.router)
app_fastapi.include_router(payroll.router)
app_fastapi.include_router(requests.router)
app_fastapi.include_router(shifts.router)
app_fastapi.include_router(holidays.router)
app_fastapi.include_router(org_structure.router)
app_fastapi.include_router(master.router)
app_fastapi.include_router(history.router)
app_fastapi.include_router(mysql.router)   # Legacy MySQL migration


@app_fastapi.get("/health")
def health():
    return {"status": "ok", "timestamp": time.time()}


@app_fastapi.get("/api/check-db")
def check_db(db: Session = Depends(get_db)):
    try:
        user_count = db.query(Users).count()
        return {"status": "connected", "user_count": user_count}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("hrm.main:app_fastapi", host="0.0.0.0", port=8000, reload=True)
