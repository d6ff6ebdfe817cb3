"""
Audit trail (sys_event_history).

Successful mutating API requests are recorded by the audit middleware in
hrm.main; events older than AUDIT_RETENTION_DAYS are purged nightly.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from jose import JWTError
from sqlalchemy.orm import Session

from hrm.core.config import settings
from hrm.core.security import decode_access_token
from hrm.database import SessionLocal
from hrm.models.models import SysEventHistory

logger = logging.getLogger("audit")

AUDITED_METHODS = ("POST", "PUT", "PATCH", "DELETE")
SKIPPED_PATHS = ("/api/auth/login", "/api/auth/refresh")


def module_from_path(path: str) -> str:
    """'/api/employees/E001' -> 'EMPLOYEES'."""
    parts = [p for p in path.split('/') if p]
    if len(parts) >= 2 and parts[0] == 'api':
        return parts[1].upper()
    return 'UNKNOWN'


def user_from_authorization(authorization: Optional[str]) -> str:
    if not authorization or not authorization.lower().startswith('bearer '):
        return 'system'
    try:
        payload = decode_access_token(authorization.split(' ', 1)[1])
    except JWTError:
        return 'system'
    return payload.get('email') or payload.get('sub') or 'system'


def should_audit(method: str, path: str, status_code: int) -> bool:
    if method not in AUDITED_METHODS or not path.startswith('/api'):
        return False
    if any(path.startswith(p) for p in SKIPPED_PATHS):
        return False
    return 200 <= status_code < 300


def record_event(db: Session, log_user: str, modul: str, action: str, data: Any = None,
                 ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> SysEventHistory:
    event = SysEventHistory(
        log_user=log_user,
        log_date=datetime.now(),
        modul=modul,
        action=action,
        data=data if isinstance(data, str) or data is None else json.dumps(data, default=str),
        ip_address=ip_address,
        user_agent=(user_agent or '')[:255] or None,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def record_request(method: str, path: str, query: str, authorization: Optional[str],
                   ip_address: Optional[str], user_agent: Optional[str]):
    """Used by the middleware; runs on its own session."""
    db = SessionLocal()
    try:
        record_event(
            db,
            log_user=user_from_authorization(authorization),
            modul=module_from_path(path),
            action=method,
            data={"path": path, "query": query},
            ip_address=ip_address,
            user_agent=user_agent,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"[Audit] Gagal mencatat {method} {path}: {e}")
    finally:
        db.close()


def cleanup_old_events(retention_days: Optional[int] = None) -> int:
    """Dijalankan setiap hari 00:00 oleh APScheduler."""
    days = retention_days if retention_days is not None else settings.AUDIT_RETENTION_DAYS
    cutoff = datetime.now() - timedelta(days=days)
    db = SessionLocal()
    try:
        deleted = db.query(SysEventHistory).filter(
            SysEventHistory.log_date < cutoff
        ).delete(synchronize_session=False)
        db.commit()
        logger.info(f"[AuditCleanup] Deleted {deleted} events older than {days} days")
        return deleted
    except Exception as e:
        db.rollback()
        logger.error(f"[AuditCleanup] Error: {e}")
        raise
    finally:
        db.close()
