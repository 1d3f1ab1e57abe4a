import logging
from typing import Optional

from sqlalchemy.orm import Session

from backoffice.models.log import Log

logger = logging.getLogger(__name__)


def write_log(db: Session, *, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
    logger.info("%s %s %s %s", action, resource, status, meta or {})


def client_ip(request) -> Optional[str]:
    return request.client.host if request.client else None


# Record a rejected mutation; the failed unit of work has already been rolled back
def write_failure(db: Session, *, action, resource, request, error):
    write_log(
        db, action=action, resource=resource, status="FAIL",
        ip=client_ip(request), meta={"error": getattr(error, "message", str(error))},
    )
