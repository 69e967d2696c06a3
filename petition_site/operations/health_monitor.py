# petition_site/operations/health_monitor.py

# Liveness/readiness checks (database, disk)

import os
import shutil
from typing import Dict

from sqlalchemy import text

MIN_FREE_DISK_GB = float(os.getenv("MIN_FREE_DISK_GB", "1"))


def check_db(session) -> Dict:
    try:
        session.execute(text("SELECT 1"))
        return {"ok": True, "detail": "database reachable"}
    except Exception as e:
        session.rollback()
        return {"ok": False, "error": type(e).__name__}


def check_disk(path=".") -> Dict:
    total, used, free = shutil.disk_usage(path)
    free_gb = free / (1024**3)
    return {"ok": free_gb >= MIN_FREE_DISK_GB, "free_gb": round(free_gb, 2), "min_required_gb": MIN_FREE_DISK_GB}


def check_health(session, path=".") -> Dict:
    """Aggregate overall system health."""
    db = check_db(session)
    disk = check_disk(path)
    return {"db": db, "disk": disk, "overall_ok": db["ok"] and disk["ok"]}
