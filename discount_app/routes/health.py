import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from discount_app.database import get_session
from discount_app.services.rule_store import fetch_active_records, to_engine_rule

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    """Rule store reachability plus how many rules the engine would see."""
    rule_store = "ok"
    active_rules = None
    usable_rules = None

    try:
        records = fetch_active_records(session)
        active_rules = len(records)
        usable_rules = sum(1 for record in records if to_engine_rule(record) is not None)
    except SQLAlchemyError as e:
        logger.error(f"Rule store health check failed: {e}")
        rule_store = "failed"

    return {
        "status": "ok" if rule_store == "ok" else "degraded",
        "database": rule_store,
        "activeRules": active_rules,
        "usableRules": usable_rules,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
