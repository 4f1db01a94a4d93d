from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from discount_app.adapters.checkout_function import build_rule_config
from discount_app.database import get_session
from discount_app.services.rule_store import (
    fetch_active_records,
    fetch_active_rules,
    get_rule_record,
    record_to_dict,
)

router = APIRouter()


@router.get("/")
def list_discounts(session: Session = Depends(get_session)):
    discounts = [record_to_dict(record) for record in fetch_active_records(session)]
    return {"success": True, "discounts": discounts, "count": len(discounts)}


# Blob for the checkout function; an external job pushes it to the platform.
@router.get("/function-configuration")
def function_configuration(session: Session = Depends(get_session)):
    rules = fetch_active_rules(session)
    return {
        "success": True,
        "configuration": build_rule_config(rules),
        "count": len(rules),
    }


@router.get("/{rule_id}")
def get_discount(rule_id: str, session: Session = Depends(get_session)):
    record = get_rule_record(session, rule_id)
    if not record:
        raise HTTPException(404, "Discount not found")
    return {"success": True, "discount": record_to_dict(record)}
