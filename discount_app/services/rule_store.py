import logging
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Session, select

from discount_app.models.discount import DiscountRuleRecord
from discount_app.pricing import DiscountKind, DiscountRule, match_candidates, normalize_product_id
from discount_app.pricing.engine import round_half_up

logger = logging.getLogger(__name__)

KNOWN_KINDS = {kind.value for kind in DiscountKind}


def to_engine_rule(record: DiscountRuleRecord) -> Optional[DiscountRule]:
    """Convert a stored record into an engine rule.

    Returns None for records that break the authoring rules (negative
    values, percentages above 100). Unknown types are passed through so
    the engine can resolve them to nothing.
    """
    if record.value is None or record.value < 0:
        logger.warning(f"Skipping discount {record.id}: negative value {record.value}")
        return None

    if record.type == DiscountKind.PERCENTAGE.value:
        if record.value > 100:
            logger.warning(f"Skipping discount {record.id}: percentage {record.value} above 100")
            return None
        kind = DiscountKind.PERCENTAGE
        magnitude = record.value
    elif record.type == DiscountKind.FIXED.value:
        kind = DiscountKind.FIXED
        magnitude = round_half_up(Decimal(str(record.value)))
    else:
        logger.warning(f"Discount {record.id} has unknown type '{record.type}'")
        kind = record.type
        magnitude = record.value

    return DiscountRule(
        id=record.id,
        name=record.name,
        kind=kind,
        magnitude=magnitude,
        product_ids=frozenset(normalize_product_id(p) for p in record.product_id_list),
    )


def fetch_active_records(session: Session) -> List[DiscountRuleRecord]:
    return session.exec(
        select(DiscountRuleRecord)
        .where(DiscountRuleRecord.active == True)  # noqa: E712
        .order_by(DiscountRuleRecord.created_at.desc())
    ).all()


def fetch_active_rules(session: Session) -> List[DiscountRule]:
    rules = []
    for record in fetch_active_records(session):
        rule = to_engine_rule(record)
        if rule is not None:
            rules.append(rule)

    logger.info(f"Loaded {len(rules)} active discount rules")
    return rules


def fetch_rules_for_product(session: Session, product_id: str) -> List[DiscountRule]:
    """Active rules that apply to one product, including store-wide rules."""
    return match_candidates(normalize_product_id(product_id), fetch_active_rules(session))


def get_rule_record(session: Session, rule_id: str) -> Optional[DiscountRuleRecord]:
    return session.get(DiscountRuleRecord, rule_id)


def record_to_dict(record: DiscountRuleRecord) -> dict:
    return {
        "id": record.id,
        "name": record.name,
        "type": record.type,
        "value": record.value,
        "productIds": record.product_id_list,
        "active": record.active,
        "supported": record.type in KNOWN_KINDS,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "updatedAt": record.updated_at.isoformat() if record.updated_at else None,
    }
