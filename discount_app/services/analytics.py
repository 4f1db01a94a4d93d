"""Product view analytics.

Storefront views are counted per product with a debounce window, so a
reload loop does not inflate the count. Rollups group products by the
week (Monday start, UTC) of their last counted view.
"""
import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from sqlmodel import Session, select

from discount_app.models.analytics import ProductAnalytics
from discount_app.models.discount import utcnow
from discount_app.pricing import normalize_product_id

logger = logging.getLogger(__name__)

DEBOUNCE_WINDOW = timedelta(seconds=30)
EXPORT_HEADERS = ["Product ID", "View Count", "Last Viewed At"]


def as_utc(value: datetime) -> datetime:
    # sqlite hands timestamps back without tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_start(value: datetime) -> datetime:
    day = as_utc(value).replace(hour=0, minute=0, second=0, microsecond=0)
    return day - timedelta(days=day.weekday())


def track_view(session: Session, product_id, now: Optional[datetime] = None) -> dict:
    """Count one view unless the product was counted within the debounce window."""
    product_id = normalize_product_id(product_id)
    if not product_id:
        raise ValueError("productId is required")

    now = as_utc(now or utcnow())
    record = session.exec(
        select(ProductAnalytics).where(ProductAnalytics.product_id == product_id)
    ).first()

    if record is None:
        record = ProductAnalytics(product_id=product_id, view_count=1, last_viewed_at=now)
        session.add(record)
        session.commit()
        logger.info(f"First view tracked for product {product_id}")
        return {"success": True, "counted": True}

    if now - as_utc(record.last_viewed_at) < DEBOUNCE_WINDOW:
        return {"success": True, "counted": False, "reason": "debounced"}

    record.view_count += 1
    record.last_viewed_at = now
    session.add(record)
    session.commit()
    return {"success": True, "counted": True}


def weekly_analytics(session: Session, weeks: int = 4, now: Optional[datetime] = None) -> List[dict]:
    now = as_utc(now or utcnow())
    since = now - timedelta(weeks=weeks)

    records = session.exec(
        select(ProductAnalytics)
        .where(ProductAnalytics.last_viewed_at >= since)
        .order_by(ProductAnalytics.last_viewed_at.desc())
    ).all()

    buckets = {}
    for record in records:
        start = week_start(record.last_viewed_at)
        bucket = buckets.setdefault(start, {
            "weekStart": start.date().isoformat(),
            "weekEnd": (start + timedelta(days=7)).date().isoformat(),
            "products": [],
            "totalViews": 0,
            "uniqueProducts": 0,
        })
        bucket["products"].append({
            "productId": record.product_id,
            "views": record.view_count,
            "lastViewed": as_utc(record.last_viewed_at).isoformat(),
        })
        bucket["totalViews"] += record.view_count
        bucket["uniqueProducts"] += 1

    for bucket in buckets.values():
        bucket["products"].sort(key=lambda p: (-p["views"], p["productId"]))

    return [buckets[start] for start in sorted(buckets, reverse=True)]


def all_analytics(session: Session) -> List[ProductAnalytics]:
    return session.exec(
        select(ProductAnalytics).order_by(
            ProductAnalytics.view_count.desc(), ProductAnalytics.product_id
        )
    ).all()


def export_rows(records: List[ProductAnalytics]) -> List[list]:
    return [
        [r.product_id, r.view_count, as_utc(r.last_viewed_at).isoformat()]
        for r in records
    ]


def export_csv(records: List[ProductAnalytics]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(export_rows(records))
    return buffer.getvalue()


def export_workbook(records: List[ProductAnalytics]) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Product Views"
    ws.append(EXPORT_HEADERS)

    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill("solid", fgColor="4F81BD")
        cell.alignment = Alignment(horizontal="center")

    for row in export_rows(records):
        ws.append(row)

    ws.column_dimensions["A"].width = 20
    ws.column_dimensions["C"].width = 34

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
