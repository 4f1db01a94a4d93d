import io
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from discount_app.database import get_session
from discount_app.models.discount import utcnow
from discount_app.schemas.analytics_schemas import TrackViewRequest
from discount_app.services.analytics import (
    all_analytics,
    export_csv,
    export_workbook,
    track_view,
    weekly_analytics,
)

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/track-view")
def track_product_view(data: TrackViewRequest, session: Session = Depends(get_session)):
    if data.productId is None or not str(data.productId).strip():
        return JSONResponse(status_code=400, content={"error": "productId is required"})

    try:
        return track_view(session, data.productId)
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"Error tracking view for {data.productId}")
        return JSONResponse(status_code=500, content={"error": "Failed to track view"})


@router.get("/weekly")
def weekly(
    weeks: int = Query(4, ge=1, le=52),
    session: Session = Depends(get_session),
):
    data = weekly_analytics(session, weeks=weeks)
    return {"success": True, "weeks": weeks, "data": data}


@router.get("/export")
def export(
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    session: Session = Depends(get_session),
):
    records = all_analytics(session)
    stamp = utcnow().date()

    if format == "xlsx":
        filename = f"product_analytics_{stamp}.xlsx"
        return StreamingResponse(
            export_workbook(records),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    filename = f"product_analytics_{stamp}.csv"
    return StreamingResponse(
        io.StringIO(export_csv(records)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
