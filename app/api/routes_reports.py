# app/api/routes_reports.py
import logging
from datetime import date as _date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import LEAGUE_KEY_PATTERN, get_current_user
from app.services.power_index import build_week_power_index
from app.services.reports import XLSX_MEDIA_TYPE, build_weekly_report, report_filename
from app.services.yahoo.leagues import league_display_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/{league_key}/weekly")
def weekly_report(
    league_key: str = Path(..., pattern=LEAGUE_KEY_PATTERN),
    week: int = Query(..., ge=1, le=30),
    year: Optional[int] = Query(default=None, ge=2000),
    db: Session = Depends(get_db),
    guid: str = Depends(get_current_user),
):
    season = year or _date.today().year
    ranking = build_week_power_index(db, guid, league_key, week, season)
    if not ranking.results:
        raise HTTPException(status_code=404, detail=f"No power index available for {league_key} week {week}, {season}")

    name = league_display_name(db, league_key)
    content = build_weekly_report(name, week, season, ranking.results, ranking.table)
    filename = report_filename(name, week, season)
    logger.info("Built weekly report %s (%d bytes)", filename, len(content))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
