from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import reports
from ..database import get_db
from ..schemas import SalesSummary

router = APIRouter(prefix="/api/report", tags=["report"])


@router.get("/today", response_model=SalesSummary)
def daily_report(db: Session = Depends(get_db)):
    return reports.daily_report(db)


# e.g. GET /api/report?start_date=2026-01-01&end_date=2026-02-01
@router.get("", response_model=SalesSummary)
def report(start_date: Optional[str] = None, end_date: Optional[str] = None, db: Session = Depends(get_db)):
    return reports.custom_report(db, start_date, end_date)
