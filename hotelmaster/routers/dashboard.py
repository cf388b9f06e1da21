"""
仪表盘与营收报表路由
"""
from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from hotelmaster.database import get_db
from hotelmaster.models.ontology import User
from hotelmaster.services.report_service import ReportService, month_bounds
from hotelmaster.security.auth import get_current_user, require_permission
from hotelmaster.security.permissions import REPORTS_VIEW

router = APIRouter(prefix="/dashboard", tags=["仪表盘"])


@router.get("")
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """仪表盘统计（所有登录用户可见）"""
    return ReportService(db).get_dashboard_stats()


@router.get("/revenue")
def get_revenue(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(REPORTS_VIEW))
):
    """区间营收统计，默认本月"""
    if date_from is None or date_to is None:
        month_start, month_end = month_bounds(date.today())
        date_from = date_from or month_start
        date_to = date_to or month_end
    if date_to < date_from:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="结束日期不能早于开始日期")
    return ReportService(db).get_revenue_report(date_from, date_to)
