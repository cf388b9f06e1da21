"""
预订管理路由
入住、退房、取消都经过 ReservationLifecycleService，成功后写审计日志
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query, Body
from sqlalchemy.orm import Session
from hotelmaster.config import settings
from hotelmaster.database import get_db
from hotelmaster.models.ontology import User, ReservationStatus
from hotelmaster.models.schemas import (
    ReservationCreate, ReservationUpdate, ReservationResponse, ReservationDetailResponse,
    ReservationListResponse, CheckOutRequest, Pagination
)
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.services.lifecycle_service import ReservationLifecycleService
from hotelmaster.services.audit_service import AuditService
from hotelmaster.security.auth import require_permission, get_operator_context
from hotelmaster.security.context import OperatorContext
from hotelmaster.security.permissions import (
    RESERVATIONS_VIEW, RESERVATIONS_CREATE, RESERVATIONS_EDIT, RESERVATIONS_DELETE,
    RESERVATIONS_CHECKIN, RESERVATIONS_CHECKOUT
)
from hotelmaster.exceptions import NotFoundError, error_detail

router = APIRouter(prefix="/reservations", tags=["预订管理"])


def _snapshot(reservation) -> dict:
    return ReservationResponse.model_validate(reservation).model_dump(mode='json')


def _run(operation):
    """执行编排操作，把业务异常映射为 HTTP 错误"""
    try:
        return operation()
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))


@router.get("", response_model=ReservationListResponse)
def list_reservations(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.ITEMS_PER_PAGE, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_VIEW))
):
    """获取预订列表（分页，入住日期倒序）"""
    service = ReservationService(db)
    reservations = service.get_reservations(limit=per_page, offset=(page - 1) * per_page, status=status)
    return ReservationListResponse(
        items=[ReservationDetailResponse(**service.to_detail(r)) for r in reservations],
        pagination=Pagination.build(service.count_reservations(status=status), page, per_page),
    )


@router.get("/upcoming", response_model=List[ReservationDetailResponse])
def list_upcoming(
    days: int = Query(30, ge=0, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_VIEW))
):
    """未来 N 天内入住的预订"""
    service = ReservationService(db)
    return [ReservationDetailResponse(**service.to_detail(r)) for r in service.upcoming(days)]


@router.get("/calendar", response_model=List[ReservationDetailResponse])
def reservation_calendar(
    date_from: date = Query(..., alias="from"),
    date_to: date = Query(..., alias="to"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_VIEW))
):
    """日历视图：区间内的有效预订"""
    service = ReservationService(db)
    return [ReservationDetailResponse(**service.to_detail(r))
            for r in service.by_date_range(date_from, date_to)]


@router.get("/{reservation_id}", response_model=ReservationDetailResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_VIEW))
):
    """获取预订详情"""
    detail = ReservationService(db).get_reservation_detail(reservation_id)
    if not detail:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NotFoundError("预订不存在").to_dict())
    return ReservationDetailResponse(**detail)


@router.post("", response_model=ReservationResponse)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_CREATE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """创建预订"""
    service = ReservationLifecycleService(db, context)
    reservation = _run(lambda: service.create_reservation(data))

    AuditService(db).log('reservation.create', 'reservation', reservation.id,
                         new_values=_snapshot(reservation), context=context)
    return reservation


@router.put("/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    reservation_id: int,
    data: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_EDIT)),
    context: OperatorContext = Depends(get_operator_context)
):
    """修改预订（改日期会重新检查可用性）"""
    existing = ReservationService(db).get_reservation(reservation_id)
    old_values = _snapshot(existing) if existing else None

    service = ReservationLifecycleService(db, context)
    reservation = _run(lambda: service.update_reservation(reservation_id, data))

    AuditService(db).log('reservation.update', 'reservation', reservation.id,
                         old_values=old_values, new_values=_snapshot(reservation), context=context)
    return reservation


@router.post("/{reservation_id}/checkin", response_model=ReservationResponse)
def check_in(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_CHECKIN)),
    context: OperatorContext = Depends(get_operator_context)
):
    """办理入住"""
    service = ReservationLifecycleService(db, context)
    reservation = _run(lambda: service.check_in(reservation_id))

    AuditService(db).log('reservation.checkin', 'reservation', reservation.id,
                         old_values={'status': ReservationStatus.CONFIRMED.value},
                         new_values={'status': reservation.status.value}, context=context)
    return reservation


@router.post("/{reservation_id}/checkout", response_model=ReservationResponse)
def check_out(
    reservation_id: int,
    data: Optional[CheckOutRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_CHECKOUT)),
    context: OperatorContext = Depends(get_operator_context)
):
    """办理退房，可指定最终总价"""
    final_total = data.total_price if data else None
    service = ReservationLifecycleService(db, context)
    reservation = _run(lambda: service.check_out(reservation_id, final_total))

    AuditService(db).log('reservation.checkout', 'reservation', reservation.id,
                         old_values={'status': ReservationStatus.CHECKED_IN.value},
                         new_values={'status': reservation.status.value,
                                     'total_price': str(reservation.total_price)},
                         context=context)
    return reservation


@router.delete("/{reservation_id}", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(RESERVATIONS_DELETE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """取消预订"""
    existing = ReservationService(db).get_reservation(reservation_id)
    old_status = existing.status.value if existing else None

    service = ReservationLifecycleService(db, context)
    reservation = _run(lambda: service.cancel(reservation_id))

    AuditService(db).log('reservation.cancel', 'reservation', reservation.id,
                         old_values={'status': old_status},
                         new_values={'status': reservation.status.value}, context=context)
    return reservation
