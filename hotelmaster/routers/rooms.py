"""
房间管理路由
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from hotelmaster.config import settings
from hotelmaster.database import get_db
from hotelmaster.models.ontology import User, RoomStatus, RoomType
from hotelmaster.models.schemas import (
    RoomCreate, RoomUpdate, RoomResponse, RoomStatusUpdate, RoomListResponse, Pagination
)
from hotelmaster.services.room_service import RoomService
from hotelmaster.services.availability_service import AvailabilityService
from hotelmaster.services.audit_service import AuditService
from hotelmaster.security.auth import require_permission, get_operator_context
from hotelmaster.security.context import OperatorContext
from hotelmaster.security.permissions import (
    ROOMS_VIEW, ROOMS_CREATE, ROOMS_EDIT, ROOMS_DELETE, ROOMS_CHANGE_STATUS
)
from hotelmaster.exceptions import NotFoundError, error_detail

router = APIRouter(prefix="/rooms", tags=["房间管理"])


@router.get("", response_model=RoomListResponse)
def list_rooms(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.ITEMS_PER_PAGE, ge=1, le=100),
    status: Optional[RoomStatus] = None,
    room_type: Optional[RoomType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_VIEW))
):
    """获取房间列表（分页）"""
    service = RoomService(db)
    rooms = service.get_rooms(limit=per_page, offset=(page - 1) * per_page,
                              status=status, room_type=room_type)
    total = service.count_rooms(status=status, room_type=room_type)
    return RoomListResponse(
        items=[RoomResponse.model_validate(r) for r in rooms],
        pagination=Pagination.build(total, page, per_page),
    )


@router.get("/available", response_model=List[RoomResponse])
def list_available_rooms(
    check_in: date,
    check_out: date,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_VIEW))
):
    """查询指定日期区间内的可售房间"""
    try:
        return AvailabilityService(db).list_available(check_in, check_out)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_VIEW))
):
    """获取房间详情"""
    room = RoomService(db).get_room(room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NotFoundError("房间不存在").to_dict())
    return room


@router.post("", response_model=RoomResponse)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_CREATE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """创建房间"""
    try:
        room = RoomService(db).create_room(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('room.create', 'room', room.id,
                         new_values=data.model_dump(mode='json'), context=context)
    return room


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_EDIT)),
    context: OperatorContext = Depends(get_operator_context)
):
    """更新房间"""
    try:
        room = RoomService(db).update_room(room_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('room.update', 'room', room.id,
                         new_values=data.model_dump(mode='json', exclude_unset=True), context=context)
    return room


@router.put("/{room_id}/status", response_model=RoomResponse)
def update_room_status(
    room_id: int,
    data: RoomStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_CHANGE_STATUS)),
    context: OperatorContext = Depends(get_operator_context)
):
    """更新房态（客房部可用）"""
    service = RoomService(db)
    room = service.get_room(room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NotFoundError("房间不存在").to_dict())
    old_status = room.status.value

    room = service.change_status(room_id, data.status)
    AuditService(db).log('room.change_status', 'room', room.id,
                         old_values={'status': old_status},
                         new_values={'status': room.status.value}, context=context)
    return room


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(ROOMS_DELETE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """删除房间"""
    try:
        RoomService(db).delete_room(room_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('room.delete', 'room', room_id, context=context)
    return {"message": "房间已删除", "room_id": room_id}
