"""
可用性服务 - 房间在日期区间内是否可售

区间为半开区间 [check_in, check_out)：已有预订的离店日等于请求的入住日不算冲突。
只有 confirmed / checked_in 的预订占用房间。
"""
from typing import List, Optional
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import or_, not_
from hotelmaster.models.ontology import (
    Room, RoomStatus, Reservation, ACTIVE_RESERVATION_STATUSES
)
from hotelmaster.domain.reservation import intervals_overlap, validate_stay_dates


def overlap_clause(check_in: date, check_out: date):
    """与 intervals_overlap 等价的 SQL 条件"""
    return not_(or_(
        Reservation.check_out <= check_in,
        Reservation.check_in >= check_out,
    ))


class AvailabilityService:
    """房间可用性查询"""

    def __init__(self, db: Session):
        self.db = db

    def find_conflicts(self, room_id: int, check_in: date, check_out: date,
                       exclude_reservation_id: Optional[int] = None) -> List[Reservation]:
        """查找与请求区间重叠的有效预订"""
        query = self.db.query(Reservation).filter(
            Reservation.room_id == room_id,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            overlap_clause(check_in, check_out),
        )
        if exclude_reservation_id is not None:
            query = query.filter(Reservation.id != exclude_reservation_id)

        conflicts = query.order_by(Reservation.check_in).all()
        # SQL 条件与领域谓词必须一致
        return [r for r in conflicts if intervals_overlap(r.check_in, r.check_out, check_in, check_out)]

    def is_available(self, room_id: int, check_in: date, check_out: date,
                     exclude_reservation_id: Optional[int] = None) -> bool:
        """房间在 [check_in, check_out) 内是否没有冲突预订"""
        return not self.find_conflicts(room_id, check_in, check_out, exclude_reservation_id)

    def list_available(self, check_in: date, check_out: date) -> List[Room]:
        """
        指定区间内可售的房间
        房态必须为 available，且没有重叠的有效预订；按楼层、房间号排序
        """
        validate_stay_dates(check_in, check_out)

        busy_rooms = self.db.query(Reservation.room_id).filter(
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            overlap_clause(check_in, check_out),
        )

        return self.db.query(Room).filter(
            Room.status == RoomStatus.AVAILABLE,
            ~Room.id.in_(busy_rooms),
        ).order_by(Room.floor, Room.room_number).all()
