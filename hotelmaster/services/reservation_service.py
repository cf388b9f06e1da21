"""
预订服务 - 本体操作层
管理 Reservation 对象的持久化与查询

只做读写，不校验可用性也不提交事务：
生命周期规则（状态机、冲突检查、房态联动）由 ReservationLifecycleService 负责。
"""
from typing import Any, Dict, List, Optional
from datetime import date, timedelta
from decimal import Decimal
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from hotelmaster.models.ontology import (
    Reservation, ReservationStatus, PaymentStatus, Room,
    ACTIVE_RESERVATION_STATUSES, REVENUE_RESERVATION_STATUSES
)
from hotelmaster.exceptions import ValidationError

# 创建预订的必填字段
REQUIRED_FIELDS = (
    'customer_id', 'room_id', 'check_in', 'check_out', 'number_of_guests', 'created_by'
)

# update_reservation 允许修改的字段，其余键忽略
UPDATABLE_FIELDS = (
    'check_in', 'check_out', 'number_of_guests', 'total_price',
    'status', 'payment_status', 'notes',
)


class ReservationService:
    """预订服务"""

    def __init__(self, db: Session):
        self.db = db

    def _with_summary(self, query):
        return query.options(joinedload(Reservation.customer), joinedload(Reservation.room))

    # ============== 查询 ==============

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        """获取单个预订"""
        return self.db.query(Reservation).filter(Reservation.id == reservation_id).first()

    def get_reservation_for_update(self, reservation_id: int) -> Optional[Reservation]:
        """获取预订并加行锁（在调用方事务内使用）"""
        return self.db.query(Reservation).filter(
            Reservation.id == reservation_id
        ).with_for_update().populate_existing().first()

    def get_reservations(self, limit: Optional[int] = None, offset: int = 0,
                         status: Optional[ReservationStatus] = None) -> List[Reservation]:
        """获取预订列表，按入住日期倒序"""
        query = self._with_summary(self.db.query(Reservation))
        if status is not None:
            query = query.filter(Reservation.status == status)

        query = query.order_by(Reservation.check_in.desc(), Reservation.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_reservations(self, status: Optional[ReservationStatus] = None) -> int:
        """预订数量"""
        query = self.db.query(func.count(Reservation.id))
        if status is not None:
            query = query.filter(Reservation.status == status)
        return query.scalar() or 0

    @staticmethod
    def to_detail(reservation: Reservation) -> Dict[str, Any]:
        """预订字段 + 客人、房间摘要"""
        customer = reservation.customer
        room = reservation.room
        return {
            'id': reservation.id,
            'customer_id': reservation.customer_id,
            'room_id': reservation.room_id,
            'check_in': reservation.check_in,
            'check_out': reservation.check_out,
            'number_of_guests': reservation.number_of_guests,
            'total_price': reservation.total_price,
            'status': reservation.status,
            'payment_status': reservation.payment_status,
            'notes': reservation.notes,
            'created_by': reservation.created_by,
            'created_at': reservation.created_at,
            'updated_at': reservation.updated_at,
            'first_name': customer.first_name if customer else None,
            'last_name': customer.last_name if customer else None,
            'phone': customer.phone if customer else None,
            'room_number': room.room_number if room else None,
            'nights': reservation.nights,
        }

    def get_reservation_detail(self, reservation_id: int) -> Optional[Dict[str, Any]]:
        """获取预订详情（含客人姓名、电话与房间号）"""
        reservation = self._with_summary(self.db.query(Reservation)).filter(
            Reservation.id == reservation_id
        ).first()
        if not reservation:
            return None
        return self.to_detail(reservation)

    def by_date_range(self, date_from: date, date_to: date) -> List[Reservation]:
        """区间内的有效预订（入住 >= from 且离店 <= to）"""
        return self._with_summary(self.db.query(Reservation)).filter(
            Reservation.check_in >= date_from,
            Reservation.check_out <= date_to,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        ).order_by(Reservation.check_in).all()

    def upcoming(self, days_ahead: int = 30) -> List[Reservation]:
        """今天起 days_ahead 天内入住的有效预订"""
        today = date.today()
        return self._with_summary(self.db.query(Reservation)).filter(
            Reservation.check_in >= today,
            Reservation.check_in <= today + timedelta(days=days_ahead),
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        ).order_by(Reservation.check_in).all()

    def today_check_ins(self) -> List[Reservation]:
        """今日预抵"""
        return self._with_summary(self.db.query(Reservation)).filter(
            Reservation.check_in == date.today(),
            Reservation.status == ReservationStatus.CONFIRMED,
        ).order_by(Reservation.check_in).all()

    def today_check_outs(self) -> List[Reservation]:
        """今日预离"""
        return self._with_summary(self.db.query(Reservation)).filter(
            Reservation.check_out == date.today(),
            Reservation.status == ReservationStatus.CHECKED_IN,
        ).order_by(Reservation.check_out).all()

    def revenue_stats(self, date_from: date, date_to: date) -> Dict[str, Any]:
        """
        营收统计：离店日期在 [from, to] 内且状态为已退房/已确认的预订
        没有数据时各项为 0
        """
        count, total, avg = self.db.query(
            func.count(Reservation.id),
            func.sum(Reservation.total_price),
            func.avg(Reservation.total_price),
        ).filter(
            Reservation.check_out >= date_from,
            Reservation.check_out <= date_to,
            Reservation.status.in_(REVENUE_RESERVATION_STATUSES),
        ).one()

        return {
            'total_reservations': count or 0,
            'total_revenue': Decimal(str(total or 0)).quantize(Decimal("0.01")),
            'avg_price': Decimal(str(avg or 0)).quantize(Decimal("0.01")),
        }

    def get_customer_history(self, customer_id: int) -> List[Dict[str, Any]]:
        """客人历史入住（已退房/已取消），按离店日期倒序"""
        rows = self.db.query(Reservation, Room.room_number, Room.room_type).join(
            Room, Reservation.room_id == Room.id
        ).filter(
            Reservation.customer_id == customer_id,
            Reservation.status.in_([ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED]),
        ).order_by(Reservation.check_out.desc()).all()

        history = []
        for reservation, room_number, room_type in rows:
            history.append({
                'id': reservation.id,
                'room_id': reservation.room_id,
                'room_number': room_number,
                'room_type': room_type,
                'check_in': reservation.check_in,
                'check_out': reservation.check_out,
                'number_of_guests': reservation.number_of_guests,
                'total_price': reservation.total_price,
                'status': reservation.status,
                'payment_status': reservation.payment_status,
            })
        return history

    # ============== 写操作（只 flush） ==============

    def create_reservation(self, data: Dict[str, Any]) -> Reservation:
        """
        新建预订记录

        Raises:
            ValidationError: 缺少必填字段
        """
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, '')]
        if missing:
            raise ValidationError(f"缺少必填字段: {', '.join(missing)}")

        reservation = Reservation(
            customer_id=data['customer_id'],
            room_id=data['room_id'],
            check_in=data['check_in'],
            check_out=data['check_out'],
            number_of_guests=data['number_of_guests'],
            total_price=data.get('total_price'),
            status=data.get('status') or ReservationStatus.CONFIRMED,
            payment_status=data.get('payment_status') or PaymentStatus.PENDING,
            notes=data.get('notes'),
            created_by=data['created_by'],
        )
        self.db.add(reservation)
        self.db.flush()
        return reservation

    def update_reservation(self, reservation: Reservation, fields: Dict[str, Any]) -> Reservation:
        """更新白名单字段，未知字段忽略"""
        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(reservation, key, value)
        self.db.flush()
        return reservation
