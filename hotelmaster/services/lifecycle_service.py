"""
预订生命周期服务 - 编排层
负责状态转换规则和跨实体联动：

- 创建预订：校验客人/房间、日期、人数，计算总价，检查可用性
- 入住：预订 -> checked_in，房间 -> occupied
- 退房：预订 -> checked_out，房间 -> dirty，客人累计入住次数与消费
- 取消：预订 -> cancelled，已入住的预订释放房间为 available

每个操作在一个事务内完成：先加锁重新读取当前状态，再写入；
任一步失败整体回滚，不会出现预订已入住而房间仍空闲的中间状态。
"""
from typing import Any, Dict, Optional
from contextlib import contextmanager
from datetime import date
import logging
from sqlalchemy.orm import Session
from hotelmaster.models.ontology import (
    Reservation, ReservationStatus, RoomStatus, PaymentStatus
)
from hotelmaster.domain.reservation import (
    ReservationTrigger, next_status, is_terminal_status, parse_date,
    validate_stay_dates, validate_guest_count, calculate_total_price, parse_amount,
)
from hotelmaster.security.context import OperatorContext
from hotelmaster.services.room_service import RoomService
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.services.customer_service import CustomerService
from hotelmaster.services.availability_service import AvailabilityService
from hotelmaster.exceptions import NotFoundError, ValidationError, ConflictError

logger = logging.getLogger(__name__)


def _as_dict(data) -> Dict[str, Any]:
    if data is None:
        return {}
    if hasattr(data, 'model_dump'):
        return data.model_dump(exclude_unset=True)
    return dict(data)


class ReservationLifecycleService:
    """预订生命周期编排"""

    def __init__(self, db: Session, context: OperatorContext,
                 rooms: RoomService = None,
                 reservations: ReservationService = None,
                 customers: CustomerService = None,
                 availability: AvailabilityService = None):
        self.db = db
        self.context = context
        # 支持依赖注入协作者，便于测试
        self.rooms = rooms or RoomService(db)
        self.reservations = reservations or ReservationService(db)
        self.customers = customers or CustomerService(db)
        self.availability = availability or AvailabilityService(db)

    @contextmanager
    def _transaction(self):
        """整个操作一个事务：成功提交，异常回滚后原样抛出"""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _lock_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.reservations.get_reservation_for_update(reservation_id)
        if not reservation:
            raise NotFoundError("预订不存在")
        return reservation

    def _lock_room(self, room_id: int):
        room = self.rooms.get_room_for_update(room_id)
        if not room:
            raise NotFoundError("房间不存在")
        return room

    def _ensure_available(self, room_id: int, check_in: date, check_out: date,
                          exclude_reservation_id: Optional[int] = None) -> None:
        conflicts = self.availability.find_conflicts(
            room_id, check_in, check_out, exclude_reservation_id
        )
        if conflicts:
            logger.warning(
                f"Reservation declined: room {room_id} busy {check_in}~{check_out} "
                f"(conflicts: {[r.id for r in conflicts]})"
            )
            raise ConflictError(f"房间在 {check_in} 至 {check_out} 期间已被预订")

    # ============== 创建 / 修改 ==============

    def create_reservation(self, data) -> Reservation:
        """
        创建预订
        业务规则：
        - 客人、房间必须存在
        - 离店日期晚于入住日期，人数不超过房间容量
        - 总价 = 晚数 × 每晚价格
        - 与同房间的有效预订不能重叠
        - 不改变房态
        """
        payload = _as_dict(data)

        with self._transaction():
            customer_id = payload.get('customer_id')
            if customer_id is None or not self.customers.get_customer(customer_id):
                raise NotFoundError("客人不存在")
            room_id = payload.get('room_id')
            if room_id is None:
                raise NotFoundError("房间不存在")
            room = self._lock_room(room_id)

            check_in = parse_date(payload.get('check_in'), "入住日期")
            check_out = parse_date(payload.get('check_out'), "离店日期")
            validate_stay_dates(check_in, check_out)

            guests = payload.get('number_of_guests')
            if guests in (None, ''):
                raise ValidationError("缺少必填字段: number_of_guests")
            guests = validate_guest_count(guests, room.capacity)

            total_price = calculate_total_price(room.price_per_night, check_in, check_out)
            self._ensure_available(room.id, check_in, check_out)

            reservation = self.reservations.create_reservation({
                'customer_id': customer_id,
                'room_id': room.id,
                'check_in': check_in,
                'check_out': check_out,
                'number_of_guests': guests,
                'total_price': total_price,
                'status': ReservationStatus.CONFIRMED,
                'payment_status': payload.get('payment_status') or PaymentStatus.PENDING,
                'notes': payload.get('notes'),
                'created_by': self.context.user_id,
            })

        self.db.refresh(reservation)
        logger.info(
            f"Reservation created: id={reservation.id} room={room.room_number} "
            f"{check_in}~{check_out} total={total_price} by {self.context.username}"
        )
        return reservation

    def update_reservation(self, reservation_id: int, fields) -> Reservation:
        """
        修改预订
        - 已退房/已取消的预订不能修改
        - 状态只能通过入住/退房/取消变更
        - 改日期时重新校验并检查可用性（排除自身），未指定总价时重新计算
        """
        changes = _as_dict(fields)
        if 'status' in changes:
            raise ValidationError("预订状态只能通过入住、退房或取消操作变更")

        with self._transaction():
            reservation = self._lock_reservation(reservation_id)
            if is_terminal_status(reservation.status):
                raise ValidationError(f"预订状态为 {reservation.status.value}，不能修改")

            room = self._lock_room(reservation.room_id)

            check_in = parse_date(changes.get('check_in') or reservation.check_in, "入住日期")
            check_out = parse_date(changes.get('check_out') or reservation.check_out, "离店日期")
            # 接口层传入的 ISO 字符串统一换成 date 再写入
            if 'check_in' in changes:
                changes['check_in'] = check_in
            if 'check_out' in changes:
                changes['check_out'] = check_out
            dates_changed = (check_in != reservation.check_in or check_out != reservation.check_out)

            if dates_changed:
                validate_stay_dates(check_in, check_out)
                self._ensure_available(room.id, check_in, check_out,
                                       exclude_reservation_id=reservation.id)
                changes['check_in'] = check_in
                changes['check_out'] = check_out
                if changes.get('total_price') is None:
                    changes['total_price'] = calculate_total_price(
                        room.price_per_night, check_in, check_out
                    )

            if changes.get('number_of_guests') is not None:
                changes['number_of_guests'] = validate_guest_count(changes['number_of_guests'], room.capacity)

            if changes.get('total_price') is not None:
                changes['total_price'] = parse_amount(changes['total_price'], "总价")

            # 未显式给出的 None 值不覆盖原字段
            changes = {k: v for k, v in changes.items() if v is not None or k == 'notes'}
            self.reservations.update_reservation(reservation, changes)

        self.db.refresh(reservation)
        logger.info(f"Reservation updated: id={reservation.id} by {self.context.username}")
        return reservation

    # ============== 状态转换 ==============

    def check_in(self, reservation_id: int) -> Reservation:
        """办理入住：预订 -> checked_in，房间 -> occupied"""
        with self._transaction():
            reservation = self._lock_reservation(reservation_id)
            target = next_status(reservation.status, ReservationTrigger.CHECK_IN)
            room = self._lock_room(reservation.room_id)

            self.reservations.update_reservation(reservation, {'status': ReservationStatus(target)})
            self.rooms.mark_status(room, RoomStatus.OCCUPIED)

        self.db.refresh(reservation)
        logger.info(
            f"Checked in: reservation={reservation.id} room={room.room_number} "
            f"by {self.context.username}"
        )
        return reservation

    def check_out(self, reservation_id: int, final_total_price=None) -> Reservation:
        """
        办理退房
        业务联动规则：
        1. 预订 -> checked_out，可覆盖最终总价
        2. 房间 -> dirty（待清洁）
        3. 客人入住次数 +1，消费金额累加最终总价
        """
        if final_total_price is not None:
            final_total_price = parse_amount(final_total_price, "总价")

        with self._transaction():
            reservation = self._lock_reservation(reservation_id)
            target = next_status(reservation.status, ReservationTrigger.CHECK_OUT)
            room = self._lock_room(reservation.room_id)
            customer = self.customers.get_customer_for_update(reservation.customer_id)
            if not customer:
                raise NotFoundError("客人不存在")

            changes = {'status': ReservationStatus(target)}
            if final_total_price is not None:
                changes['total_price'] = final_total_price
            self.reservations.update_reservation(reservation, changes)

            self.rooms.mark_status(room, RoomStatus.DIRTY)
            self.customers.update_stats(customer, reservation.total_price or 0)

        self.db.refresh(reservation)
        logger.info(
            f"Checked out: reservation={reservation.id} room={room.room_number} "
            f"total={reservation.total_price} by {self.context.username}"
        )
        return reservation

    def cancel(self, reservation_id: int) -> Reservation:
        """
        取消预订
        已入住的预订取消后房间直接释放为 available（不经过清洁）；
        已确认的预订取消不改变房态
        """
        with self._transaction():
            reservation = self._lock_reservation(reservation_id)
            previous = reservation.status
            target = next_status(previous, ReservationTrigger.CANCEL)

            self.reservations.update_reservation(reservation, {'status': ReservationStatus(target)})
            if previous == ReservationStatus.CHECKED_IN:
                room = self._lock_room(reservation.room_id)
                self.rooms.mark_status(room, RoomStatus.AVAILABLE)

        self.db.refresh(reservation)
        logger.info(
            f"Reservation cancelled: id={reservation.id} (was {previous.value}) "
            f"by {self.context.username}"
        )
        return reservation
