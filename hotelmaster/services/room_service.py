"""
房间服务 - 本体操作层
管理 Room 对象：增删改查与房态
房态变更没有转换限制，客房部可以直接设置任意状态
"""
from typing import List, Optional
from decimal import Decimal
import logging
from sqlalchemy.orm import Session
from sqlalchemy import func
from hotelmaster.models.ontology import Room, RoomType, RoomStatus, Reservation
from hotelmaster.models.schemas import RoomCreate, RoomUpdate
from hotelmaster.exceptions import NotFoundError, ValidationError, ConflictError, DuplicateError

logger = logging.getLogger(__name__)

# update_room 允许修改的字段
ROOM_UPDATABLE_FIELDS = (
    'room_number', 'room_type', 'capacity', 'price_per_night',
    'floor', 'amenities', 'notes', 'status',
)


class RoomService:
    """房间服务"""

    def __init__(self, db: Session):
        self.db = db

    # ============== 查询 ==============

    def get_room(self, room_id: int) -> Optional[Room]:
        """获取单个房间"""
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_for_update(self, room_id: int) -> Optional[Room]:
        """获取房间并加行锁（在调用方事务内使用）"""
        return self.db.query(Room).filter(
            Room.id == room_id
        ).with_for_update().populate_existing().first()

    def get_room_by_number(self, room_number: str) -> Optional[Room]:
        """根据房间号获取房间"""
        return self.db.query(Room).filter(Room.room_number == room_number).first()

    def get_rooms(self, limit: Optional[int] = None, offset: int = 0,
                  status: Optional[RoomStatus] = None,
                  room_type: Optional[RoomType] = None) -> List[Room]:
        """获取房间列表，按楼层、房间号排序"""
        query = self.db.query(Room)

        if status is not None:
            query = query.filter(Room.status == status)
        if room_type is not None:
            query = query.filter(Room.room_type == room_type)

        query = query.order_by(Room.floor, Room.room_number)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_rooms(self, status: Optional[RoomStatus] = None,
                    room_type: Optional[RoomType] = None) -> int:
        """房间数量"""
        query = self.db.query(func.count(Room.id))
        if status is not None:
            query = query.filter(Room.status == status)
        if room_type is not None:
            query = query.filter(Room.room_type == room_type)
        return query.scalar() or 0

    def occupancy_rate(self) -> float:
        """入住率（百分比，保留两位小数）；没有房间时为 0"""
        total = self.count_rooms()
        if total == 0:
            return 0.0
        occupied = self.count_rooms(status=RoomStatus.OCCUPIED)
        return round(occupied / total * 100, 2)

    # ============== 写操作 ==============

    def create_room(self, data: RoomCreate) -> Room:
        """
        创建房间

        Raises:
            DuplicateError: 房间号已存在
            ValidationError: 价格为负
        """
        if self.get_room_by_number(data.room_number):
            raise DuplicateError(f"房间号 '{data.room_number}' 已存在")
        if data.price_per_night is not None and Decimal(data.price_per_night) < 0:
            raise ValidationError("每晚价格不能为负数")

        room = Room(**data.model_dump())
        self.db.add(room)
        self.db.commit()
        self.db.refresh(room)
        logger.info(f"Room created: {room.room_number} (id={room.id})")
        return room

    def update_room(self, room_id: int, data: RoomUpdate) -> Room:
        """更新房间（仅白名单字段）"""
        room = self.get_room(room_id)
        if not room:
            raise NotFoundError("房间不存在")

        update_data = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if key in ROOM_UPDATABLE_FIELDS
        }

        if update_data.get('room_number'):
            existing = self.get_room_by_number(update_data['room_number'])
            if existing and existing.id != room_id:
                raise DuplicateError(f"房间号 '{update_data['room_number']}' 已存在")
        if update_data.get('price_per_night') is not None and Decimal(update_data['price_per_night']) < 0:
            raise ValidationError("每晚价格不能为负数")

        for key, value in update_data.items():
            if value is None and key not in ('notes',):
                continue
            setattr(room, key, value)

        self.db.commit()
        self.db.refresh(room)
        return room

    def change_status(self, room_id: int, status: RoomStatus) -> Room:
        """直接设置房态（客房部操作，无转换校验）"""
        room = self.get_room(room_id)
        if not room:
            raise NotFoundError("房间不存在")

        old_status = room.status
        room.status = RoomStatus(status)
        self.db.commit()
        self.db.refresh(room)
        logger.info(f"Room {room.room_number} status: {old_status.value} -> {room.status.value}")
        return room

    def mark_status(self, room: Room, status: RoomStatus) -> Room:
        """在调用方事务内设置房态（只 flush，不提交）"""
        room.status = status
        self.db.flush()
        return room

    def delete_room(self, room_id: int) -> bool:
        """
        删除房间

        Raises:
            NotFoundError: 房间不存在
            ConflictError: 房间有关联预订
        """
        room = self.get_room(room_id)
        if not room:
            raise NotFoundError("房间不存在")

        reservation_count = self.db.query(Reservation).filter(Reservation.room_id == room_id).count()
        if reservation_count > 0:
            raise ConflictError(f"该房间有 {reservation_count} 条预订记录，无法删除")

        self.db.delete(room)
        self.db.commit()
        logger.info(f"Room deleted: {room.room_number} (id={room_id})")
        return True
