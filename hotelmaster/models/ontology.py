"""
ORM 对象定义
房间、客人、预订是核心实体；用户、设置、审计日志是外围协作者
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, Text,
    Enum as SQLEnum, Boolean, Numeric, JSON
)
from sqlalchemy.orm import relationship
from hotelmaster.database import Base


# ============== 枚举定义 ==============

class RoomType(str, Enum):
    """房型枚举"""
    SINGLE = "single"      # 单人间
    DOUBLE = "double"      # 双人间
    SUITE = "suite"        # 套房
    DELUXE = "deluxe"      # 豪华间


class RoomStatus(str, Enum):
    """房间状态枚举"""
    AVAILABLE = "available"      # 空闲可售
    OCCUPIED = "occupied"        # 入住中
    DIRTY = "dirty"              # 待清洁
    MAINTENANCE = "maintenance"  # 维修中


class ReservationStatus(str, Enum):
    """预订状态枚举"""
    CONFIRMED = "confirmed"      # 已确认
    CHECKED_IN = "checked_in"    # 已入住
    CHECKED_OUT = "checked_out"  # 已退房
    CANCELLED = "cancelled"      # 已取消


class PaymentStatus(str, Enum):
    """付款状态"""
    PENDING = "pending"    # 待付款
    PARTIAL = "partial"    # 部分付款
    PAID = "paid"          # 已付清


class UserRole(str, Enum):
    """用户角色"""
    ADMIN = "admin"                # 管理员
    RECEPTIONIST = "receptionist"  # 前台
    HOUSEKEEPING = "housekeeping"  # 客房清洁


# 占用房间的预订状态
ACTIVE_RESERVATION_STATUSES = (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN)

# 计入营收统计的预订状态
REVENUE_RESERVATION_STATUSES = (ReservationStatus.CHECKED_OUT, ReservationStatus.CONFIRMED)


# ============== 实体定义 ==============

class Room(Base):
    """
    房间对象
    状态由客房部直接修改，或作为入住/退房/取消的副作用被修改
    """
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(10), unique=True, nullable=False)  # 房间号
    room_type = Column(SQLEnum(RoomType), nullable=False)
    capacity = Column(Integer, default=2)                          # 最大入住人数
    price_per_night = Column(Numeric(10, 2), nullable=False)       # 每晚价格
    status = Column(SQLEnum(RoomStatus), default=RoomStatus.AVAILABLE)
    floor = Column(Integer, default=1)                             # 楼层
    amenities = Column(JSON, default=list)                         # 设施列表
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 链接：历史预订（共享引用，不拥有）
    reservations = relationship("Reservation", back_populates="room")


class Customer(Base):
    """
    客人对象
    退房时累计入住次数与消费金额
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100))
    phone = Column(String(20), nullable=False, index=True)
    national_id = Column(String(30))                     # 证件号码
    address = Column(Text)
    city = Column(String(50))
    country = Column(String(50), default="Türkiye")
    birth_date = Column(Date)
    notes = Column(Text)
    total_stays = Column(Integer, default=0)              # 累计入住次数
    total_spent = Column(Numeric(12, 2), default=0)       # 累计消费金额
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 链接
    reservations = relationship("Reservation", back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Reservation(Base):
    """
    预订对象
    独占自己的日期区间与状态；[check_in, check_out) 为半开区间
    """
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    check_in = Column(Date, nullable=False)              # 入住日期
    check_out = Column(Date, nullable=False)             # 离店日期（当天不占用）
    number_of_guests = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(10, 2))                 # 总价
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.CONFIRMED)
    payment_status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING)
    notes = Column(Text)
    created_by = Column(Integer, ForeignKey("users.id"))  # 创建人
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 链接
    customer = relationship("Customer", back_populates="reservations")
    room = relationship("Room", back_populates="reservations")
    creator = relationship("User", foreign_keys=[created_by])

    @property
    def nights(self) -> int:
        if not self.check_in or not self.check_out:
            return 0
        return (self.check_out - self.check_in).days


class User(Base):
    """
    系统用户
    属性安全等级：password_hash(RESTRICTED)
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)  # 登录账号
    password_hash = Column(String(255), nullable=False)  # 密码哈希
    full_name = Column(String(100), nullable=False)
    email = Column(String(100))
    role = Column(SQLEnum(UserRole), nullable=False)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Setting(Base):
    """
    系统设置（键值对）
    value 统一以文本存储，type 决定读取时的类型转换
    """
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(Text)
    type = Column(String(10), default="string")  # string, int, bool, json
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AuditLog(Base):
    """
    审计日志
    由接口层在核心操作成功后写入
    """
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    action = Column(String(100), nullable=False)         # 操作类型
    entity_type = Column(String(50))                     # 实体类型
    entity_id = Column(Integer)                          # 实体ID
    old_values = Column(Text)                            # 旧值(JSON)
    new_values = Column(Text)                            # 新值(JSON)
    ip_address = Column(String(50))                      # IP地址
    created_at = Column(DateTime, default=datetime.utcnow)

    # 链接
    user = relationship("User")
