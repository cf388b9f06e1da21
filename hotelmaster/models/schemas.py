"""
Pydantic 模式定义
用于 API 请求/响应验证
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, field_validator, ConfigDict
from hotelmaster.models.ontology import (
    RoomType, RoomStatus, ReservationStatus, PaymentStatus, UserRole
)


# ============== 分页 ==============

class Pagination(BaseModel):
    page: int
    per_page: int
    total: int
    last_page: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, per_page: int) -> "Pagination":
        last_page = max((total + per_page - 1) // per_page, 1) if per_page > 0 else 1
        return cls(
            page=page,
            per_page=per_page,
            total=total,
            last_page=last_page,
            has_next=page < last_page,
            has_prev=page > 1,
        )


# ============== 认证 Schemas ==============

class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    full_name: str
    role: UserRole


# ============== 房间 Schemas ==============

def _normalize_amenities(v: Any) -> List[str]:
    """设施按集合处理：去重、去空白并排序"""
    if v is None:
        return []
    if isinstance(v, str):
        v = v.split(",")
    return sorted({str(item).strip() for item in v if str(item).strip()})


class RoomBase(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=10)
    room_type: RoomType
    capacity: int = Field(default=2, ge=1)
    price_per_night: Decimal = Field(..., ge=0)
    floor: int = 1
    amenities: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("amenities", mode="before")
    @classmethod
    def normalize_amenities(cls, v: Any) -> List[str]:
        return _normalize_amenities(v)


class RoomCreate(RoomBase):
    status: RoomStatus = RoomStatus.AVAILABLE


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=10)
    room_type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, ge=1)
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    floor: Optional[int] = None
    amenities: Optional[List[str]] = None
    notes: Optional[str] = None
    status: Optional[RoomStatus] = None

    @field_validator("amenities", mode="before")
    @classmethod
    def normalize_amenities(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        return _normalize_amenities(v)


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomResponse(RoomBase):
    id: int
    status: RoomStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class RoomListResponse(BaseModel):
    items: List[RoomResponse]
    pagination: Pagination


# ============== 客人 Schemas ==============

class CustomerBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., min_length=3, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    national_id: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=50)
    country: Optional[str] = Field("Türkiye", max_length=50)
    birth_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        if v in (None, ""):
            return None
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("邮箱格式不正确")
        return v


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, min_length=3, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    national_id: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=50)
    country: Optional[str] = Field(None, max_length=50)
    birth_date: Optional[date] = None
    notes: Optional[str] = None


class CustomerResponse(CustomerBase):
    id: int
    total_stays: int = 0
    total_spent: Decimal = Decimal("0")
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CustomerListResponse(BaseModel):
    items: List[CustomerResponse]
    pagination: Pagination


# ============== 预订 Schemas ==============

class ReservationCreate(BaseModel):
    customer_id: int
    room_id: int
    check_in: date
    check_out: date
    number_of_guests: int = Field(..., ge=1)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None


class ReservationUpdate(BaseModel):
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    total_price: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class CheckOutRequest(BaseModel):
    total_price: Optional[Decimal] = Field(None, ge=0)


class ReservationResponse(BaseModel):
    id: int
    customer_id: int
    room_id: int
    check_in: date
    check_out: date
    number_of_guests: int
    total_price: Optional[Decimal]
    status: ReservationStatus
    payment_status: PaymentStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ReservationDetailResponse(ReservationResponse):
    """预订详情，附带客人与房间摘要"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    room_number: Optional[str] = None
    nights: int = 0


class ReservationListResponse(BaseModel):
    items: List[ReservationDetailResponse]
    pagination: Pagination


# ============== 报表 Schemas ==============

class RevenueStats(BaseModel):
    total_reservations: int = 0
    total_revenue: Decimal = Decimal("0")
    avg_price: Decimal = Decimal("0")


# ============== 设置 Schemas ==============

class SettingItem(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: Any = None
    type: str = Field(default="string", pattern="^(string|int|bool|json)$")


class SettingsUpdate(BaseModel):
    settings: List[SettingItem]


class SettingsResponse(BaseModel):
    settings: Dict[str, Any]
