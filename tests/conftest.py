"""
Pytest 配置和共享 fixtures
"""
import os

# 应用启动时的建表与默认管理员写入内存库，不在工作目录生成文件
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from hotelmaster.database import Base, get_db
from hotelmaster.models import ontology
from hotelmaster.models.ontology import (
    User, UserRole, Room, RoomType, RoomStatus, Customer,
    Reservation, ReservationStatus, PaymentStatus
)
from hotelmaster.security.auth import get_password_hash, create_access_token
from hotelmaster.security.context import OperatorContext
from hotelmaster.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 认证相关 Fixtures ==============

def _create_user(db_session, username: str, full_name: str, role: UserRole) -> User:
    user = User(
        username=username,
        password_hash=get_password_hash("123456"),
        full_name=full_name,
        role=role,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    """管理员用户"""
    return _create_user(db_session, "admin", "管理员", UserRole.ADMIN)


@pytest.fixture
def receptionist_user(db_session):
    """前台用户"""
    return _create_user(db_session, "front1", "前台小王", UserRole.RECEPTIONIST)


@pytest.fixture
def housekeeping_user(db_session):
    """客房清洁用户"""
    return _create_user(db_session, "cleaner1", "清洁员小李", UserRole.HOUSEKEEPING)


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(admin_user.id, admin_user.role)


@pytest.fixture
def receptionist_token(receptionist_user):
    return create_access_token(receptionist_user.id, receptionist_user.role)


@pytest.fixture
def housekeeping_token(housekeeping_user):
    return create_access_token(housekeeping_user.id, housekeeping_user.role)


@pytest.fixture
def auth_headers(admin_token):
    """返回带认证的请求头（管理员）"""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def receptionist_auth_headers(receptionist_token):
    """返回前台认证的请求头"""
    return {"Authorization": f"Bearer {receptionist_token}"}


@pytest.fixture
def housekeeping_auth_headers(housekeeping_token):
    """返回客房清洁认证的请求头"""
    return {"Authorization": f"Bearer {housekeeping_token}"}


@pytest.fixture
def operator(receptionist_user):
    """编排服务使用的操作人上下文"""
    return OperatorContext(
        user_id=receptionist_user.id,
        username=receptionist_user.username,
        role=receptionist_user.role.value,
        ip_address="127.0.0.1",
    )


# ============== 实体相关 Fixtures ==============

def _create_room(db_session, room_number: str, floor: int = 1,
                 price: str = "1000.00", capacity: int = 2,
                 room_type: RoomType = RoomType.DOUBLE,
                 status: RoomStatus = RoomStatus.AVAILABLE) -> Room:
    room = Room(
        room_number=room_number,
        room_type=room_type,
        capacity=capacity,
        price_per_night=Decimal(price),
        status=status,
        floor=floor,
        amenities=["tv", "wifi"],
    )
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def sample_room(db_session):
    """创建测试房间：101，每晚 1000"""
    return _create_room(db_session, "101")


@pytest.fixture
def sample_room_102(db_session):
    """创建102房间"""
    return _create_room(db_session, "102", price="800.00")


@pytest.fixture
def sample_room_201(db_session):
    """创建201房间（单人间）"""
    return _create_room(db_session, "201", floor=2, price="500.00",
                        capacity=1, room_type=RoomType.SINGLE)


@pytest.fixture
def sample_customer(db_session):
    """创建测试客人"""
    customer = Customer(
        first_name="Ayşe",
        last_name="Yılmaz",
        phone="05321234567",
        email="ayse@example.com",
        city="Istanbul",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_customer_2(db_session):
    """创建第二位客人"""
    customer = Customer(
        first_name="Mehmet",
        last_name="Demir",
        phone="05429876543",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_reservation(db_session, sample_room, sample_customer, receptionist_user):
    """创建已确认预订：101 房 2024-06-10 ~ 2024-06-12"""
    reservation = Reservation(
        customer_id=sample_customer.id,
        room_id=sample_room.id,
        check_in=date(2024, 6, 10),
        check_out=date(2024, 6, 12),
        number_of_guests=2,
        total_price=Decimal("2000.00"),
        status=ReservationStatus.CONFIRMED,
        payment_status=PaymentStatus.PENDING,
        created_by=receptionist_user.id,
    )
    db_session.add(reservation)
    db_session.commit()
    db_session.refresh(reservation)
    return reservation
