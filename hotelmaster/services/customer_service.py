"""
客人服务 - 本体操作层
管理 Customer 对象：档案维护、搜索、入住统计
"""
from typing import List, Optional, Dict, Any
from decimal import Decimal
import logging
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from hotelmaster.models.ontology import Customer, Reservation
from hotelmaster.models.schemas import CustomerCreate, CustomerUpdate
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.exceptions import NotFoundError, ValidationError, ConflictError, DuplicateError

logger = logging.getLogger(__name__)


class CustomerService:
    """客人服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_customers(self, limit: Optional[int] = None, offset: int = 0) -> List[Customer]:
        """获取客人列表（最新登记在前）"""
        query = self.db.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_customers(self) -> int:
        return self.db.query(func.count(Customer.id)).scalar() or 0

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """获取单个客人"""
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_customer_for_update(self, customer_id: int) -> Optional[Customer]:
        """获取客人并加行锁（在调用方事务内使用）"""
        return self.db.query(Customer).filter(
            Customer.id == customer_id
        ).with_for_update().populate_existing().first()

    def get_customer_by_phone(self, phone: str) -> Optional[Customer]:
        """根据手机号获取客人"""
        return self.db.query(Customer).filter(Customer.phone == phone).first()

    def search(self, keyword: str) -> List[Customer]:
        """搜索客人（姓名/邮箱/手机号）"""
        pattern = f"%{keyword}%"
        return self.db.query(Customer).filter(
            or_(
                Customer.first_name.like(pattern),
                Customer.last_name.like(pattern),
                Customer.email.like(pattern),
                Customer.phone.like(pattern),
            )
        ).order_by(Customer.first_name, Customer.last_name).all()

    def create_customer(self, data: CustomerCreate) -> Customer:
        """
        登记客人

        Raises:
            ValidationError: 缺少手机号
            DuplicateError: 手机号已登记
        """
        if not data.phone or not data.phone.strip():
            raise ValidationError("手机号不能为空")
        if self.get_customer_by_phone(data.phone):
            raise DuplicateError(f"手机号 '{data.phone}' 已登记")

        customer_data = data.model_dump()
        if not customer_data.get('country'):
            customer_data['country'] = "Türkiye"

        customer = Customer(**customer_data)
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"Customer created: {customer.full_name} (id={customer.id})")
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        """更新客人档案"""
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("客人不存在")

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get('phone'):
            existing = self.get_customer_by_phone(update_data['phone'])
            if existing and existing.id != customer_id:
                raise DuplicateError(f"手机号 '{update_data['phone']}' 已登记")

        for key, value in update_data.items():
            # 姓名与手机号不能清空
            if value is None and key in ('first_name', 'last_name', 'phone'):
                continue
            setattr(customer, key, value)

        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete_customer(self, customer_id: int) -> bool:
        """
        删除客人

        Raises:
            ConflictError: 客人有预订记录
        """
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("客人不存在")

        reservation_count = self.db.query(Reservation).filter(
            Reservation.customer_id == customer_id
        ).count()
        if reservation_count > 0:
            raise ConflictError(f"该客人有 {reservation_count} 条预订记录，无法删除")

        self.db.delete(customer)
        self.db.commit()
        return True

    def update_stats(self, customer: Customer, amount) -> Customer:
        """退房累计：入住次数 +1，消费金额 += amount（只 flush，不提交）"""
        customer.total_stays = (customer.total_stays or 0) + 1
        customer.total_spent = Decimal(str(customer.total_spent or 0)) + Decimal(str(amount or 0))
        self.db.flush()
        return customer

    def get_stay_history(self, customer_id: int) -> List[Dict[str, Any]]:
        """客人历史入住"""
        if not self.get_customer(customer_id):
            raise NotFoundError("客人不存在")
        return ReservationService(self.db).get_customer_history(customer_id)
