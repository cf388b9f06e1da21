"""
客人管理路由
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from hotelmaster.config import settings
from hotelmaster.database import get_db
from hotelmaster.models.ontology import User
from hotelmaster.models.schemas import (
    CustomerCreate, CustomerUpdate, CustomerResponse, CustomerListResponse, Pagination
)
from hotelmaster.services.customer_service import CustomerService
from hotelmaster.services.audit_service import AuditService
from hotelmaster.security.auth import require_permission, get_operator_context
from hotelmaster.security.context import OperatorContext
from hotelmaster.security.permissions import (
    CUSTOMERS_VIEW, CUSTOMERS_CREATE, CUSTOMERS_EDIT, CUSTOMERS_DELETE
)
from hotelmaster.exceptions import NotFoundError, error_detail

router = APIRouter(prefix="/customers", tags=["客人管理"])


@router.get("", response_model=CustomerListResponse)
def list_customers(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.ITEMS_PER_PAGE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_VIEW))
):
    """获取客人列表（分页）"""
    service = CustomerService(db)
    customers = service.get_customers(limit=per_page, offset=(page - 1) * per_page)
    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        pagination=Pagination.build(service.count_customers(), page, per_page),
    )


@router.get("/search", response_model=List[CustomerResponse])
def search_customers(
    keyword: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_VIEW))
):
    """搜索客人（姓名/邮箱/手机号）"""
    return CustomerService(db).search(keyword)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_VIEW))
):
    """获取客人详情"""
    customer = CustomerService(db).get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NotFoundError("客人不存在").to_dict())
    return customer


@router.get("/{customer_id}/history")
def get_customer_history(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_VIEW))
):
    """客人历史入住记录"""
    try:
        return CustomerService(db).get_stay_history(customer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))


@router.post("", response_model=CustomerResponse)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_CREATE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """登记客人"""
    try:
        customer = CustomerService(db).create_customer(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('customer.create', 'customer', customer.id,
                         new_values=data.model_dump(mode='json'), context=context)
    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_EDIT)),
    context: OperatorContext = Depends(get_operator_context)
):
    """更新客人档案"""
    try:
        customer = CustomerService(db).update_customer(customer_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('customer.update', 'customer', customer.id,
                         new_values=data.model_dump(mode='json', exclude_unset=True), context=context)
    return customer


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(CUSTOMERS_DELETE)),
    context: OperatorContext = Depends(get_operator_context)
):
    """删除客人"""
    try:
        CustomerService(db).delete_customer(customer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    AuditService(db).log('customer.delete', 'customer', customer_id, context=context)
    return {"message": "客人已删除", "customer_id": customer_id}
