"""
客人服务测试
"""
import pytest
from decimal import Decimal

from hotelmaster.models.schemas import CustomerCreate, CustomerUpdate
from hotelmaster.services.customer_service import CustomerService
from hotelmaster.exceptions import NotFoundError, ConflictError, DuplicateError


class TestCustomerService:
    def test_create_defaults(self, db_session):
        customer = CustomerService(db_session).create_customer(
            CustomerCreate(first_name="Ali", last_name="Kaya", phone="05001112233")
        )
        assert customer.country == "Türkiye"
        assert customer.total_stays == 0
        assert customer.full_name == "Ali Kaya"

    def test_duplicate_phone(self, db_session, sample_customer):
        with pytest.raises(DuplicateError):
            CustomerService(db_session).create_customer(
                CustomerCreate(first_name="X", last_name="Y", phone=sample_customer.phone)
            )

    def test_invalid_email_rejected_by_schema(self):
        with pytest.raises(ValueError):
            CustomerCreate(first_name="X", last_name="Y", phone="0500", email="not-an-email")

    def test_search(self, db_session, sample_customer, sample_customer_2):
        service = CustomerService(db_session)
        assert [c.id for c in service.search("Demir")] == [sample_customer_2.id]
        assert [c.id for c in service.search("example.com")] == [sample_customer.id]
        assert [c.id for c in service.search("0532")] == [sample_customer.id]

    def test_update(self, db_session, sample_customer):
        customer = CustomerService(db_session).update_customer(
            sample_customer.id, CustomerUpdate(city="Ankara", notes="VIP")
        )
        assert customer.city == "Ankara"
        assert customer.notes == "VIP"

    def test_update_missing(self, db_session):
        with pytest.raises(NotFoundError):
            CustomerService(db_session).update_customer(999, CustomerUpdate(city="Ankara"))

    def test_delete(self, db_session, sample_customer):
        service = CustomerService(db_session)
        assert service.delete_customer(sample_customer.id) is True
        assert service.get_customer(sample_customer.id) is None

    def test_delete_with_reservations(self, db_session, sample_reservation):
        with pytest.raises(ConflictError):
            CustomerService(db_session).delete_customer(sample_reservation.customer_id)

    def test_update_stats(self, db_session, sample_customer):
        service = CustomerService(db_session)
        service.update_stats(sample_customer, Decimal("1500.50"))
        service.update_stats(sample_customer, Decimal("100"))
        db_session.commit()
        db_session.refresh(sample_customer)
        assert sample_customer.total_stays == 2
        assert sample_customer.total_spent == Decimal("1600.50")

    def test_stay_history_missing_customer(self, db_session):
        with pytest.raises(NotFoundError):
            CustomerService(db_session).get_stay_history(999)

    def test_pagination(self, db_session, sample_customer, sample_customer_2):
        service = CustomerService(db_session)
        assert service.count_customers() == 2
        assert len(service.get_customers(limit=1)) == 1
