"""
预订服务（存储层）测试
"""
import pytest
from datetime import date, timedelta
from decimal import Decimal

from hotelmaster.models.ontology import Reservation, ReservationStatus, PaymentStatus
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.exceptions import ValidationError


def _data(room, customer, user, **overrides):
    data = {
        'customer_id': customer.id,
        'room_id': room.id,
        'check_in': date(2024, 9, 1),
        'check_out': date(2024, 9, 3),
        'number_of_guests': 2,
        'total_price': Decimal("2000.00"),
        'created_by': user.id,
    }
    data.update(overrides)
    return data


class TestCreateReservation:
    def test_defaults(self, db_session, sample_room, sample_customer, receptionist_user):
        reservation = ReservationService(db_session).create_reservation(
            _data(sample_room, sample_customer, receptionist_user)
        )
        assert reservation.id is not None
        assert reservation.status == ReservationStatus.CONFIRMED
        assert reservation.payment_status == PaymentStatus.PENDING

    @pytest.mark.parametrize("field", [
        'customer_id', 'room_id', 'check_in', 'check_out', 'number_of_guests', 'created_by'
    ])
    def test_required_fields(self, db_session, sample_room, sample_customer, receptionist_user, field):
        data = _data(sample_room, sample_customer, receptionist_user)
        data.pop(field)
        with pytest.raises(ValidationError) as exc:
            ReservationService(db_session).create_reservation(data)
        assert field in str(exc.value)

    def test_does_not_commit(self, db_session, sample_room, sample_customer, receptionist_user):
        service = ReservationService(db_session)
        service.create_reservation(_data(sample_room, sample_customer, receptionist_user))
        db_session.rollback()
        assert service.count_reservations() == 0


class TestUpdateReservation:
    def test_whitelist(self, db_session, sample_reservation):
        service = ReservationService(db_session)
        service.update_reservation(sample_reservation, {
            'notes': '晚到', 'payment_status': PaymentStatus.PAID,
            'room_id': 999, 'unknown': 'x',
        })
        db_session.commit()
        db_session.refresh(sample_reservation)
        assert sample_reservation.notes == '晚到'
        assert sample_reservation.payment_status == PaymentStatus.PAID
        assert sample_reservation.room_id != 999


class TestQueries:
    def test_detail(self, db_session, sample_reservation):
        detail = ReservationService(db_session).get_reservation_detail(sample_reservation.id)
        assert detail['first_name'] == "Ayşe"
        assert detail['phone'] == "05321234567"
        assert detail['room_number'] == "101"
        assert detail['nights'] == 2

    def test_detail_missing(self, db_session):
        assert ReservationService(db_session).get_reservation_detail(999) is None

    def test_list_ordered_by_check_in_desc(self, db_session, sample_reservation, sample_room_102,
                                           sample_customer, receptionist_user):
        service = ReservationService(db_session)
        later = service.create_reservation(_data(sample_room_102, sample_customer, receptionist_user))
        db_session.commit()
        assert [r.id for r in service.get_reservations()] == [later.id, sample_reservation.id]
        assert service.count_reservations(status=ReservationStatus.CONFIRMED) == 2

    def test_by_date_range(self, db_session, sample_reservation):
        service = ReservationService(db_session)
        assert len(service.by_date_range(date(2024, 6, 1), date(2024, 6, 30))) == 1
        # 离店日期超出区间
        assert service.by_date_range(date(2024, 6, 1), date(2024, 6, 11)) == []

    def test_upcoming_and_today(self, db_session, sample_room, sample_room_102,
                                sample_customer, receptionist_user):
        service = ReservationService(db_session)
        today = date.today()
        service.create_reservation(_data(sample_room, sample_customer, receptionist_user,
                                         check_in=today, check_out=today + timedelta(days=2)))
        service.create_reservation(_data(sample_room_102, sample_customer, receptionist_user,
                                         check_in=today - timedelta(days=2), check_out=today,
                                         status=ReservationStatus.CHECKED_IN))
        db_session.commit()

        assert len(service.upcoming(7)) == 1
        assert len(service.today_check_ins()) == 1
        assert len(service.today_check_outs()) == 1

    def test_revenue_stats(self, db_session, sample_room, sample_room_102,
                           sample_customer, receptionist_user):
        service = ReservationService(db_session)
        service.create_reservation(_data(sample_room, sample_customer, receptionist_user,
                                         total_price=Decimal("1000"), status=ReservationStatus.CHECKED_OUT))
        service.create_reservation(_data(sample_room_102, sample_customer, receptionist_user,
                                         total_price=Decimal("3000")))
        service.create_reservation(_data(sample_room_102, sample_customer, receptionist_user,
                                         total_price=Decimal("500"), status=ReservationStatus.CANCELLED))
        db_session.commit()

        stats = service.revenue_stats(date(2024, 9, 1), date(2024, 9, 30))
        assert stats['total_reservations'] == 2
        assert stats['total_revenue'] == Decimal("4000.00")
        assert stats['avg_price'] == Decimal("2000.00")

    def test_revenue_stats_empty(self, db_session):
        stats = ReservationService(db_session).revenue_stats(date(2024, 1, 1), date(2024, 1, 31))
        assert stats == {'total_reservations': 0, 'total_revenue': Decimal("0.00"), 'avg_price': Decimal("0.00")}

    def test_customer_history(self, db_session, sample_room, sample_customer, receptionist_user):
        service = ReservationService(db_session)
        older = service.create_reservation(_data(sample_room, sample_customer, receptionist_user,
                                                 check_in=date(2024, 1, 1), check_out=date(2024, 1, 2),
                                                 status=ReservationStatus.CHECKED_OUT))
        newer = service.create_reservation(_data(sample_room, sample_customer, receptionist_user,
                                                 check_in=date(2024, 3, 1), check_out=date(2024, 3, 2),
                                                 status=ReservationStatus.CANCELLED))
        service.create_reservation(_data(sample_room, sample_customer, receptionist_user))
        db_session.commit()

        history = service.get_customer_history(sample_customer.id)
        assert [h['id'] for h in history] == [newer.id, older.id]
        assert history[0]['room_number'] == "101"
