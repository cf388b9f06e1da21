"""
报表服务 - 本体操作层
提供仪表盘与营收统计
"""
from typing import List, Optional, Tuple
from datetime import date, timedelta
from sqlalchemy.orm import Session
from hotelmaster.models.ontology import RoomStatus
from hotelmaster.services.room_service import RoomService
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.services.customer_service import CustomerService


def month_bounds(day: date) -> Tuple[date, date]:
    """所在月份的第一天与最后一天"""
    first = day.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)


def shift_months(day: date, months: int) -> date:
    """按月平移，返回目标月份的第一天"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class ReportService:
    """报表服务"""

    def __init__(self, db: Session):
        self.db = db
        self.rooms = RoomService(db)
        self.reservations = ReservationService(db)
        self.customers = CustomerService(db)

    def get_dashboard_stats(self, today: Optional[date] = None) -> dict:
        """获取仪表盘统计数据"""
        today = today or date.today()

        # 房间统计
        total_rooms = self.rooms.count_rooms()
        occupied = self.rooms.count_rooms(status=RoomStatus.OCCUPIED)
        available = self.rooms.count_rooms(status=RoomStatus.AVAILABLE)

        # 今日入住/退房
        today_checkins = self.reservations.today_check_ins()
        today_checkouts = self.reservations.today_check_outs()
        upcoming = self.reservations.upcoming(7)

        # 本月营收
        month_start, month_end = month_bounds(today)
        monthly = self.reservations.revenue_stats(month_start, month_end)
        labels, values = self.get_monthly_revenue(today)

        return {
            'rooms': {
                'total': total_rooms,
                'occupied': occupied,
                'available': available,
                'occupancy_rate': self.rooms.occupancy_rate(),
            },
            'reservations': {
                'today_checkins': len(today_checkins),
                'today_checkouts': len(today_checkouts),
                'upcoming_7_days': len(upcoming),
            },
            'revenue': {
                'this_month': monthly['total_revenue'],
                'total_reservations': monthly['total_reservations'],
                'average_price': monthly['avg_price'],
                'monthly_labels': labels,
                'monthly_values': values,
            },
            'customers': {
                'total': self.customers.count_customers(),
            },
            'upcoming_checkins': [ReservationService.to_detail(r) for r in today_checkins[:5]],
            'upcoming_checkouts': [ReservationService.to_detail(r) for r in today_checkouts[:5]],
        }

    def get_monthly_revenue(self, today: Optional[date] = None,
                            months: int = 12) -> Tuple[List[str], List[int]]:
        """最近 N 个月营收（含本月），标签为 YYYY-MM，金额取整"""
        today = today or date.today()
        labels: List[str] = []
        values: List[int] = []

        for offset in range(months - 1, -1, -1):
            month_start, month_end = month_bounds(shift_months(today, -offset))
            stats = self.reservations.revenue_stats(month_start, month_end)
            labels.append(month_start.strftime('%Y-%m'))
            values.append(int(stats['total_revenue']))

        return labels, values

    def get_revenue_report(self, date_from: date, date_to: date) -> dict:
        """区间营收统计"""
        stats = self.reservations.revenue_stats(date_from, date_to)
        return {
            'from': date_from,
            'to': date_to,
            **stats,
        }
