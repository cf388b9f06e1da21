"""
hotelmaster/domain/reservation.py

Reservation 领域规则 - 状态机、日期区间与价格计算
不依赖数据库会话，服务层和测试都可以直接调用
"""
from typing import Union
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging

from hotelmaster.engine.state_machine import StateMachine, StateMachineConfig, StateTransition
from hotelmaster.exceptions import ValidationError, StateError

logger = logging.getLogger(__name__)


# ============== 状态定义 ==============

class ReservationState:
    """预订状态"""
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class ReservationTrigger:
    """预订状态触发动作"""
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"


# ============== 状态机配置 ==============

reservation_state_machine = StateMachine(
    config=StateMachineConfig(
        name="Reservation",
        states=[
            ReservationState.CONFIRMED,
            ReservationState.CHECKED_IN,
            ReservationState.CHECKED_OUT,
            ReservationState.CANCELLED,
        ],
        transitions=[
            StateTransition(
                from_state=ReservationState.CONFIRMED,
                to_state=ReservationState.CHECKED_IN,
                trigger=ReservationTrigger.CHECK_IN,
            ),
            StateTransition(
                from_state=ReservationState.CHECKED_IN,
                to_state=ReservationState.CHECKED_OUT,
                trigger=ReservationTrigger.CHECK_OUT,
            ),
            StateTransition(
                from_state=ReservationState.CONFIRMED,
                to_state=ReservationState.CANCELLED,
                trigger=ReservationTrigger.CANCEL,
            ),
            # 已入住的预订也可以取消，取消时释放房间
            StateTransition(
                from_state=ReservationState.CHECKED_IN,
                to_state=ReservationState.CANCELLED,
                trigger=ReservationTrigger.CANCEL,
            ),
        ],
        initial_state=ReservationState.CONFIRMED,
        terminal_states={ReservationState.CHECKED_OUT, ReservationState.CANCELLED},
    )
)

_TRANSITION_ERRORS = {
    ReservationTrigger.CHECK_IN: "只有已确认的预订可以办理入住",
    ReservationTrigger.CHECK_OUT: "只有已入住的预订可以办理退房",
    ReservationTrigger.CANCEL: "已退房或已取消的预订不能再取消",
}


def _state_value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)


def next_status(current_status, trigger: str) -> str:
    """
    计算触发动作后的目标状态

    Raises:
        StateError: 当前状态不允许该动作
    """
    current = _state_value(current_status)
    target = reservation_state_machine.next_state(current, trigger)
    if target is None:
        raise StateError(f"{_TRANSITION_ERRORS.get(trigger, '非法的状态转换')}（当前状态: {current}）")
    return target


def is_terminal_status(status) -> bool:
    """已退房 / 已取消为终态"""
    return reservation_state_machine.is_terminal(_state_value(status))


# ============== 日期区间 ==============

def parse_date(value: Union[str, date, datetime, None], field_name: str) -> date:
    """解析 Y-m-d 日期（接口层传入 ISO 字符串）"""
    if value is None or value == "":
        raise ValidationError(f"{field_name} 不能为空")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} 日期格式应为 YYYY-MM-DD: {value}")


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    半开区间 [start, end) 是否重叠

    离店当天不占用房间：a_end == b_start 不算重叠。
    """
    return not (a_end <= b_start or a_start >= b_end)


def calculate_nights(check_in: date, check_out: date) -> int:
    """入住晚数"""
    return (check_out - check_in).days


def validate_stay_dates(check_in: date, check_out: date) -> int:
    """
    校验离店日期晚于入住日期

    Returns:
        入住晚数
    """
    nights = calculate_nights(check_in, check_out)
    if nights <= 0:
        raise ValidationError("离店日期必须晚于入住日期")
    return nights


def validate_guest_count(number_of_guests, capacity: int) -> int:
    """入住人数必须在 1 到房间容量之间，返回整数人数"""
    try:
        guests = int(number_of_guests)
    except (TypeError, ValueError):
        raise ValidationError(f"入住人数必须是整数: {number_of_guests}")
    if guests < 1:
        raise ValidationError("入住人数至少为 1")
    if capacity is not None and guests > int(capacity):
        raise ValidationError(f"入住人数 {guests} 超过房间容量 {capacity}")
    return guests


def parse_amount(value, field_name: str) -> Decimal:
    """解析非负金额，保留两位小数"""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field_name}格式不正确: {value}")
    if not amount.is_finite():
        raise ValidationError(f"{field_name}格式不正确: {value}")
    if amount < 0:
        raise ValidationError(f"{field_name}不能为负数")
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def calculate_total_price(price_per_night, check_in: date, check_out: date) -> Decimal:
    """总价 = 晚数 × 每晚价格，保留两位小数"""
    nights = calculate_nights(check_in, check_out)
    price = Decimal(str(price_per_night or 0))
    return (price * nights).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


__all__ = [
    "ReservationState",
    "ReservationTrigger",
    "reservation_state_machine",
    "next_status",
    "is_terminal_status",
    "parse_date",
    "intervals_overlap",
    "calculate_nights",
    "validate_stay_dates",
    "validate_guest_count",
    "parse_amount",
    "calculate_total_price",
]
