"""
hotelmaster/engine/state_machine.py

状态机引擎 - 声明式状态转换表

状态保存在数据库行里，每个请求都会重新读取，所以状态机本身不持有当前状态：
调用方传入当前状态和触发动作，引擎给出目标状态或拒绝。
"""
from typing import Dict, List, Optional, Set, Tuple
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
    """

    from_state: str
    to_state: str
    trigger: str


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str
    terminal_states: Set[str] = field(default_factory=set)


class StateMachine:
    """
    状态机引擎

    Example:
        >>> machine = StateMachine(
        ...     config=StateMachineConfig(
        ...         name="Reservation",
        ...         states=["confirmed", "checked_in", "checked_out"],
        ...         transitions=[StateTransition("confirmed", "checked_in", "check_in")],
        ...         initial_state="confirmed"
        ...     )
        ... )
        >>> machine.next_state("confirmed", "check_in")
        'checked_in'
    """

    def __init__(self, config: StateMachineConfig):
        for t in config.transitions:
            if t.from_state not in config.states or t.to_state not in config.states:
                raise ValueError(
                    f"{config.name}: 转换 {t.from_state} -> {t.to_state} 引用了未声明的状态"
                )
        if config.initial_state not in config.states:
            raise ValueError(f"{config.name}: 初始状态 {config.initial_state} 未声明")

        self._config = config
        # 转换映射: (from_state, trigger) -> to_state
        self._transition_map: Dict[Tuple[str, str], str] = {
            (t.from_state, t.trigger): t.to_state for t in config.transitions
        }

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def initial_state(self) -> str:
        return self._config.initial_state

    def next_state(self, current_state: str, trigger: str) -> Optional[str]:
        """
        查询触发动作在当前状态下的目标状态

        Returns:
            目标状态；当前状态不允许该动作时返回 None
        """
        return self._transition_map.get((current_state, trigger))

    def can_fire(self, current_state: str, trigger: str) -> bool:
        """检查当前状态是否允许该触发动作"""
        return (current_state, trigger) in self._transition_map

    def allowed_triggers(self, current_state: str) -> List[str]:
        """当前状态下可用的触发动作"""
        return sorted(
            trigger for (state, trigger) in self._transition_map if state == current_state
        )

    def is_terminal(self, state: str) -> bool:
        """终态：没有任何出边"""
        if state in self._config.terminal_states:
            return True
        return not self.allowed_triggers(state)

    def fire(self, current_state: str, trigger: str) -> str:
        """
        执行状态转换

        Raises:
            ValueError: 当前状态不允许该触发动作
        """
        target = self.next_state(current_state, trigger)
        if target is None:
            logger.warning(
                f"Invalid transition: {self.name} '{current_state}' (trigger: {trigger})"
            )
            raise ValueError(f"{self.name} 状态 {current_state} 不允许执行 {trigger}")
        logger.debug(f"State transition: {self.name} {current_state} -> {target} (trigger: {trigger})")
        return target


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
