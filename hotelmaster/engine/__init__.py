# 通用引擎
from hotelmaster.engine.state_machine import StateMachine, StateMachineConfig, StateTransition

__all__ = ['StateMachine', 'StateMachineConfig', 'StateTransition']
