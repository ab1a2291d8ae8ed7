"""UI adapters: control mapping, debouncing, and the interactive session."""

from .controls import (
    ControlState,
    SliderHandle,
    SliderScales,
    move_slider,
    set_flag,
    to_control_state,
    to_filter_configuration,
)
from .debounce import Debouncer
from .session import ViewSession

__all__ = [
    "ControlState",
    "Debouncer",
    "SliderHandle",
    "SliderScales",
    "ViewSession",
    "move_slider",
    "set_flag",
    "to_control_state",
    "to_filter_configuration",
]
