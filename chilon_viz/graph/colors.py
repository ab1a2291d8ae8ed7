"""Deterministic color assignment for edge labels."""
from __future__ import annotations

import math
from typing import Dict, Iterable, List, Sequence

DEFAULT_FREQUENCY = 2.4
DEFAULT_PHASES = (0.0, 2.0, 4.0)
DEFAULT_CENTER = 128.0
DEFAULT_WIDTH = 127.0


def _channel_hex(value: float) -> str:
    return f"{int(value) & 0xFF:02X}"


def color_gradient(
    count: int,
    *,
    frequency: float = DEFAULT_FREQUENCY,
    phases: Sequence[float] = DEFAULT_PHASES,
    center: float = DEFAULT_CENTER,
    width: float = DEFAULT_WIDTH,
) -> List[str]:
    """Return ``count`` hex colors sampled from out-of-phase sine waves."""

    red_phase, green_phase, blue_phase = phases
    colors: List[str] = []
    for index in range(count):
        red = math.sin(frequency * index + red_phase) * width + center
        green = math.sin(frequency * index + green_phase) * width + center
        blue = math.sin(frequency * index + blue_phase) * width + center
        colors.append("#" + _channel_hex(red) + _channel_hex(green) + _channel_hex(blue))
    return colors


def label_to_color(
    labels: Iterable[str],
    *,
    frequency: float = DEFAULT_FREQUENCY,
    phases: Sequence[float] = DEFAULT_PHASES,
    center: float = DEFAULT_CENTER,
    width: float = DEFAULT_WIDTH,
) -> Dict[str, str]:
    """Map each distinct label to a color.

    Labels are numbered in first-appearance order, so the same label sequence
    always yields the same mapping.
    """

    ordered: List[str] = []
    seen = set()
    for label in labels:
        if label in seen:
            continue
        seen.add(label)
        ordered.append(label)
    palette = color_gradient(len(ordered), frequency=frequency, phases=phases, center=center, width=width)
    return dict(zip(ordered, palette))
