"""Threshold alerts over sensor readings."""

from __future__ import annotations

import enum
import math
import re
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

DEFAULT_COOLDOWN = 30.0

_UNSIGNED = re.compile(r"\+?[0-9]+")


class _Reading(Protocol):
    label: str
    current: float
    unit: Any


class AlertDirection(enum.Enum):
    """Whether an alert fires above or below its threshold."""

    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class AlertRule:
    """A sensor pattern with a threshold, direction and cooldown in seconds."""

    sensor_pattern: str
    threshold: float
    direction: AlertDirection
    cooldown: float = DEFAULT_COOLDOWN

    def is_triggered(self, value: float) -> bool:
        """Whether a value crosses this rule's threshold."""
        if self.direction is AlertDirection.ABOVE:
            return value > self.threshold
        return value < self.threshold


class AlertEngine:
    """Evaluates alert rules against readings, honouring per-rule cooldowns."""

    def __init__(self, rules: Iterable[AlertRule]) -> None:
        self.rules = list(rules)
        self._last_triggered: dict[str, float] = {}

    def check(self, readings: Mapping[Any, _Reading]) -> list[str]:
        """Return messages for alerts newly triggered by ``readings``.

        Keys are sensor ids whose string form is ``source/chip/sensor``.
        """
        messages = []
        now = time.monotonic()
        for rule in self.rules:
            for sensor_id, reading in readings.items():
                id_str = str(sensor_id)
                if not matches_pattern(id_str, rule.sensor_pattern):
                    continue
                if not rule.is_triggered(reading.current):
                    continue
                key = f"{rule.sensor_pattern}:{id_str}"
                last = self._last_triggered.get(key)
                if last is not None and now - last < rule.cooldown:
                    continue
                self._last_triggered[key] = now
                messages.append(
                    f"ALERT: {reading.label} = {reading.current:.1f} {reading.unit} "
                    f"({rule.direction.value} threshold {rule.threshold:.1f})"
                )
        return messages


def matches_pattern(sensor_id: str, pattern: str) -> bool:
    """Exact match, or prefix match when the pattern ends with ``*``."""
    if pattern.endswith("*"):
        return sensor_id.startswith(pattern[:-1])
    return sensor_id == pattern


def _parse_float(text: str) -> float:
    if not text.isascii() or "_" in text or not text:
        raise ValueError(f"invalid threshold: {text!r}")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"invalid threshold: {text!r}") from None
    if math.isnan(value):
        return math.nan
    return value


def parse_alert_rule(text: str) -> AlertRule:
    """Parse ``"pattern > threshold"`` or ``"pattern < threshold"``.

    An optional ``@<seconds>s`` suffix sets the cooldown (default 30 s).
    Raises ValueError on malformed input.
    """
    text = text.strip()
    cooldown = DEFAULT_COOLDOWN
    if "@" in text:
        before, _, after = text.rpartition("@")
        secs = after.strip()
        if secs.endswith("s"):
            secs = secs[:-1]
        if not _UNSIGNED.fullmatch(secs):
            raise ValueError(f"invalid cooldown: {after.strip()!r}")
        cooldown = float(int(secs))
        text = before.strip()

    if ">" in text:
        sensor, _, threshold = text.partition(">")
        direction = AlertDirection.ABOVE
    elif "<" in text:
        sensor, _, threshold = text.partition("<")
        direction = AlertDirection.BELOW
    else:
        raise ValueError(f"alert rule needs '>' or '<': {text!r}")

    return AlertRule(
        sensor_pattern=sensor.strip(),
        threshold=_parse_float(threshold.strip()),
        direction=direction,
        cooldown=cooldown,
    )