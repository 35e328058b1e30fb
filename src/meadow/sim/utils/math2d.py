from __future__ import annotations

from pygame.math import Vector2


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _clamp_unit(value: float) -> float:
    return _clamp_value(value, 0.0, 1.0)


def _clamp_components(vector: Vector2, limit: float) -> None:
    vector.update(_clamp_value(vector.x, -limit, limit), _clamp_value(vector.y, -limit, limit))
