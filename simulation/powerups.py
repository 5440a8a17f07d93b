"""Timed power-up flags with expiry pulled by the tick."""

from simulation.entities import PowerUpType


class PowerUpController:
    """Tracks which power-up types are active and when each one expires.

    Activation stores an absolute expiry; ``update`` is called from the tick and
    switches off every type whose expiry has passed. Types are independent: a
    repeat pickup only restarts its own timer.
    """

    def __init__(self):
        self._expires_at = {}

    def activate(self, type, duration_ms, now_ms):
        was_active = type in self._expires_at
        self._expires_at[type] = now_ms + duration_ms
        return not was_active

    def update(self, now_ms):
        """Deactivate expired types; returns them in enum order."""
        expired = [t for t in PowerUpType if t in self._expires_at and self._expires_at[t] <= now_ms]
        for power_up_type in expired:
            del self._expires_at[power_up_type]
        return expired

    def is_active(self, type):
        return type in self._expires_at

    @property
    def time_slow(self):
        return self.is_active(PowerUpType.TIME_SLOW)

    @property
    def magnet(self):
        return self.is_active(PowerUpType.MAGNET)

    @property
    def shield(self):
        return self.is_active(PowerUpType.SHIELD)

    @property
    def multiplier(self):
        return self.is_active(PowerUpType.MULTIPLIER)

    def active_types(self):
        return [t for t in PowerUpType if t in self._expires_at]

    def remaining_ms(self, now_ms):
        return {t.key: max(0.0, self._expires_at[t] - now_ms) for t in self.active_types()}

    def flags(self):
        return {t.key: t in self._expires_at for t in PowerUpType}

    def reset(self):
        self._expires_at.clear()
