from stew.core.time.abc import Time
from stew.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
