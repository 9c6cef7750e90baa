"""
Status reporting for the ring overlay.

A StatusReport describes the current health of one monitored condition
(transform availability, resolution bound, ...). Reports are re-emitted every
time their condition is evaluated; StatusBoard keeps the latest one per
category and only logs transitions.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

CATEGORY_TRANSFORM = "Transform"
CATEGORY_RESOLUTION = "Resolution"
CATEGORY_CONFIGURATION = "Configuration"
CATEGORY_GEOMETRY = "Geometry"


class StatusLevel(Enum):
    """Status severity, ordered OK < WARN < ERROR."""
    OK = 0
    WARN = 1
    ERROR = 2


@dataclass(frozen=True)
class StatusReport:
    category: str
    level: StatusLevel
    message: str

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'level': self.level.name.lower(),
            'message': self.message,
        }


StatusCallback = Callable[[StatusReport], None]


class StatusBoard:
    """
    Status reporting sink exposed to the host.

    Every report() call is forwarded to the registered callbacks; the host
    decides how to surface it. Transitions are logged once (warning/error on
    degradation, info on recovery), repeats only at debug level.
    """

    def __init__(self, callback: Optional[StatusCallback] = None):
        self._reports: Dict[str, StatusReport] = {}
        self._callbacks: List[StatusCallback] = []
        if callback is not None:
            self._callbacks.append(callback)

    def add_callback(self, callback: StatusCallback) -> None:
        self._callbacks.append(callback)

    def report(self, category: str, level: StatusLevel, message: str) -> StatusReport:
        """Record and forward a status report. Returns the report."""
        report = StatusReport(category, level, message)
        previous = self._reports.get(category)
        self._reports[category] = report

        if previous == report:
            logger.debug(f"[{category}] {level.name}: {message} (repeated)")
        elif level is StatusLevel.ERROR:
            logger.error(f"[{category}] {message}")
        elif level is StatusLevel.WARN:
            logger.warning(f"[{category}] {message}")
        elif previous is not None and previous.level is not StatusLevel.OK:
            logger.info(f"[{category}] recovered: {message}")
        else:
            logger.debug(f"[{category}] OK: {message}")

        for callback in self._callbacks:
            callback(report)
        return report

    def get(self, category: str) -> Optional[StatusReport]:
        return self._reports.get(category)

    def level(self) -> StatusLevel:
        """Worst level across all categories (OK if nothing reported)."""
        if not self._reports:
            return StatusLevel.OK
        return max((r.level for r in self._reports.values()), key=lambda lvl: lvl.value)

    def snapshot(self) -> Dict[str, StatusReport]:
        return dict(self._reports)
