"""
🏗️ Service Layer - Base Service Interface
==========================================

Services wrap the spawn engine for callers: engine errors come back as a
``ServiceResult`` carrying a stable ``error_code`` instead of being raised.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from ..core.errors import SchedulingError
from ..utils.validation import ValidationError


@dataclass
class ServiceResult:
    """Outcome of a service call; routes turn it into the JSON envelope."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error_code: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class BaseService(ABC):
    """Shared result helpers and health reporting for services."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"service.{name}")
        self._initialized = False

    def initialize(self) -> ServiceResult:
        self._initialized = True
        self.logger.info(f"🔧 {self.name} service ready")
        return self._success_result(message=f"{self.name} service ready")

    def is_initialized(self) -> bool:
        return self._initialized

    def health_check(self) -> ServiceResult:
        if not self._initialized:
            return self._error_result(f"{self.name} service not initialized", error_code="NOT_INITIALIZED")
        return self._success_result(data={"status": "healthy", "service": self.name})

    def _success_result(self, data: Any = None, message: Optional[str] = None) -> ServiceResult:
        return ServiceResult(success=True, data=data, message=message)

    def _error_result(self, message: str, error_code: str, data: Any = None) -> ServiceResult:
        return ServiceResult(success=False, data=data, message=message, error_code=error_code)

    def _not_found(self, kind: str, key: str) -> ServiceResult:
        return self._error_result(f"{kind} {key} not found", error_code="not_found")

    def _invalid_input(self, error: ValidationError) -> ServiceResult:
        """Payload rejected; the offending field doubles as error code."""
        return self._error_result(f"Invalid {error.field_name}: {error.message}", error_code=error.field_name)

    def _scheduling_failed(self, error: SchedulingError, alarm_key: Optional[str] = None) -> ServiceResult:
        self.logger.warning("Alarm %s could not be scheduled: %s", alarm_key, error)
        return self._error_result(str(error), error_code=error.error_code)

    def _handle_error(self, error: Exception, operation: str) -> ServiceResult:
        """Unexpected failure: log with traceback, report OPERATION_FAILED."""
        error_msg = f"Error in {self.name}.{operation}: {error}"
        self.logger.error(error_msg, exc_info=True)
        return self._error_result(error_msg, error_code="OPERATION_FAILED")
