"""Health check utilities for monitoring service health.

This module provides health check capabilities for CodeMentor:
- Check configuration validity
- Check that the LLM provider has credentials
- Generate health status reports
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from code_mentor.utils.logging import LogEventNames

if TYPE_CHECKING:
    from code_mentor.config.schema import MentorConfig

log = structlog.get_logger()


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Overall health report."""

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "details": c.details,
                }
                for c in self.checks
            ],
        }


class HealthChecker:
    """Performs health checks on the service configuration.

    A missing API key leaves the server usable (every model call fails
    with a clear message), so it is reported as unhealthy rather than
    preventing startup.

    Example:
        checker = HealthChecker(config)
        report = await checker.run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(self, config: MentorConfig) -> None:
        self._config = config

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks and return a report."""
        log.info(LogEventNames.HEALTH_CHECK_START)
        timestamp = datetime.now(UTC)

        results = await asyncio.gather(
            self._check_config(),
            self._check_llm_credentials(),
            return_exceptions=True,
        )

        checks: list[CheckResult] = []
        for result in results:
            if isinstance(result, BaseException):
                checks.append(
                    CheckResult(
                        name="unknown",
                        status=HealthStatus.UNHEALTHY,
                        message=f"Check failed with exception: {result}",
                    )
                )
            else:
                checks.append(result)

        if all(c.status == HealthStatus.HEALTHY for c in checks):
            status = HealthStatus.HEALTHY
        elif any(c.status == HealthStatus.UNHEALTHY for c in checks):
            status = HealthStatus.UNHEALTHY
        else:
            status = HealthStatus.DEGRADED

        report = HealthReport(
            healthy=status != HealthStatus.UNHEALTHY,
            status=status,
            timestamp=timestamp,
            checks=checks,
        )

        log.info(
            LogEventNames.HEALTH_CHECK_COMPLETE,
            healthy=report.healthy,
            status=status.value,
            checks_run=len(checks),
        )
        return report

    async def _check_config(self) -> CheckResult:
        """Check configuration validity."""
        uploads = self._config.uploads
        if not uploads.allowed_extensions:
            return CheckResult(
                name="config",
                status=HealthStatus.DEGRADED,
                message="No upload extensions allowed; file loading is disabled",
            )
        return CheckResult(
            name="config",
            status=HealthStatus.HEALTHY,
            message="Configuration valid",
            details={
                "llm_provider": self._config.llm.provider,
                "allowed_extensions": len(uploads.allowed_extensions),
            },
        )

    async def _check_llm_credentials(self) -> CheckResult:
        """Check that the LLM provider has an API key."""
        anthropic_config = self._config.llm.anthropic
        api_key = anthropic_config.api_key
        if not api_key or api_key.startswith("${"):
            return CheckResult(
                name="llm_provider",
                status=HealthStatus.UNHEALTHY,
                message="Anthropic API key not configured",
            )
        return CheckResult(
            name="llm_provider",
            status=HealthStatus.HEALTHY,
            message="Anthropic configured",
            details={"provider": "anthropic", "model": anthropic_config.model},
        )
