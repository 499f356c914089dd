"""Health report contracts."""

from datetime import datetime
from typing import Optional

from griffin.api.contracts.common import CamelModel
from griffin.health import HealthReport


class DependencyModel(CamelModel):
    status: str
    response_time: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: dict[str, DependencyModel]

    @classmethod
    def from_report(cls, report: HealthReport) -> "HealthResponse":
        return cls(
            status=report.status,
            timestamp=report.timestamp,
            version=report.version,
            dependencies={
                name: DependencyModel(
                    status=dep.status,
                    response_time=dep.response_time,
                    error=dep.error,
                )
                for name, dep in report.dependencies.items()
            },
        )
