"""Run context and lifecycle management."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.config import Settings
from core.ids import generate_run_id


class RunStatus(str, Enum):
    """Status of a pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunMetrics(BaseModel):
    """Metrics collected during a run."""

    num_fetch_tasks: int = 0
    num_tasks_completed: int = 0
    num_tasks_abandoned: int = 0
    num_postings_fetched: int = 0
    num_postings_kept: int = 0
    num_postings_archived: int = 0
    num_probe_candidates: int = 0
    num_sources_discovered: int = 0
    fetch_timed_out: bool = False


class StageLog(BaseModel):
    """Log entry for a pipeline stage."""

    stage: str
    started_at: datetime
    completed_at: datetime | None = None
    status: str = "running"
    items_in: int = 0
    items_out: int = 0
    errors: list[str] = Field(default_factory=list)
    duration_seconds: float | None = None


class RunContext(BaseModel):
    """Context for a pipeline run - travels through all stages."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    run_id: str
    started_at: datetime
    status: RunStatus = RunStatus.PENDING
    completed_at: datetime | None = None

    settings: Settings

    metrics: RunMetrics = Field(default_factory=RunMetrics)
    stage_logs: list[StageLog] = Field(default_factory=list)

    # Set once the run has written its artifacts
    output_path: str | None = None
    registry_path: str | None = None

    @classmethod
    def boot(
        cls,
        settings: Settings,
        run_id: str | None = None,
        started_at: datetime | None = None,
    ) -> RunContext:
        """Boot a new run context."""
        return cls(
            run_id=run_id or generate_run_id(),
            started_at=started_at or datetime.now(timezone.utc),
            status=RunStatus.RUNNING,
            settings=settings,
        )

    def start_stage(self, stage: str, items_in: int = 0) -> StageLog:
        """Record start of a stage."""
        log = StageLog(
            stage=stage,
            started_at=datetime.now(timezone.utc),
            items_in=items_in,
        )
        self.stage_logs.append(log)
        return log

    def complete_stage(
        self,
        stage: str,
        items_out: int = 0,
        errors: list[str] | None = None,
        status: str = "completed",
    ) -> StageLog | None:
        """Record completion of a stage."""
        for log in self.stage_logs:
            if log.stage == stage and log.completed_at is None:
                log.completed_at = datetime.now(timezone.utc)
                log.items_out = items_out
                log.status = status
                if errors:
                    log.errors = errors
                log.duration_seconds = (
                    log.completed_at - log.started_at
                ).total_seconds()
                return log
        return None

    def stage_timings_ms(self) -> dict[str, int]:
        """Whole-millisecond durations of the stages completed so far."""
        return {
            log.stage: int(log.duration_seconds * 1000)
            for log in self.stage_logs
            if log.duration_seconds is not None
        }

    def complete_run(self, status: RunStatus = RunStatus.COMPLETED) -> None:
        """Mark the run as complete."""
        self.status = status
        self.completed_at = datetime.now(timezone.utc)

    def summary(self) -> dict[str, Any]:
        """Get a summary of the run for display."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "output_path": self.output_path,
            "registry_path": self.registry_path,
            "metrics": self.metrics.model_dump(),
            "stages": [
                {
                    "stage": log.stage,
                    "status": log.status,
                    "items_in": log.items_in,
                    "items_out": log.items_out,
                    "duration": log.duration_seconds,
                    "errors": len(log.errors),
                }
                for log in self.stage_logs
            ],
        }
