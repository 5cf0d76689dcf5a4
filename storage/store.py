"""Persistence for the output document and the source registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from core import verbose
from schemas.output import OutputDocument, OutputMeta
from schemas.posting import DatedPosting
from schemas.registry import SourceRegistry
from storage.files import read_data_file, write_data_file

logger = structlog.get_logger(__name__)


class RunStore(ABC):
    """Abstract base for run state storage."""

    @abstractmethod
    def load_output(self) -> OutputDocument | None:
        """Load the previous run's output, or None if there is none."""

    @abstractmethod
    def save_output(self, document: OutputDocument) -> None:
        """Persist this run's output."""

    @abstractmethod
    def load_registry(self) -> SourceRegistry:
        """Load the source registry. Never fails."""

    @abstractmethod
    def save_registry(self, registry: SourceRegistry) -> None:
        """Persist the updated source registry."""


class FileRunStore(RunStore):
    """Output document and registry stored as two data files.

    The format of each file follows its extension (.json, .yml, .yaml).
    """

    def __init__(self, output_path: str | Path, registry_path: str | Path) -> None:
        self.output_path = Path(output_path)
        self.registry_path = Path(registry_path)

    def load_output(self) -> OutputDocument | None:
        """Load prior output, skipping any posting that no longer validates."""
        raw = read_data_file(self.output_path, None)
        if not isinstance(raw, dict):
            return None

        try:
            meta = OutputMeta.model_validate(raw.get("meta") or {})
        except ValidationError:
            meta = OutputMeta()

        document = OutputDocument(
            profile_id=str(raw.get("profile_id") or ""),
            profile_name=str(raw.get("profile_name") or ""),
            generated_at=str(raw.get("generated_at") or ""),
            buckets=self._load_sections(raw.get("buckets")),
            archive=self._load_sections(raw.get("archive")),
            meta=meta,
        )
        verbose.detail(f"Loaded prior output ← {self.output_path}")
        return document

    def _load_sections(self, sections: Any) -> dict[str, list[DatedPosting]]:
        if not isinstance(sections, dict):
            return {}
        out: dict[str, list[DatedPosting]] = {}
        for bucket_id, items in sections.items():
            postings = []
            for item in items if isinstance(items, list) else []:
                try:
                    postings.append(DatedPosting.model_validate(item))
                except ValidationError as e:
                    logger.warning(
                        "skipping invalid prior posting",
                        bucket=bucket_id,
                        errors=e.error_count(),
                    )
            out[str(bucket_id)] = postings
        return out

    def save_output(self, document: OutputDocument) -> None:
        write_data_file(self.output_path, document.model_dump(mode="json"))
        verbose.detail(f"Saved output → {self.output_path}")

    def load_registry(self) -> SourceRegistry:
        raw = read_data_file(self.registry_path, {})
        try:
            return SourceRegistry.model_validate(raw if isinstance(raw, dict) else {})
        except ValidationError as e:
            logger.warning("registry invalid, starting fresh", path=str(self.registry_path), errors=e.error_count())
            return SourceRegistry()

    def save_registry(self, registry: SourceRegistry) -> None:
        write_data_file(self.registry_path, registry.model_dump(mode="json"))
        verbose.detail(f"Saved registry → {self.registry_path}")
