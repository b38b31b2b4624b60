"""Immutable parameter dataclass for the publish command."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from socials_publisher.config import PublisherSettings


@dataclass(frozen=True)
class PublishParams:
    """Immutable parameters for a batch publish."""

    batch_file: Path
    continue_on_fail: bool
    concurrency: int
    api_version: str
    node: Optional[str]
    dry_run: bool
    output: Optional[Path]

    @classmethod
    def from_cli(
        cls,
        batch_file: Path,
        settings: PublisherSettings,
        continue_on_fail: Optional[bool] = None,
        concurrency: Optional[int] = None,
        api_version: Optional[str] = None,
        node: Optional[str] = None,
        dry_run: bool = False,
        output: Optional[Path] = None,
    ) -> "PublishParams":
        """Create from CLI arguments, falling back to settings for unset options."""
        return cls(
            batch_file=batch_file,
            continue_on_fail=settings.continue_on_fail if continue_on_fail is None else continue_on_fail,
            concurrency=settings.concurrency if concurrency is None else concurrency,
            api_version=api_version or settings.api_version,
            node=node or settings.user_id or None,
            dry_run=dry_run,
            output=output,
        )
