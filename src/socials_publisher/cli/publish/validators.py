"""Publish-specific validators."""

from __future__ import annotations

from socials_publisher.config import PublisherSettings

from ..core.types import Failure, Result, Success
from .params import PublishParams


def validate_publish_params(params: PublishParams, settings: PublisherSettings) -> Result[PublishParams]:
    """Validate all publish parameters.

    Returns Result with params if valid, or Failure with error.
    """
    if not params.batch_file.exists():
        return Failure(
            f"Batch file not found: {params.batch_file}",
            {"hint": "Pass a YAML or JSON file containing a list of items"},
        )

    if params.concurrency < 1:
        return Failure(
            f"Invalid concurrency: {params.concurrency}",
            {"hint": "Concurrency must be at least 1"},
        )

    if params.output is not None and params.output.is_dir():
        return Failure(
            f"Output path is a directory: {params.output}",
            {"hint": "Pass a file path for the results JSON"},
        )

    # Skip credential validation for dry run
    if params.dry_run:
        return Success(params)

    is_valid, message = settings.check_credentials()
    if not is_valid:
        return Failure(message, {"hint": "Set INSTAGRAM_ACCESS_TOKEN in the environment or .env"})

    return Success(params)
