"""Unit tests for publish params and validators."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent / "src"))

from socials_publisher.cli.core.types import Failure, Success
from socials_publisher.cli.publish.params import PublishParams
from socials_publisher.cli.publish.validators import validate_publish_params
from socials_publisher.config import PublisherSettings


@pytest.fixture
def settings() -> PublisherSettings:
    """Settings with credentials and no .env lookup."""
    return PublisherSettings(
        _env_file=None,
        access_token="token",
        user_id="1784",
        api_version="v21.0",
        continue_on_fail=True,
        concurrency=3,
    )


@pytest.fixture
def batch_file(tmp_path: Path) -> Path:
    path = tmp_path / "batch.yaml"
    path.write_text("- resource: image\n  image_url: https://x/a.jpg\n")
    return path


class TestPublishParamsFromCli:
    """Tests for PublishParams.from_cli."""

    def test_falls_back_to_settings(self, batch_file: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings)

        assert params.continue_on_fail is True
        assert params.concurrency == 3
        assert params.api_version == "v21.0"
        assert params.node == "1784"
        assert params.dry_run is False
        assert params.output is None

    def test_cli_values_override_settings(self, batch_file: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(
            batch_file=batch_file,
            settings=settings,
            continue_on_fail=False,
            concurrency=1,
            api_version="v22.0",
            node="999",
        )

        assert params.continue_on_fail is False
        assert params.concurrency == 1
        assert params.api_version == "v22.0"
        assert params.node == "999"

    def test_params_are_immutable(self, batch_file: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings)
        with pytest.raises(AttributeError):
            params.concurrency = 5


class TestValidatePublishParams:
    """Tests for validate_publish_params."""

    def test_valid(self, batch_file: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings)
        assert isinstance(validate_publish_params(params, settings), Success)

    def test_missing_batch_file(self, tmp_path: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=tmp_path / "nope.yaml", settings=settings)
        result = validate_publish_params(params, settings)
        assert isinstance(result, Failure)
        assert "not found" in result.error

    def test_bad_concurrency(self, batch_file: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings, concurrency=0)
        result = validate_publish_params(params, settings)
        assert isinstance(result, Failure)
        assert "concurrency" in result.error

    def test_output_directory_rejected(self, batch_file: Path, tmp_path: Path, settings: PublisherSettings):
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings, output=tmp_path)
        assert isinstance(validate_publish_params(params, settings), Failure)

    def test_missing_token(self, batch_file: Path):
        settings = PublisherSettings(_env_file=None, access_token="")
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings)
        result = validate_publish_params(params, settings)
        assert isinstance(result, Failure)
        assert "access_token" in result.error

    def test_dry_run_skips_credentials(self, batch_file: Path):
        settings = PublisherSettings(_env_file=None, access_token="")
        params = PublishParams.from_cli(batch_file=batch_file, settings=settings, dry_run=True)
        assert isinstance(validate_publish_params(params, settings), Success)
