"""Unified settings for maildrop."""

import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(base_dir: Path) -> str:
    """Get version from git tags or fallback to package metadata."""
    try:
        import git

        repo = git.Repo(base_dir, search_parent_directories=True)
        latest_tag = max(repo.tags, key=lambda t: t.commit.committed_datetime, default=None)
        return str(latest_tag) if latest_tag else "0.0.0"
    except Exception:
        try:
            import importlib.metadata

            return importlib.metadata.version("maildrop")
        except Exception:
            return "0.0.0"


class Settings(BaseSettings):
    """Unified settings for the maildrop service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "maildrop")
    API_VERSION: ClassVar[str] = get_version(BASE_DIR)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Inbound trigger
    INBOUND_PATH: str = "/inbound"
    API_KEY: SecretStr = SecretStr("")

    # Object store
    BUCKET: str = ""
    ATTACHMENTS_PREFIX: str = ""
    AWS_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: str | None = None

    @property
    def s3_config(self) -> dict:
        """boto3 client kwargs for the attachment bucket."""
        config: dict = {"region_name": self.AWS_REGION}
        if self.S3_ENDPOINT_URL:
            config["endpoint_url"] = self.S3_ENDPOINT_URL
        return config

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
