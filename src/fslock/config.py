"""Configuration management for fslock."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, model_validator

from .constants import (
    DEFAULT_LIVIDITY_TIMEOUT,
    DEFAULT_READ_RETRIES,
    DEFAULT_READ_RETRY_TIMEOUT,
    DEFAULT_WAIT_DELAY,
    HEARTBEAT_FACTOR,
)


class LockConfig(BaseModel):
    """Timing configuration for a lock handle (all durations in seconds)."""

    wait_delay: float = Field(
        default=DEFAULT_WAIT_DELAY, gt=0, description="Delay between acquisition attempts"
    )
    lividity_timeout: float = Field(
        default=DEFAULT_LIVIDITY_TIMEOUT,
        gt=0,
        description="Max liveness marker age before the holder is presumed dead",
    )
    read_retry_timeout: float = Field(
        default=DEFAULT_READ_RETRY_TIMEOUT,
        ge=0,
        description="Pause between liveness marker lookups",
    )
    read_retries: int = Field(
        default=DEFAULT_READ_RETRIES, ge=1, description="Liveness marker lookup attempts"
    )

    @property
    def heartbeat_interval(self) -> float:
        """Interval at which a holder refreshes its liveness marker."""
        return HEARTBEAT_FACTOR * self.wait_delay

    @model_validator(mode="after")
    def _check_heartbeat_fits(self) -> "LockConfig":
        # Otherwise every holder would look dead between heartbeats
        if self.heartbeat_interval >= self.lividity_timeout:
            raise ValueError(
                f"lividity_timeout ({self.lividity_timeout}s) must exceed the heartbeat "
                f"interval ({self.heartbeat_interval}s = {HEARTBEAT_FACTOR} x wait_delay)"
            )
        return self


class FSLockConfig(BaseModel):
    """Root configuration for fslock."""

    lock: LockConfig = Field(default_factory=LockConfig)


def load_config(config_path: Path) -> FSLockConfig:
    """Load config from a TOML file.

    Args:
        config_path: Path to the config file

    Returns:
        Loaded configuration, or defaults if the file doesn't exist
    """
    if not config_path.exists():
        return FSLockConfig()
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return FSLockConfig.model_validate(data)


def write_config_template(config_path: Path) -> Path:
    """Write default config template.

    Args:
        config_path: Destination file

    Returns:
        Path to the written config file
    """
    template = {
        "lock": {
            "wait_delay": DEFAULT_WAIT_DELAY,
            "lividity_timeout": DEFAULT_LIVIDITY_TIMEOUT,
            "read_retry_timeout": DEFAULT_READ_RETRY_TIMEOUT,
            "read_retries": DEFAULT_READ_RETRIES,
        },
    }
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
