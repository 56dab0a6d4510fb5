"""Held record written inside a lock directory.

The record identifies the handle that owns the lock. It is stored as TOML
so it stays human-inspectable, e.g.::

    nonce = "4f0c..."
    pid = 4242
    message = "upgrading charms"
"""

import tomllib

import tomli_w
from pydantic import BaseModel, Field, ValidationError


class RecordDecodeError(ValueError):
    """Held record content could not be decoded."""


class HeldRecord(BaseModel):
    """Owner of a lock directory.

    Attributes:
        nonce: Token unique to the lock handle that took the lock.
        pid: Process ID of the holder.
        message: Free text supplied by the holder.
    """

    nonce: str = Field(min_length=1, description="Nonce of the holding handle")
    pid: int = Field(description="Process ID of the holder")
    message: str = Field(default="", description="Holder supplied message")

    def to_toml(self) -> str:
        """Serialize the record as TOML."""
        return tomli_w.dumps(self.model_dump())

    @classmethod
    def from_toml(cls, content: str) -> "HeldRecord":
        """Parse a record from TOML.

        Raises:
            RecordDecodeError: If the content is not a valid record
        """
        try:
            return cls.model_validate(tomllib.loads(content))
        except (tomllib.TOMLDecodeError, ValidationError) as e:
            raise RecordDecodeError(f"Invalid held record: {e}") from e
