"""
ObjectId and ObjectIdGenerator - 12 byte time-ordered document identifiers.
"""

import os
import re
import secrets
import threading
import time
from datetime import datetime, timezone

from docstore.models.exceptions import InvalidIdentifierError


class ObjectId:
    """
    Immutable 12 byte identifier.

    Layout: [timestamp:4][salt:5][counter:3], all big-endian.
    Rendered as 24 lowercase hex characters, which is also the
    document's file name stem on disk.
    """

    SIZE = 12
    HEX_LENGTH = SIZE * 2
    PATTERN = re.compile(r"^[0-9a-f]{24}$")

    __slots__ = ("_bytes",)

    def __init__(self, raw: bytes) -> None:
        if len(raw) != self.SIZE:
            raise InvalidIdentifierError(raw, f"must be exactly {self.SIZE} bytes")
        self._bytes = bytes(raw)

    @classmethod
    def validate(cls, value: object) -> str:
        """
        Check that value is a well-formed id string.

        Returns:
            The value unchanged.

        Raises:
            InvalidIdentifierError: If value is not 24 lowercase hex characters.
        """
        if not isinstance(value, str):
            raise InvalidIdentifierError(value, "must be a string")
        if len(value) != cls.HEX_LENGTH:
            raise InvalidIdentifierError(
                value, f"must be exactly {cls.HEX_LENGTH} characters long"
            )
        if not cls.PATTERN.match(value):
            raise InvalidIdentifierError(value, "must be a lowercase hexadecimal string")
        return value

    @classmethod
    def is_valid(cls, value: object) -> bool:
        try:
            cls.validate(value)
        except InvalidIdentifierError:
            return False
        return True

    @classmethod
    def from_str(cls, value: str) -> "ObjectId":
        return cls(bytes.fromhex(cls.validate(value)))

    @property
    def timestamp(self) -> datetime:
        """Creation second encoded in the leading 4 bytes (UTC)."""
        seconds = int.from_bytes(self._bytes[:4], "big")
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    @property
    def counter(self) -> int:
        return int.from_bytes(self._bytes[9:], "big")

    def __bytes__(self) -> bytes:
        return self._bytes

    def __str__(self) -> str:
        return self._bytes.hex()

    def __repr__(self) -> str:
        return f'{type(self).__name__}("{self}")'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObjectId):
            return self._bytes == other._bytes
        return NotImplemented

    def __lt__(self, other: "ObjectId") -> bool:
        if isinstance(other, ObjectId):
            return self._bytes < other._bytes
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._bytes)


def timestamp_of(value: str) -> datetime:
    """Decode the creation time of an id string."""
    return ObjectId.from_str(value).timestamp


class ObjectIdGenerator:
    """
    Produces ObjectIds from a fixed random salt and a wrapping counter.

    One generator is meant to live for the whole process and be handed to
    every collection, so ids generated in one process share the salt and
    never repeat a (timestamp, counter) pair until the counter wraps.
    """

    SALT_SIZE = 5
    COUNTER_MODULUS = 1 << 24

    def __init__(self, salt: bytes | None = None, counter_start: int | None = None) -> None:
        """
        Initialize the generator.

        Args:
            salt: 5 byte process-unique value (random if omitted).
            counter_start: Initial counter value (random if omitted).
        """
        if salt is None:
            salt = os.urandom(self.SALT_SIZE)
        if len(salt) != self.SALT_SIZE:
            raise ValueError(f"salt must be {self.SALT_SIZE} bytes, got {len(salt)}")
        if counter_start is None:
            counter_start = secrets.randbelow(self.COUNTER_MODULUS)

        self._salt = bytes(salt)
        self._counter = counter_start % self.COUNTER_MODULUS
        self._lock = threading.Lock()

    @property
    def salt(self) -> bytes:
        return self._salt

    def _next_counter(self) -> int:
        with self._lock:
            self._counter = (self._counter + 1) % self.COUNTER_MODULUS
            return self._counter

    def generate(self, now: float | None = None) -> ObjectId:
        """
        Generate a fresh ObjectId.

        Args:
            now: Unix time to embed (defaults to the current time).
        """
        seconds = int(time.time() if now is None else now) & 0xFFFFFFFF
        counter = self._next_counter()
        return ObjectId(
            seconds.to_bytes(4, "big") + self._salt + counter.to_bytes(3, "big")
        )

    def generate_str(self) -> str:
        return str(self.generate())


# Process-wide default, passed explicitly to collections by the client
default_generator = ObjectIdGenerator()
