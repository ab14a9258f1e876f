import struct
from datetime import datetime, timedelta, timezone
from typing import Type


LENGTH_FORMAT = '!I'
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)

# seconds since epoch, nanoseconds, UTC offset in minutes
TIMESTAMP_FORMAT = '!qIh'
TIMESTAMP_SIZE = struct.calcsize(TIMESTAMP_FORMAT)


def pack_bytes(data: bytes) -> bytes:
    return struct.pack(LENGTH_FORMAT, len(data)) + data


def pack_string(value: str) -> bytes:
    return pack_bytes(value.encode())


def pack_timestamp(value: datetime) -> bytes:
    if value.tzinfo is None:
        value = value.astimezone()
    offset = value.utcoffset()
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    delta = value - epoch
    seconds = delta.days * 86400 + delta.seconds
    nanoseconds = delta.microseconds * 1000
    return pack_bytes(struct.pack(
        TIMESTAMP_FORMAT, seconds, nanoseconds, int(offset.total_seconds()) // 60
    ))


class Reader:
    """
    Sequential reader over an encoded body.

    Any read past the end of the buffer raises ``error``; a partial record is
    corruption, never a recoverable condition.
    """

    def __init__(self, data: bytes, error: Type[Exception]):
        self.data = data
        self.offset = 0
        self.error = error

    def remaining(self) -> int:
        return len(self.data) - self.offset

    def read(self, size: int) -> bytes:
        if size > self.remaining():
            raise self.error(
                f"Truncated data at offset {self.offset}: "
                f"wanted {size} bytes, {self.remaining()} left"
            )
        chunk = self.data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def read_struct(self, fmt: str) -> tuple:
        return struct.unpack(fmt, self.read(struct.calcsize(fmt)))

    def read_bytes(self) -> bytes:
        length, = self.read_struct(LENGTH_FORMAT)
        return self.read(length)

    def read_string(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode()
        except UnicodeDecodeError as e:
            raise self.error(f"Invalid string at offset {self.offset - len(raw)}: {e}")

    def read_timestamp(self) -> datetime:
        raw = self.read_bytes()
        if len(raw) != TIMESTAMP_SIZE:
            raise self.error(f"Invalid timestamp length {len(raw)}")
        seconds, nanoseconds, offset_minutes = struct.unpack(TIMESTAMP_FORMAT, raw)
        try:
            tz = timezone(timedelta(minutes=offset_minutes))
            epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
            value = epoch + timedelta(seconds=seconds, microseconds=nanoseconds // 1000)
            return value.astimezone(tz)
        except (OverflowError, ValueError) as e:
            raise self.error(f"Invalid timestamp: {e}")
