"""Borsh reader and writer for stake pool account layouts.

The reader is a cursor over a bytes-like object; it never copies more than the
field being read. The writer appends to an internal ``bytearray`` and mirrors
the reader method-for-method so layouts can be expressed symmetrically.
"""

from __future__ import annotations

import struct
from typing import Callable, TypeVar

T = TypeVar("T")

_U8_MAX = 0xFF
_U32_MAX = 0xFFFF_FFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


class IncrementalReader:
    """Cursor-based Borsh binary reader."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = data
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _need(self, n: int, what: str) -> None:
        if self._offset + n > len(self._data):
            raise ValueError(f"borsh: not enough data for {what} at offset {self._offset}")

    def read_u8(self) -> int:
        self._need(1, "u8")
        v = self._data[self._offset]
        self._offset += 1
        return v

    def read_u32(self) -> int:
        self._need(4, "u32")
        (v,) = struct.unpack_from("<I", self._data, self._offset)
        self._offset += 4
        return v

    def read_u64(self) -> int:
        self._need(8, "u64")
        (v,) = struct.unpack_from("<Q", self._data, self._offset)
        self._offset += 8
        return v

    def read_i64(self) -> int:
        self._need(8, "i64")
        (v,) = struct.unpack_from("<q", self._data, self._offset)
        self._offset += 8
        return v

    def read_bytes(self, n: int) -> bytes:
        self._need(n, f"{n} bytes")
        v = bytes(self._data[self._offset : self._offset + n])
        self._offset += n
        return v

    def read_pubkey_raw(self) -> bytes:
        """Read a 32-byte public key as raw bytes."""
        return self.read_bytes(32)

    def read_option(self, read: Callable[[], T]) -> T | None:
        """Read a Borsh ``Option``: a 0/1 tag followed by the value when present."""
        tag = self.read_u8()
        if tag == 0:
            return None
        if tag != 1:
            raise ValueError(f"borsh: invalid option tag {tag} at offset {self._offset - 1}")
        return read()


class BorshWriter:
    """Append-only Borsh binary writer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)

    def write_u8(self, v: int) -> None:
        if not 0 <= v <= _U8_MAX:
            raise ValueError(f"borsh: {v} out of range for u8")
        self._buf.append(v)

    def write_u32(self, v: int) -> None:
        if not 0 <= v <= _U32_MAX:
            raise ValueError(f"borsh: {v} out of range for u32")
        self._buf += struct.pack("<I", v)

    def write_u64(self, v: int) -> None:
        if not 0 <= v <= _U64_MAX:
            raise ValueError(f"borsh: {v} out of range for u64")
        self._buf += struct.pack("<Q", v)

    def write_i64(self, v: int) -> None:
        if not _I64_MIN <= v <= _I64_MAX:
            raise ValueError(f"borsh: {v} out of range for i64")
        self._buf += struct.pack("<q", v)

    def write_bytes(self, v: bytes) -> None:
        self._buf += v

    def write_pubkey_raw(self, v: bytes) -> None:
        if len(v) != 32:
            raise ValueError(f"borsh: pubkey must be 32 bytes, got {len(v)}")
        self._buf += v

    def write_option(self, v: T | None, write: Callable[[T], None]) -> None:
        if v is None:
            self._buf.append(0)
            return
        self._buf.append(1)
        write(v)
