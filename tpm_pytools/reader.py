# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Byte reader - Bounds-checked cursor over TPM marshaled structures.

"""
Bounds-checked cursor used by the attestation, signature and PCR evidence parsers.

Every read checks the remaining length before touching the buffer and raises
the reader's error type with the name of the field being decoded and the
cursor offset of the read that failed.

Two bounds are used:

* ``more=True`` (headers): the field must be followed by at least one more
  byte, so ``offset + width < len``. A length or count header that ends the
  buffer exactly is rejected.
* ``more=False`` (trailing payloads): the field may end the buffer, so
  ``offset + width <= len``.
"""

import struct
from typing import Type

from .errors import MalformedAttestationError

_FORMATS = {1: "B", 2: "H", 4: "I"}


class AttestReader:
    """Sequential reader over an immutable byte buffer."""

    def __init__(
        self,
        data: bytes,
        byteorder: str = "big",
        error: Type[MalformedAttestationError] = MalformedAttestationError,
    ) -> None:
        if byteorder not in ("big", "little"):
            raise ValueError(f"Invalid byte order: {byteorder}")
        self._data = bytes(data)
        self._prefix = ">" if byteorder == "big" else "<"
        self._error = error
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def __len__(self) -> int:
        return len(self._data)

    def fail(self, stage: str, message: str = None) -> MalformedAttestationError:
        """Build the reader's error for a field starting at the current offset."""
        return self._error(stage, self._offset, message)

    def _check(self, width: int, stage: str, more: bool) -> None:
        if width < 0:
            raise self.fail(stage)
        end = self._offset + width
        if more:
            if end >= len(self._data):
                raise self.fail(stage)
        elif end > len(self._data):
            raise self.fail(stage)

    def _read_uint(self, width: int, stage: str, more: bool) -> int:
        self._check(width, stage, more)
        (value,) = struct.unpack_from(
            self._prefix + _FORMATS[width], self._data, self._offset
        )
        self._offset += width
        return value

    def read_u8(self, stage: str, more: bool = True) -> int:
        return self._read_uint(1, stage, more)

    def read_u16(self, stage: str, more: bool = True) -> int:
        return self._read_uint(2, stage, more)

    def read_u32(self, stage: str, more: bool = True) -> int:
        return self._read_uint(4, stage, more)

    def read_bytes(self, length: int, stage: str, more: bool = False) -> bytes:
        """Copy length bytes out of the buffer."""
        self._check(length, stage, more)
        start = self._offset
        self._offset += length
        return self._data[start : self._offset]

    def skip(self, length: int, stage: str, more: bool = True) -> None:
        """Advance past length bytes without materializing them."""
        self._check(length, stage, more)
        self._offset += length

    def read_sized(
        self, stage: str, limit: int = None, more: bool = False
    ) -> bytes:
        """
        Read a TPM2B: a big-endian u16 size followed by that many bytes.

        Args:
            stage: Field name reported on failure
            limit: Largest accepted declared size
            more: Whether the payload must be followed by more data
        """
        size_offset = self._offset
        size = self.read_u16(stage, more=True)
        if limit is not None and size > limit:
            raise self._error(stage, size_offset)
        return self.read_bytes(size, stage, more=more)
