# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# PCR composite - PCR selections, register evidence and composite digest recomputation.

"""
PCR selection and composite digest handling.

The TPM computes a quote's PCR digest by concatenating the values of every
selected register, bank by bank in the order of the TPML_PCR_SELECTION and
by ascending register index inside a bank, then hashing the result once.
compose_pcr_digest replays exactly that order over externally supplied
evidence so the result can be compared with the quoted digest.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from . import tpm_logging
from .algorithms import algorithm_name, hash_data
from .errors import MissingPcrValueError, UsageError

logger = tpm_logging.get_logger(__name__)

# TPM_PCR_SELECT_MAX for platforms with up to 32 registers
TPM2_PCR_SELECT_MAX = 4
# HASH_COUNT bound of a TPML_PCR_SELECTION
TPM2_NUM_PCR_BANKS = 16


@dataclass(frozen=True)
class PcrSelection:
    """
    One TPMS_PCR_SELECTION: a bank (hash algorithm) and its register bitmap.

    Bit i of bitmap byte j selects register 8*j + i.
    """

    hash_alg: int
    bitmap: bytes

    @property
    def indices(self) -> Tuple[int, ...]:
        """Selected register indices in ascending order."""
        return tuple(
            byte_index * 8 + bit
            for byte_index, byte in enumerate(self.bitmap)
            for bit in range(8)
            if byte & (1 << bit)
        )

    def is_selected(self, index: int) -> bool:
        byte_index, bit = divmod(index, 8)
        if index < 0 or byte_index >= len(self.bitmap):
            return False
        return bool(self.bitmap[byte_index] & (1 << bit))

    @classmethod
    def from_indices(
        cls, hash_alg: int, indices: Iterable[int], size_of_select: int = 3
    ) -> "PcrSelection":
        """
        Build a selection from register indices.

        Args:
            hash_alg: TPM_ALG_ID of the bank
            indices: Register indices to select
            size_of_select: Bitmap length in bytes (3 for the usual 24 registers)

        Raises:
            ValueError: If an index does not fit in the bitmap
        """
        bitmap = bytearray(size_of_select)
        for index in indices:
            byte_index, bit = divmod(index, 8)
            if index < 0 or byte_index >= size_of_select:
                raise ValueError(
                    f"PCR index {index} does not fit a {size_of_select}-byte selection"
                )
            bitmap[byte_index] |= 1 << bit
        return cls(hash_alg=hash_alg, bitmap=bytes(bitmap))

    def __str__(self) -> str:
        indices = ",".join(str(i) for i in self.indices)
        return f"{algorithm_name(self.hash_alg)}:{indices}"


class PcrBankValues(Mapping):
    """
    Read-only register evidence keyed by (hash algorithm, register index).
    """

    def __init__(self, values: Optional[Mapping] = None) -> None:
        self._values: Dict[Tuple[int, int], bytes] = {}
        for (hash_alg, index), value in (values or {}).items():
            self._values[(int(hash_alg), int(index))] = bytes(value)

    @classmethod
    def from_banks(cls, banks: Mapping) -> "PcrBankValues":
        """Build from {hash_alg: {index: value}}."""
        return cls(
            {
                (hash_alg, index): value
                for hash_alg, registers in banks.items()
                for index, value in registers.items()
            }
        )

    def __getitem__(self, key: Tuple[int, int]) -> bytes:
        return self._values[key]

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PcrBankValues({len(self._values)} registers)"


def compose_pcr_digest(
    selections: Sequence[PcrSelection],
    bank_values: Mapping,
    hash_alg: Optional[int] = None,
) -> bytes:
    """
    Recompute a quote's PCR composite digest from register evidence.

    Args:
        selections: Selections in the order they appear in the quote
        bank_values: Register values keyed by (hash algorithm, index)
        hash_alg: Algorithm used to hash the concatenation. Defaults to the
            first selection's bank algorithm.

    Returns:
        bytes: The composite digest

    Raises:
        MissingPcrValueError: If a selected register has no value in the evidence
        UsageError: If no hash algorithm is given and the selection is empty
        UnsupportedHashAlgorithmError: If hash_alg is not a supported hash
    """
    if hash_alg is None:
        if not selections:
            raise UsageError(
                "A hash algorithm is required to compose an empty PCR selection"
            )
        hash_alg = selections[0].hash_alg

    parts: List[bytes] = []
    for selection in selections:
        for index in selection.indices:
            value = bank_values.get((selection.hash_alg, index))
            if value is None:
                logger.debug(
                    f"PCR {index} of bank {algorithm_name(selection.hash_alg)} missing from evidence"
                )
                raise MissingPcrValueError(index, selection.hash_alg)
            parts.append(value)

    composite = hash_data(hash_alg, b"".join(parts))
    logger.debug(
        f"Composed {len(parts)} PCR values with {algorithm_name(hash_alg)}: {composite.hex()}"
    )
    return composite
