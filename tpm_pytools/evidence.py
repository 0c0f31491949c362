# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# PCR evidence - Loading of PCR value files written alongside a quote.

"""
PCR evidence files.

The file written by ``tpm2_quote --pcr`` is a raw dump of host structures
(little endian on the platforms that produce it):

* a TPML_PCR_SELECTION: u32 count and 16 fixed slots of
  {u16 hash, u8 sizeofSelect, 4 byte pcrSelect, 1 pad byte}
* a u32 number of TPML_DIGEST records
* that many TPML_DIGEST records: u32 count and 8 fixed slots of
  {u16 size, 64 byte buffer}

Digests are laid out in selection order: bank by bank, ascending register
index, filling each TPML_DIGEST before moving to the next.
"""

import struct
from dataclasses import dataclass
from typing import Tuple

from . import tpm_logging
from .algorithms import TPM2_MAX_DIGEST_SIZE, get_digest_size, is_hash_algorithm
from .errors import MalformedPcrEvidenceError
from .pcr import TPM2_NUM_PCR_BANKS, TPM2_PCR_SELECT_MAX, PcrBankValues, PcrSelection
from .reader import AttestReader

logger = tpm_logging.get_logger(__name__)

PCR_SELECTION_SLOT_SIZE = 8
PCR_SELECTION_LIST_SIZE = 4 + TPM2_NUM_PCR_BANKS * PCR_SELECTION_SLOT_SIZE
DIGESTS_PER_LIST = 8
DIGEST_SLOT_SIZE = 2 + TPM2_MAX_DIGEST_SIZE
DIGEST_LIST_SIZE = 4 + DIGESTS_PER_LIST * DIGEST_SLOT_SIZE
MAX_PCR_DIGEST_LISTS = 32


@dataclass(frozen=True)
class PcrEvidence:
    """Register values read from a PCR evidence file."""

    selections: Tuple[PcrSelection, ...]
    values: PcrBankValues

    @classmethod
    def unpack(cls, binary_data: bytes, debug: bool = False) -> "PcrEvidence":
        """
        Decode a PCR evidence file.

        Args:
            binary_data: File contents
            debug: If True, log every register value

        Returns:
            PcrEvidence: The selection and the values it maps to

        Raises:
            MalformedPcrEvidenceError: If a count, size or record is out of bounds
        """
        reader = AttestReader(
            binary_data, byteorder="little", error=MalformedPcrEvidenceError
        )
        if not binary_data:
            raise reader.fail("size")

        selections = []
        selection_count = reader.read_u32("pcr_selection", more=False)
        if selection_count > TPM2_NUM_PCR_BANKS:
            raise MalformedPcrEvidenceError("pcr_selection", 0)
        for slot in range(TPM2_NUM_PCR_BANKS):
            hash_alg = reader.read_u16("pcr_selection", more=False)
            size_offset = reader.offset
            size_of_select = reader.read_u8("pcr_selection", more=False)
            select = reader.read_bytes(TPM2_PCR_SELECT_MAX, "pcr_selection")
            reader.skip(1, "pcr_selection", more=False)
            if slot >= selection_count:
                continue
            if size_of_select > TPM2_PCR_SELECT_MAX:
                raise MalformedPcrEvidenceError("pcr_selection", size_offset)
            selections.append(
                PcrSelection(hash_alg=hash_alg, bitmap=select[:size_of_select])
            )

        list_count_offset = reader.offset
        list_count = reader.read_u32("pcr_values", more=False)
        if (
            list_count > MAX_PCR_DIGEST_LISTS
            or list_count * DIGEST_LIST_SIZE > reader.remaining
        ):
            raise MalformedPcrEvidenceError("pcr_values", list_count_offset)

        digests = []
        for _ in range(list_count):
            count_offset = reader.offset
            count = reader.read_u32("pcr_values", more=False)
            if count > DIGESTS_PER_LIST:
                raise MalformedPcrEvidenceError("pcr_values", count_offset)
            for slot in range(DIGESTS_PER_LIST):
                size_offset = reader.offset
                size = reader.read_u16("pcr_values", more=False)
                buffer = reader.read_bytes(TPM2_MAX_DIGEST_SIZE, "pcr_values")
                if slot >= count:
                    continue
                if size > TPM2_MAX_DIGEST_SIZE:
                    raise MalformedPcrEvidenceError("pcr_values", size_offset)
                digests.append((size_offset, buffer[:size]))

        if reader.remaining:
            logger.debug(f"Ignoring {reader.remaining} trailing bytes in PCR file")

        values = {}
        pending = iter(digests)
        for selection in selections:
            for index in selection.indices:
                entry = next(pending, None)
                if entry is None:
                    logger.debug(
                        f"PCR file holds fewer values than its selection ({selection})"
                    )
                    break
                size_offset, value = entry
                if is_hash_algorithm(selection.hash_alg):
                    if len(value) != get_digest_size(selection.hash_alg):
                        raise MalformedPcrEvidenceError("pcr_values", size_offset)
                values[(selection.hash_alg, index)] = value
                if debug:
                    logger.debug(f"PCR {selection.hash_alg:#06x}:{index} = {value.hex()}")

        return cls(selections=tuple(selections), values=PcrBankValues(values))


def parse_pcr_evidence(data: bytes) -> PcrEvidence:
    """Decode a PCR evidence file; see PcrEvidence.unpack."""
    return PcrEvidence.unpack(data)


def pack_pcr_evidence(selections, values) -> bytes:
    """
    Serialize selections and values into the PCR evidence file layout.

    Used to produce evidence files for the command-line tool from values
    obtained elsewhere (for example a PCR read over another channel).

    Args:
        selections: Sequence of PcrSelection, at most 16
        values: Mapping of (hash algorithm, index) to register value

    Raises:
        ValueError: If the selection does not fit the fixed layout or a value is missing
    """
    if len(selections) > TPM2_NUM_PCR_BANKS:
        raise ValueError(f"At most {TPM2_NUM_PCR_BANKS} PCR banks can be stored")

    out = bytearray(struct.pack("<I", len(selections)))
    for slot in range(TPM2_NUM_PCR_BANKS):
        if slot < len(selections):
            selection = selections[slot]
            if len(selection.bitmap) > TPM2_PCR_SELECT_MAX:
                raise ValueError(f"Selection bitmap too long: {selection}")
            out += struct.pack(
                "<HB4sx",
                selection.hash_alg,
                len(selection.bitmap),
                selection.bitmap.ljust(TPM2_PCR_SELECT_MAX, b"\x00"),
            )
        else:
            out += bytes(PCR_SELECTION_SLOT_SIZE)

    ordered = []
    for selection in selections:
        for index in selection.indices:
            try:
                ordered.append(bytes(values[(selection.hash_alg, index)]))
            except KeyError:
                raise ValueError(
                    f"No value for PCR {index} in bank 0x{selection.hash_alg:04x}"
                ) from None

    chunks = [
        ordered[i : i + DIGESTS_PER_LIST]
        for i in range(0, len(ordered), DIGESTS_PER_LIST)
    ]
    if len(chunks) > MAX_PCR_DIGEST_LISTS:
        raise ValueError("Too many PCR values for the evidence file layout")

    out += struct.pack("<I", len(chunks))
    for chunk in chunks:
        out += struct.pack("<I", len(chunk))
        for slot in range(DIGESTS_PER_LIST):
            value = chunk[slot] if slot < len(chunk) else b""
            if len(value) > TPM2_MAX_DIGEST_SIZE:
                raise ValueError(f"PCR value too long: {len(value)} bytes")
            out += struct.pack("<H64s", len(value), value)
    return bytes(out)
