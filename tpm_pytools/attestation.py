# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# TPM quote structures - Parsing of TPMS_ATTEST quote structures.

from dataclasses import dataclass
from typing import Tuple

from . import tpm_logging
from .algorithms import TPM2_MAX_DIGEST_SIZE, algorithm_name
from .errors import MalformedAttestationError
from .pcr import TPM2_NUM_PCR_BANKS, TPM2_PCR_SELECT_MAX, PcrSelection
from .reader import AttestReader

logger = tpm_logging.get_logger(__name__)

# TPM_GENERATED_VALUE, "\xffTCG"
TPM2_GENERATED_VALUE = 0xFF544347
TPM2_ST_ATTEST_QUOTE = 0x8018

# magic (4) + type (2)
ATTEST_HEADER_SIZE = 6
CLOCK_INFO_SIZE = 17  # clock (8), resetCount (4), restartCount (4), safe (1)
FIRMWARE_VERSION_SIZE = 8

MAX_EXTRA_DATA_SIZE = 1024
DEFAULT_MAX_BLOB_SIZE = 16 * 1024


@dataclass(frozen=True)
class QuoteAttestation:
    """
    A decoded TPMS_ATTEST of type TPM2_ST_ATTEST_QUOTE.

    Only the fields needed for verification are materialized: the signer
    name, clock info and firmware version are skipped after their bounds
    are checked.

    Based on TPM 2.0 Library Part 2, TPMS_ATTEST and TPMS_QUOTE_INFO.
    """

    magic: int
    attest_type: int
    qualified_signer_size: int
    extra_data: bytes
    pcr_selections: Tuple[PcrSelection, ...]
    pcr_digest: bytes
    size: int  # Bytes consumed from the blob

    @classmethod
    def unpack(
        cls,
        binary_data: bytes,
        max_size: int = DEFAULT_MAX_BLOB_SIZE,
        max_extra_data_size: int = MAX_EXTRA_DATA_SIZE,
        debug: bool = False,
    ) -> "QuoteAttestation":
        """
        Create a QuoteAttestation from the marshaled TPMS_ATTEST of a quote.

        Args:
            binary_data: Attestation bytes as signed by the TPM
            max_size: Largest blob accepted before parsing starts
            max_extra_data_size: Largest accepted extraData
            debug: If True, log every field as it is decoded

        Returns:
            QuoteAttestation: Parsed attestation

        Raises:
            MalformedAttestationError: If any field fails its bounds or value
                check. The error names the field and its offset.
        """
        if not binary_data or len(binary_data) > max_size:
            logger.debug(
                f"Attestation size {len(binary_data or b'')} outside 1..{max_size} bytes"
            )
            raise MalformedAttestationError("size", 0)

        reader = AttestReader(binary_data, byteorder="big")
        if len(reader) < ATTEST_HEADER_SIZE:
            raise MalformedAttestationError("header", 0)

        magic = reader.read_u32("magic")
        if magic != TPM2_GENERATED_VALUE:
            raise MalformedAttestationError("magic", 0)

        attest_type = reader.read_u16("attest_type")
        if attest_type != TPM2_ST_ATTEST_QUOTE:
            raise MalformedAttestationError("attest_type", 4)

        # qualifiedSigner, bounds only
        name_size = reader.read_u16("qualified_signer")
        reader.skip(name_size, "qualified_signer", more=True)

        extra_data = reader.read_sized(
            "extra_data", limit=max_extra_data_size, more=True
        )

        reader.skip(CLOCK_INFO_SIZE, "clock_info")
        reader.skip(FIRMWARE_VERSION_SIZE, "firmware_version")

        selections = []
        count_offset = reader.offset
        count = reader.read_u32("pcr_selection")
        if count > TPM2_NUM_PCR_BANKS:
            raise MalformedAttestationError("pcr_selection", count_offset)
        for _ in range(count):
            hash_alg = reader.read_u16("pcr_selection")
            size_offset = reader.offset
            size_of_select = reader.read_u8("pcr_selection")
            if size_of_select > TPM2_PCR_SELECT_MAX:
                raise MalformedAttestationError("pcr_selection", size_offset)
            bitmap = reader.read_bytes(size_of_select, "pcr_selection", more=True)
            selections.append(PcrSelection(hash_alg=hash_alg, bitmap=bitmap))

        pcr_digest = reader.read_sized("pcr_digest", limit=TPM2_MAX_DIGEST_SIZE)

        if debug:
            logger.debug(f"Magic: 0x{magic:08x}, type: 0x{attest_type:04x}")
            logger.debug(f"Qualified signer name: {name_size} bytes")
            logger.debug(f"Extra data: {extra_data.hex()}")
            for selection in selections:
                logger.debug(f"PCR selection: {selection}")
            logger.debug(f"PCR digest: {pcr_digest.hex()}")
            if reader.remaining:
                logger.debug(f"{reader.remaining} bytes follow the quote info")

        return cls(
            magic=magic,
            attest_type=attest_type,
            qualified_signer_size=name_size,
            extra_data=extra_data,
            pcr_selections=tuple(selections),
            pcr_digest=pcr_digest,
            size=reader.offset,
        )

    def print_details(self) -> None:
        """Log the decoded quote in a human readable layout."""
        logger.info("TPM Quote Details:")
        logger.info(f"Magic:                       0x{self.magic:08x}")
        logger.info(f"Type:                        0x{self.attest_type:04x}")
        logger.info(f"Qualified Signer Size:       {self.qualified_signer_size} bytes")
        logger.info(f"Extra Data:                  {self.extra_data.hex()}")
        logger.info("PCR Selections:")
        for selection in self.pcr_selections:
            indices = ", ".join(str(i) for i in selection.indices) or "(none)"
            logger.info(
                f"  {algorithm_name(selection.hash_alg):<26} {indices}"
            )
        logger.info(f"PCR Digest:                  {self.pcr_digest.hex()}")


def parse_attestation(
    blob: bytes,
    max_size: int = DEFAULT_MAX_BLOB_SIZE,
    max_extra_data_size: int = MAX_EXTRA_DATA_SIZE,
) -> QuoteAttestation:
    """Parse a quote attestation; see QuoteAttestation.unpack."""
    return QuoteAttestation.unpack(
        blob, max_size=max_size, max_extra_data_size=max_extra_data_size
    )
