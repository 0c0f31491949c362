# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Error taxonomy - Failure kinds, verdict statuses and process exit codes.

import enum
from typing import Optional


class ExitCode(enum.IntEnum):
    """Process exit codes used by the command-line tools."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    MALFORMED_INPUT = 3
    NONCE_MISMATCH = 4
    PCR_MISMATCH = 5
    SIGNATURE_INVALID = 6


class VerificationStatus(enum.Enum):
    """
    Outcome of a quote verification.

    Exactly one status is reported per verification: VERIFIED, or the
    kind of the first stage that failed.
    """

    VERIFIED = "Verified"
    USAGE_ERROR = "UsageError"
    MALFORMED_ATTESTATION = "MalformedAttestation"
    NONCE_MISMATCH = "NonceMismatch"
    PCR_DIGEST_MISMATCH = "PCRDigestMismatch"
    MISSING_PCR_VALUE = "MissingPCRValue"
    UNSUPPORTED_SCHEME = "UnsupportedScheme"
    SIGNATURE_INVALID = "SignatureInvalid"

    @property
    def exit_code(self) -> ExitCode:
        return _EXIT_CODES[self]


_EXIT_CODES = {
    VerificationStatus.VERIFIED: ExitCode.SUCCESS,
    VerificationStatus.USAGE_ERROR: ExitCode.USAGE_ERROR,
    VerificationStatus.MALFORMED_ATTESTATION: ExitCode.MALFORMED_INPUT,
    VerificationStatus.NONCE_MISMATCH: ExitCode.NONCE_MISMATCH,
    VerificationStatus.PCR_DIGEST_MISMATCH: ExitCode.PCR_MISMATCH,
    VerificationStatus.MISSING_PCR_VALUE: ExitCode.PCR_MISMATCH,
    VerificationStatus.UNSUPPORTED_SCHEME: ExitCode.SIGNATURE_INVALID,
    VerificationStatus.SIGNATURE_INVALID: ExitCode.SIGNATURE_INVALID,
}


class QuoteVerificationError(Exception):
    """Base class for every failure raised by tpm_pytools."""

    status: VerificationStatus = VerificationStatus.SIGNATURE_INVALID


class UsageError(QuoteVerificationError):
    """A required input, or a consistent combination of inputs, is missing."""

    status = VerificationStatus.USAGE_ERROR


class MalformedAttestationError(QuoteVerificationError):
    """
    Raised when an attestation structure fails a bounds or value check.

    Attributes:
        stage: Name of the field that failed to decode
        offset: Cursor position (in bytes) of the failing field
    """

    status = VerificationStatus.MALFORMED_ATTESTATION
    structure = "attestation"

    def __init__(self, stage: str, offset: int, message: Optional[str] = None):
        self.stage = stage
        self.offset = offset
        if message is None:
            message = f"Malformed {self.structure}: {stage} at offset {offset}"
        super().__init__(message)


class MalformedPcrEvidenceError(MalformedAttestationError):
    """The PCR evidence file does not match its fixed layout."""

    structure = "PCR evidence"


class MalformedSignatureError(MalformedAttestationError):
    """A marshaled TPMT_SIGNATURE could not be decoded."""

    structure = "signature"


class NonceMismatchError(QuoteVerificationError):
    """The quote's extraData differs from the expected qualification."""

    status = VerificationStatus.NONCE_MISMATCH


class PcrDigestMismatchError(QuoteVerificationError):
    """The recomputed PCR composite differs from the quoted digest."""

    status = VerificationStatus.PCR_DIGEST_MISMATCH


class MissingPcrValueError(QuoteVerificationError):
    """A register selected by the quote has no value in the evidence."""

    status = VerificationStatus.MISSING_PCR_VALUE

    def __init__(self, index: int, hash_alg: int):
        self.index = index
        self.hash_alg = hash_alg
        super().__init__(
            f"No evidence for PCR {index} in bank 0x{hash_alg:04x}"
        )


class UnsupportedHashAlgorithmError(UsageError):
    """A hash algorithm identifier is not one tpm_pytools can compute."""

    def __init__(self, alg_id):
        self.alg_id = alg_id
        if isinstance(alg_id, int):
            super().__init__(f"Unsupported hash algorithm: 0x{alg_id:04x}")
        else:
            super().__init__(f"Unsupported hash algorithm: {alg_id}")


class UnsupportedSchemeError(QuoteVerificationError):
    """The signature scheme is not one of the supported schemes."""

    status = VerificationStatus.UNSUPPORTED_SCHEME

    def __init__(self, scheme):
        self.scheme = scheme
        if isinstance(scheme, int):
            super().__init__(f"Unsupported signature scheme: 0x{scheme:04x}")
        else:
            super().__init__(f"Unsupported signature scheme: {scheme}")


class SignatureInvalidError(QuoteVerificationError):
    """The signature does not verify over the quote digest."""

    status = VerificationStatus.SIGNATURE_INVALID
