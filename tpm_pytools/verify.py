# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Quote verification - Fail-closed verification of TPM quotes.

"""
High-level TPM quote verification.

verify_quote runs the verification stages in a fixed order and stops at the
first failure:

1. parse the attestation
2. compare extraData with the expected qualification (if given)
3. recompute the PCR composite from evidence and compare (if given)
4. verify the signature over the quote digest

The verdict names the first failing stage. A later stage never runs once an
earlier one has failed, and no stage can make up for another.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.hazmat.primitives import constant_time

from . import tpm_logging
from .algorithms import algorithm_name, hash_data, is_hash_algorithm
from .attestation import QuoteAttestation
from .config import VerifierConfig
from .errors import (
    ExitCode,
    NonceMismatchError,
    PcrDigestMismatchError,
    QuoteVerificationError,
    SignatureInvalidError,
    UnsupportedHashAlgorithmError,
    UsageError,
    VerificationStatus,
)
from .evidence import PcrEvidence
from .pcr import compose_pcr_digest
from .signature import TpmSignature, verify_signature

logger = tpm_logging.get_logger(__name__)

PcrEvidenceInput = Union[PcrEvidence, Mapping, bytes]


@dataclass(frozen=True)
class VerificationVerdict:
    """
    Result of verify_quote.

    status is VERIFIED or the kind of the first stage that failed; detail
    carries a diagnostic message for failures.
    """

    status: VerificationStatus
    detail: Optional[str] = None

    @property
    def verified(self) -> bool:
        return self.status is VerificationStatus.VERIFIED

    @property
    def exit_code(self) -> ExitCode:
        return self.status.exit_code

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status.value}: {self.detail}"
        return self.status.value


def _bytes_equal(a: bytes, b: bytes, constant: bool) -> bool:
    # Lengths are public
    if len(a) != len(b):
        return False
    if constant:
        return constant_time.bytes_eq(bytes(a), bytes(b))
    return a == b


def compute_message_digest(blob: bytes, hash_alg: int) -> bytes:
    """
    Digest of the attestation blob as signed by the TPM.

    Raises:
        UnsupportedHashAlgorithmError: If hash_alg is not a supported hash
    """
    return hash_data(hash_alg, blob)


def check_extra_data(
    attestation: QuoteAttestation, expected_extra_data: bytes, constant: bool = True
) -> None:
    """
    Compare the quote's extraData with the expected qualification.

    Raises:
        NonceMismatchError: If length or content differ
    """
    if not _bytes_equal(attestation.extra_data, expected_extra_data, constant):
        raise NonceMismatchError(
            f"Quote extraData ({len(attestation.extra_data)} bytes) does not "
            f"match the expected qualification ({len(expected_extra_data)} bytes)"
        )


def check_pcr_digest(
    attestation: QuoteAttestation,
    pcr_evidence: PcrEvidenceInput,
    hash_alg: int,
    constant: bool = True,
) -> bytes:
    """
    Recompute the PCR composite from evidence and compare with the quoted digest.

    Args:
        attestation: Parsed quote
        pcr_evidence: PcrEvidence, a (hash algorithm, index) mapping, or
            the raw bytes of a PCR evidence file
        hash_alg: Hash algorithm of the composite (the quote's signing hash)
        constant: Compare in constant time

    Returns:
        bytes: The recomputed composite digest

    Raises:
        MalformedPcrEvidenceError: If raw evidence bytes are malformed
        MissingPcrValueError: If a selected register is missing from the evidence
        PcrDigestMismatchError: If the composite differs from the quoted digest
    """
    if isinstance(pcr_evidence, (bytes, bytearray, memoryview)):
        pcr_evidence = PcrEvidence.unpack(bytes(pcr_evidence))
    values = pcr_evidence.values if isinstance(pcr_evidence, PcrEvidence) else pcr_evidence

    composite = compose_pcr_digest(attestation.pcr_selections, values, hash_alg)
    if not _bytes_equal(composite, attestation.pcr_digest, constant):
        logger.debug(f"Quoted PCR digest:     {attestation.pcr_digest.hex()}")
        logger.debug(f"Recomputed PCR digest: {composite.hex()}")
        raise PcrDigestMismatchError(
            "PCR values failed to match the quote's digest"
        )
    return composite


def check_signature(
    signature: TpmSignature,
    message_digest: bytes,
    public_key,
    config: VerifierConfig,
) -> None:
    """
    Verify the quote signature.

    Raises:
        UnsupportedSchemeError: If the scheme is not supported or not allowed
        SignatureInvalidError: If the signature does not verify
    """
    if not verify_signature(
        signature.scheme,
        signature.hash_alg,
        message_digest,
        signature.signature,
        public_key,
        allowed_schemes=config.allowed_schemes,
    ):
        raise SignatureInvalidError(
            "Error validating signed message with public key provided"
        )


def _require_inputs(blob, signature, public_key) -> None:
    if blob is None:
        raise UsageError("An attestation blob is required")
    if signature is None:
        raise UsageError("A signature is required")
    if public_key is None:
        raise UsageError("A public key is required")
    if not is_hash_algorithm(signature.hash_alg):
        raise UnsupportedHashAlgorithmError(signature.hash_alg)


def verify_quote(
    blob: bytes,
    signature: Optional[TpmSignature],
    public_key,
    message_digest: Optional[bytes] = None,
    expected_extra_data: Optional[bytes] = None,
    pcr_evidence: Optional[PcrEvidenceInput] = None,
    config: Optional[VerifierConfig] = None,
) -> VerificationVerdict:
    """
    Verify a TPM quote.

    Args:
        blob: The marshaled TPMS_ATTEST returned by TPM2_Quote
        signature: The quote signature
        public_key: Attestation public key (cryptography RSA or EC key)
        message_digest: Expected digest of blob under the signature's hash
            algorithm. The digest is always recomputed from blob; a supplied
            value that differs fails the signature stage.
        expected_extra_data: Qualification (nonce) the quote must carry.
            Not checked when None.
        pcr_evidence: Register values the quoted PCR digest must match.
            Not checked when None.
        config: Limits and accepted schemes (defaults to VerifierConfig())

    Returns:
        VerificationVerdict: VERIFIED, or the first failing stage
    """
    config = config or VerifierConfig()
    tpm_logging.log_section_header("Quote verification")

    try:
        _require_inputs(blob, signature, public_key)

        attestation = QuoteAttestation.unpack(
            blob,
            max_size=config.max_blob_size,
            max_extra_data_size=config.max_extra_data_size,
        )
        tpm_logging.log_verification_step(
            "Quote structure", "PASS", f"{attestation.size} of {len(blob)} bytes"
        )

        if expected_extra_data is not None:
            check_extra_data(
                attestation, expected_extra_data, config.constant_time_compare
            )
            tpm_logging.log_verification_step("Quote nonce", "PASS")
        else:
            tpm_logging.log_verification_step(
                "Quote nonce", "SKIP", "no qualification given"
            )

        if pcr_evidence is not None:
            check_pcr_digest(
                attestation,
                pcr_evidence,
                signature.hash_alg,
                config.constant_time_compare,
            )
            tpm_logging.log_verification_step(
                "PCR digest", "PASS", algorithm_name(signature.hash_alg)
            )
        else:
            tpm_logging.log_verification_step(
                "PCR digest", "SKIP", "no PCR evidence given"
            )

        # The signature must cover the blob that was parsed above
        blob_digest = compute_message_digest(blob, signature.hash_alg)
        if message_digest is not None and not _bytes_equal(
            message_digest, blob_digest, config.constant_time_compare
        ):
            raise SignatureInvalidError(
                "Message digest does not match the attestation blob"
            )
        check_signature(signature, blob_digest, public_key, config)
        tpm_logging.log_verification_step(
            "Quote signature", "PASS", algorithm_name(signature.scheme)
        )

    except QuoteVerificationError as e:
        verdict = VerificationVerdict(status=e.status, detail=str(e))
        tpm_logging.log_verification_step("Quote verification", "FAIL", str(verdict))
        return verdict

    return VerificationVerdict(status=VerificationStatus.VERIFIED)
