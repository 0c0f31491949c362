# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# tpm_pytools - Python tools for TPM 2.0 quote verification.

"""
tpm_pytools - Python tools for TPM 2.0 quote verification

This package verifies TPM 2.0 quotes: defensive parsing of the signed
TPMS_ATTEST, recomputation of the PCR composite digest from evidence,
freshness (nonce) checks and signature verification.
"""

# Algorithm identifiers and hashing
from .algorithms import (
    TpmAlgorithm,
    get_digest_size,
    get_hash_algorithm,
    hash_data,
    parse_algorithm,
)

# Quote parsing
from .attestation import QuoteAttestation, parse_attestation

# Configuration
from .config import VerifierConfig

# Errors and statuses
from .errors import (
    ExitCode,
    MalformedAttestationError,
    MalformedPcrEvidenceError,
    MalformedSignatureError,
    MissingPcrValueError,
    NonceMismatchError,
    PcrDigestMismatchError,
    QuoteVerificationError,
    SignatureInvalidError,
    UnsupportedHashAlgorithmError,
    UnsupportedSchemeError,
    UsageError,
    VerificationStatus,
)

# PCR evidence files
from .evidence import PcrEvidence, pack_pcr_evidence, parse_pcr_evidence

# Public keys
from .keys import load_public_key, load_public_key_file

# PCR composite
from .pcr import PcrBankValues, PcrSelection, compose_pcr_digest

# Byte reader
from .reader import AttestReader

# Signatures
from .signature import TpmSignature, verify_signature

# Logging utilities
from .tpm_logging import (
    get_logger,
    log_section_header,
    log_verification_step,
    setup_cli_logging,
    setup_logging,
)

# High-level verification
from .verify import (
    VerificationVerdict,
    check_extra_data,
    check_pcr_digest,
    check_signature,
    compute_message_digest,
    verify_quote,
)

__version__ = "0.1.1"
__author__ = "Isaac Matthews"

__all__ = [
    # Core classes
    "QuoteAttestation",
    "PcrSelection",
    "PcrBankValues",
    "PcrEvidence",
    "TpmSignature",
    "VerificationVerdict",
    "VerifierConfig",
    "AttestReader",
    # Algorithms
    "TpmAlgorithm",
    "get_digest_size",
    "get_hash_algorithm",
    "hash_data",
    "parse_algorithm",
    # Parsing
    "parse_attestation",
    "parse_pcr_evidence",
    "pack_pcr_evidence",
    "load_public_key",
    "load_public_key_file",
    # Verification
    "compose_pcr_digest",
    "verify_signature",
    "verify_quote",
    "compute_message_digest",
    "check_extra_data",
    "check_pcr_digest",
    "check_signature",
    # Errors
    "ExitCode",
    "VerificationStatus",
    "QuoteVerificationError",
    "UsageError",
    "MalformedAttestationError",
    "MalformedPcrEvidenceError",
    "MalformedSignatureError",
    "NonceMismatchError",
    "PcrDigestMismatchError",
    "MissingPcrValueError",
    "UnsupportedHashAlgorithmError",
    "UnsupportedSchemeError",
    "SignatureInvalidError",
    # Logging utilities
    "get_logger",
    "setup_cli_logging",
    "setup_logging",
    "log_verification_step",
    "log_section_header",
]
