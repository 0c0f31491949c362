# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Check quote utility - Verify a TPM quote against a public key, nonce and PCR values.

import argparse
import string
import sys
from typing import List, Optional

from . import tpm_logging
from .algorithms import parse_algorithm
from .config import VerifierConfig
from .errors import ExitCode, QuoteVerificationError, UsageError
from .evidence import PcrEvidence
from .keys import load_public_key_file
from .signature import TpmSignature
from .verify import compute_message_digest, verify_quote


def parse_qualification(value: str, max_size: int) -> bytes:
    """
    Decode a hex qualification (nonce) given on the command line.

    Raises:
        UsageError: If the value has odd length, non-hex characters or is too long
    """
    if len(value) % 2:
        raise UsageError(f"Qualification {value!r} has an odd number of hex digits")
    if not all(c in string.hexdigits for c in value):
        raise UsageError(f"Could not convert {value!r} from a hex string to bytes")
    data = bytes.fromhex(value)
    if len(data) > max_size:
        raise UsageError(
            f"Qualification is {len(data)} bytes, at most {max_size} are accepted"
        )
    return data


def _read_file(path: str, what: str) -> bytes:
    with open(path, "rb") as f:
        data = f.read()
    tpm_logging.log_hexdump(f"{what} from {path}", data)
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Verify a TPM 2.0 quote: structure, nonce, PCR digest and signature"
    )
    parser.add_argument(
        "-u", "--public", required=True, help="Attestation public key (PEM or DER)"
    )
    parser.add_argument(
        "-m", "--message", required=True, help="Quote message (TPMS_ATTEST) file"
    )
    parser.add_argument(
        "-s", "--signature", required=True, help="Quote signature file"
    )
    parser.add_argument(
        "-g",
        "--hash-algorithm",
        required=True,
        help="Hash algorithm used for the quote digest (e.g. sha256)",
    )
    parser.add_argument(
        "-F",
        "--format",
        help="Signature scheme of a plain signature file (rsassa, rsapss, ecdsa). "
        "Without it the signature is read as a TPMT_SIGNATURE",
    )
    parser.add_argument("-f", "--pcr", help="PCR evidence file written with the quote")
    parser.add_argument(
        "-q", "--qualification", help="Expected qualification (nonce) as hex"
    )
    parser.add_argument("-c", "--config", help="JSON verifier configuration file")
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False, help="Enable debug mode"
    )
    parser.add_argument(
        "--quiet", action="store_true", default=False, help="Only log warnings and errors"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the tpm-checkquote command-line utility.

    Returns:
        int: Exit code; 0 when the quote verifies, otherwise the code of the
        first failing stage (see ExitCode)

    Examples:
        tpm-checkquote -u ak.pub.pem -m quote.msg -s quote.sig -g sha256
        tpm-checkquote -u ak.pub.pem -m quote.msg -s quote.sig -g sha256 \\
            -f quote.pcrs -q 1a2b3c4d
    """
    args = build_parser().parse_args(argv)
    logger = tpm_logging.setup_cli_logging(
        verbose=args.debug, quiet=args.quiet, log_file=args.log_file
    )

    try:
        config = VerifierConfig.from_file(args.config) if args.config else VerifierConfig()
        try:
            hash_alg = parse_algorithm(args.hash_algorithm)
            scheme = parse_algorithm(args.format, signature=True) if args.format else None
        except ValueError as e:
            raise UsageError(str(e)) from e

        extra_data = None
        if args.qualification is not None:
            extra_data = parse_qualification(
                args.qualification, config.max_extra_data_size
            )

        public_key = load_public_key_file(args.public)
        blob = _read_file(args.message, "Quote message")

        signature_data = _read_file(args.signature, "Signature")
        if scheme is not None:
            signature = TpmSignature.from_plain(signature_data, scheme, hash_alg)
        else:
            signature = TpmSignature.unpack(signature_data, debug=args.debug)

        pcr_evidence = None
        if args.pcr:
            pcr_evidence = PcrEvidence.unpack(
                _read_file(args.pcr, "PCR evidence"), debug=args.debug
            )

        message_digest = compute_message_digest(blob, hash_alg)
    except QuoteVerificationError as e:
        logger.error(str(e))
        return e.status.exit_code
    except OSError as e:
        logger.error(f"Unable to read input: {e}")
        return ExitCode.GENERAL_ERROR

    verdict = verify_quote(
        blob,
        signature,
        public_key,
        message_digest=message_digest,
        expected_extra_data=extra_data,
        pcr_evidence=pcr_evidence,
        config=config,
    )
    if verdict.verified:
        logger.info("Quote verified")
    else:
        logger.error(f"Verify signature failed! {verdict}")
    return verdict.exit_code


if __name__ == "__main__":
    sys.exit(main())
