# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Print quote utility - Display TPM quote contents in human-readable format.

import argparse
import sys
from typing import List, Optional

from . import tpm_logging
from .attestation import QuoteAttestation
from .errors import ExitCode, MalformedAttestationError


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse command-line arguments, read a TPM quote file, and print its details.

    Returns:
        int: Exit code (0 for success, 1 if the file cannot be read, 3 if the
        quote is malformed)

    Examples:
        tpm-print-quote -f quote.msg
        tpm-print-quote -f quote.msg --debug
    """
    parser = argparse.ArgumentParser(description="Print TPM quote details")
    parser.add_argument(
        "-f",
        "--file",
        default="quote.msg",
        help="Path to the quote message (TPMS_ATTEST) file (default: quote.msg)",
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False, help="Enable debug mode"
    )
    args = parser.parse_args(argv)

    logger = tpm_logging.setup_cli_logging(verbose=args.debug, quiet=False)

    try:
        with open(args.file, "rb") as file:
            quote_data = file.read()

        logger.info(f"Reading TPM quote from: {args.file}")
        logger.info(f"File size: {len(quote_data)} bytes\n")

        quote = QuoteAttestation.unpack(quote_data, debug=args.debug)
        quote.print_details()
        return ExitCode.SUCCESS

    except FileNotFoundError:
        logger.error(f"File '{args.file}' not found")
        return ExitCode.GENERAL_ERROR
    except MalformedAttestationError as e:
        logger.error(f"Error parsing TPM quote: {e}")
        return ExitCode.MALFORMED_INPUT


if __name__ == "__main__":
    sys.exit(main())
