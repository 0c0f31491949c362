# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Verifier configuration - Input limits and accepted schemes for quote verification.

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .algorithms import SIGNATURE_SCHEMES, parse_algorithm
from .attestation import DEFAULT_MAX_BLOB_SIZE, MAX_EXTRA_DATA_SIZE
from .errors import UsageError
from .tpm_logging import get_logger

logger = get_logger(__name__)

# Bounds on configurable limits
MIN_BLOB_SIZE_LIMIT = 4 * 1024
MAX_BLOB_SIZE_LIMIT = 64 * 1024


@dataclass(frozen=True)
class VerifierConfig:
    """
    Limits and policy for quote verification.

    Attributes:
        max_blob_size: Largest attestation accepted before parsing (4-64 KiB)
        max_extra_data_size: Largest extraData accepted in a quote
        allowed_schemes: Signature schemes accepted for the quote signature
        constant_time_compare: Compare nonces and digests in constant time
    """

    max_blob_size: int = DEFAULT_MAX_BLOB_SIZE
    max_extra_data_size: int = MAX_EXTRA_DATA_SIZE
    allowed_schemes: Tuple[int, ...] = SIGNATURE_SCHEMES
    constant_time_compare: bool = True

    def __post_init__(self):
        if not MIN_BLOB_SIZE_LIMIT <= self.max_blob_size <= MAX_BLOB_SIZE_LIMIT:
            raise UsageError(
                f"max_blob_size must be between {MIN_BLOB_SIZE_LIMIT} and "
                f"{MAX_BLOB_SIZE_LIMIT} bytes, got {self.max_blob_size}"
            )
        if not 0 <= self.max_extra_data_size <= 0xFFFF:
            raise UsageError(
                f"max_extra_data_size out of range: {self.max_extra_data_size}"
            )
        if not self.allowed_schemes:
            raise UsageError("allowed_schemes must name at least one scheme")
        for scheme in self.allowed_schemes:
            if scheme not in SIGNATURE_SCHEMES:
                raise UsageError(f"Not a supported signature scheme: {scheme}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerifierConfig":
        """
        Build a configuration from a dictionary (as loaded from JSON).

        Unknown keys are rejected. Scheme names follow the CLI spelling
        ("rsassa", "rsapss", "ecdsa") or numeric identifiers.

        Raises:
            UsageError: If a key is unknown or a value is invalid
        """
        known = {
            "max_blob_size",
            "max_extra_data_size",
            "allowed_schemes",
            "constant_time_compare",
        }
        unknown = set(data) - known
        if unknown:
            raise UsageError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )

        kwargs = dict(data)
        if "allowed_schemes" in kwargs:
            try:
                kwargs["allowed_schemes"] = tuple(
                    parse_algorithm(s, signature=True)
                    for s in kwargs["allowed_schemes"]
                )
            except (TypeError, ValueError) as e:
                raise UsageError(f"Invalid allowed_schemes: {e}") from e
        for key in ("max_blob_size", "max_extra_data_size"):
            if key in kwargs and (
                isinstance(kwargs[key], bool) or not isinstance(kwargs[key], int)
            ):
                raise UsageError(f"{key} must be an integer")
        if "constant_time_compare" in kwargs and not isinstance(
            kwargs["constant_time_compare"], bool
        ):
            raise UsageError("constant_time_compare must be a boolean")

        return cls(**kwargs)

    @classmethod
    def from_file(cls, config_file: str) -> "VerifierConfig":
        """
        Load a configuration from a JSON file.

        Raises:
            FileNotFoundError: If config_file doesn't exist
            UsageError: If the file is not valid JSON or holds invalid values
        """
        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        with open(config_file, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise UsageError(f"Invalid configuration file {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise UsageError(f"Configuration file {config_file} must hold an object")

        config = cls.from_dict(data)
        logger.debug(f"Loaded configuration from {config_file}: {config}")
        return config
