"""Checksum service for audio payload integrity verification.

Provides SHA-256 hashing for stored audio so that a payload which
decodes cleanly but was altered on disk is still detected on reload.
"""

import hashlib


class ChecksumService:
    """Service for computing and verifying payload checksums.

    Checksums are prefixed with algorithm identifier for future extensibility.
    """

    ALGORITHM = "sha256"

    @classmethod
    def compute_bytes_checksum(cls, data: bytes) -> str:
        """Compute SHA-256 checksum of bytes data.

        Args:
            data: Bytes to checksum.

        Returns:
            Checksum string in format "sha256:<hex_digest>".
        """
        hasher = hashlib.sha256()
        hasher.update(data)
        return f"{cls.ALGORITHM}:{hasher.hexdigest()}"

    @classmethod
    def verify_bytes_checksum(cls, data: bytes, expected_checksum: str) -> bool:
        """Verify a payload's checksum matches expected value.

        Args:
            data: Bytes to verify.
            expected_checksum: Expected checksum in format "algorithm:hex_digest".

        Returns:
            True if checksum matches, False otherwise.

        Raises:
            ValueError: If checksum format or algorithm is invalid.
        """
        algorithm, _ = cls.parse_checksum(expected_checksum)
        if algorithm != cls.ALGORITHM:
            raise ValueError(
                f"Unsupported checksum algorithm: {algorithm}. "
                f"Only '{cls.ALGORITHM}' is supported."
            )
        return cls.compute_bytes_checksum(data) == expected_checksum

    @classmethod
    def parse_checksum(cls, checksum: str) -> tuple[str, str]:
        """Parse a checksum string into algorithm and hex digest.

        Raises:
            ValueError: If format is invalid.
        """
        if ":" not in checksum:
            raise ValueError(
                f"Invalid checksum format: {checksum}. "
                f"Expected format 'algorithm:hex_digest'."
            )
        return tuple(checksum.split(":", 1))  # type: ignore
