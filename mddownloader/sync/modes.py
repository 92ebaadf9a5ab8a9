"""Fetch strategies for retrieving file content."""

from enum import Enum


class FetchStrategy(str, Enum):
    """How file content is retrieved from GitHub.

    Both strategies yield byte-identical content; they differ only in the
    endpoint used and whether a decode step is needed.
    """

    BLOB = "blob"
    """Git Data API blob, base64 encoded in a JSON payload"""

    RAW = "raw"
    """Contents API with the raw media type, streamed as-is"""

    @classmethod
    def from_string(cls, value: str) -> "FetchStrategy":
        """Parse a strategy name (case-insensitive).

        Raises:
            ValueError: If the name is unknown
        """
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(
                f"Invalid fetch strategy: {value}. Valid strategies: {valid}"
            ) from None
