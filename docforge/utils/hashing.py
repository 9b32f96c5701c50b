"""Content hashing for approval tracking and drift detection."""

import hashlib


def calculate_hash(content: str) -> str:
    """Return the SHA-256 hex digest of the literal content (UTF-8).

    This is the hash stored with approvals.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def calculate_content_hash(content: str) -> str:
    """Hash content after normalizing line endings and trimming surrounding whitespace."""
    normalized = content.replace("\r\n", "\n").strip()
    return calculate_hash(normalized)


def content_equals(content1: str, content2: str) -> bool:
    """Compare two texts ignoring CRLF/LF differences and outer whitespace."""
    return calculate_content_hash(content1) == calculate_content_hash(content2)
