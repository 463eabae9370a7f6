import hashlib


def fingerprint(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw document bytes.

    Depends on content only, so the same file uploaded under another name (or
    unlocked with another password) maps to the same fingerprint.
    """
    return hashlib.sha256(data).hexdigest()
