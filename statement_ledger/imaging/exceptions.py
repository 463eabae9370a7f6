class ImageNormalizationError(Exception):
    """Raised when a rendered page image cannot be decoded or re-encoded."""
