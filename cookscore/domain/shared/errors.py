"""
Domain exceptions.

Typed exceptions for explicit error handling.
Evaluation errors are recovered inside the engine (fallback paths);
history errors propagate to the caller.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# EVALUATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class EvaluationDomainError(DomainError):
    """Base exception for the dish evaluation domain."""

    pass


class ImageDecodeError(EvaluationDomainError):
    """
    Image bytes could not be turned into pixels.

    Raised when:
    - Payload is empty
    - Format is not recognised by the decoder
    - Image data is truncated

    Example:
        >>> raise ImageDecodeError("cannot identify image file")
    """

    pass


class ClassificationError(EvaluationDomainError):
    """
    A category source could not produce categories.

    Base for every external classifier failure. A fallback category
    source catches this and switches to the local heuristic.

    Example:
        >>> raise ClassificationError("classifier returned error payload")
    """

    pass


class UnknownLocaleError(EvaluationDomainError):
    """
    No phrase catalog for the requested locale.

    Example:
        >>> raise UnknownLocaleError("No phrase catalog for locale 'fr'")
    """

    pass


# ═══════════════════════════════════════════════════════════
# HISTORY EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class HistoryDomainError(DomainError):
    """Base exception for evaluation history."""

    pass


class HistoryStorageError(HistoryDomainError):
    """
    History backend failed to read or write.

    Raised when:
    - MongoDB operation fails
    - Backend misconfigured

    Example:
        >>> raise HistoryStorageError("insert_one failed: timeout")
    """

    pass
