from __future__ import annotations

class ServiceError(RuntimeError):
    """Base class for service-layer errors."""

class LLMError(ServiceError):
    """The generation service call failed or timed out."""

class GenerationParseError(ServiceError):
    """The generation reply did not contain a parseable JSON object."""

class RepoError(ServiceError):
    """Errors from item stores (I/O, query, write)."""

class ItemExistsError(RepoError):
    """Conditional insert rejected: a record with the same ItemID exists."""
