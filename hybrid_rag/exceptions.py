"""
Error taxonomy for the hybrid retrieval core.

- InputError: bad configuration passed by the caller (fail fast, never clamped)
- DependencyError: an external collaborator failed (embedding provider,
  object store, vector index, extraction). Not retried here - retry policy
  belongs to whoever orchestrates the request.
"""


class HybridRagError(Exception):
    """Base class for all errors raised by hybrid_rag"""


class InputError(HybridRagError, ValueError):
    """Invalid caller-supplied configuration (e.g. chunk_overlap >= chunk_size)"""


class DependencyError(HybridRagError):
    """
    An external collaborator call failed.
    
    Args:
        dependency: Human-readable collaborator name ("embedding provider", ...)
        message: What went wrong
    """
    
    def __init__(self, dependency: str, message: str):
        self.dependency = dependency
        super().__init__(f"{dependency} failed: {message}")
