"""Public API: the ConsoleCad facade and project operations."""

from consolecad.api.errors import PreconditionError, ProjectNotFoundError
from consolecad.api.facade import ConfirmResult, ConsoleCad, GenerateResult

__all__ = [
    "ConfirmResult",
    "ConsoleCad",
    "GenerateResult",
    "PreconditionError",
    "ProjectNotFoundError",
]
