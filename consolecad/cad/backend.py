"""CAD backend boundary.

A backend clones the template document, applies a variable map and
regenerates the model.  Network clients live outside this package; tests
use in-process fakes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from pydantic import BaseModel

from consolecad.cad.mapping import VariableUnit
from consolecad.cad.runs import CadRunStep, TemplateRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CadBackendError(Exception):
    """A backend step failed; ``step`` names which one."""

    def __init__(self, step: CadRunStep, message: str) -> None:
        super().__init__(message)
        self.step = step
        self.message = message


class CadAuthError(CadBackendError):
    """Credentials were rejected; a refresh may fix it."""


class CadGeneration(BaseModel):
    did: str
    wid: str
    eid: str
    url: str | None = None
    variables_applied: int = 0


class CadBackend(ABC):
    """Abstract CAD backend."""

    name: str = "cad"

    @abstractmethod
    def generate(
        self,
        template: TemplateRef,
        *,
        project_id: str,
        revision: int,
        variables: dict[str, int],
        units: dict[str, VariableUnit],
    ) -> CadGeneration:
        """Clone *template*, apply *variables* and regenerate.

        Raises
        ------
        CadBackendError
            Tagged with the failing step.
        CadAuthError
            When credentials are rejected.
        """

    def refresh_credentials(self) -> None:
        """Refresh access credentials.  Default is a no-op."""


def call_with_auth_retry(backend: CadBackend, call: Callable[[], T]) -> T:
    """Run *call*; on :class:`CadAuthError` refresh credentials and retry exactly once."""
    try:
        return call()
    except CadAuthError as exc:
        logger.info("%s rejected credentials at %s; refreshing", backend.name, exc.step)
        backend.refresh_credentials()
        return call()
