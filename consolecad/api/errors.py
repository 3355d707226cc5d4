"""Exceptions raised by pipeline operations invoked out of order."""

from __future__ import annotations


class PreconditionError(Exception):
    """A pipeline step was invoked before its inputs exist or are approved."""


class ProjectNotFoundError(PreconditionError):
    """The project id has no ledger."""

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id
