"""ExitCodeValidator — optional allow-list check on a finished exec."""

from __future__ import annotations

from collections.abc import Iterable

from rexec.errors import ExitCodeValidationError
from rexec.models import ExecOutcome


class ExitCodeValidator:
    """Accept an exit code if no allow-list is set or the code is in it."""

    def __init__(self, allowed: Iterable[int] | None = None) -> None:
        self._allowed = list(allowed or [])

    @property
    def allowed(self) -> list[int]:
        return list(self._allowed)

    def is_allowed(self, exit_code: int | None) -> bool:
        if not self._allowed:
            return True
        return (exit_code or 0) in self._allowed

    def check(self, outcome: ExecOutcome, *, command: list[str], index: int) -> None:
        """Raise :class:`ExitCodeValidationError` if *outcome* is not acceptable.

        A missing exit code counts as ``0``.
        """
        if self.is_allowed(outcome.exit_code):
            return
        raise ExitCodeValidationError(
            exit_code=outcome.exit_code or 0,
            allowed=self.allowed,
            command=command,
            index=index,
            response=outcome,
        )
