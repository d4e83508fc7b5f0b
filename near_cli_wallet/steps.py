"""
Step counters for multi-screen flows.

A flow decides up front how many screens the user will see, then takes
one label per screen as it reaches it. Creating the sequence once per
flow keeps the "of N" total and the emitted ordinals from drifting apart.
"""

from __future__ import annotations


class StepSequence:
    """Emits "Step i of N" labels, 1-indexed.

    Args:
        total: Number of screens in the flow.
        labelled: When False, ``next()`` still counts but returns None,
            for flows that only show a step indicator sometimes.
    """

    def __init__(self, total: int, *, labelled: bool = True) -> None:
        if total < 1:
            raise ValueError(f"total must be >= 1, got {total}")
        self._total = total
        self._labelled = labelled
        self._current = 0

    @property
    def total(self) -> int:
        return self._total

    @property
    def current(self) -> int:
        """Ordinal of the last step taken, 0 before the first."""
        return self._current

    def next(self) -> str | None:
        """Advance to the next step and return its label.

        Raises:
            RuntimeError: If the flow takes more steps than it declared.
        """
        if self._current >= self._total:
            raise RuntimeError(
                f"step {self._current + 1} exceeds declared total {self._total}"
            )
        self._current += 1
        if not self._labelled:
            return None
        return f"Step {self._current} of {self._total}"


def plan_sign_in_steps(*, needs_account_id: bool, needs_add_key: bool) -> StepSequence:
    """Connect flow: account id prompt and/or key grant.

    The indicator only appears when both screens are shown.
    """
    total = max(1, int(needs_account_id) + int(needs_add_key))
    return StepSequence(total, labelled=total > 1)


def plan_message_steps(*, needs_account_id: bool, needs_add_key: bool) -> StepSequence:
    """Connect-and-sign-message flow: the signing screen plus optional ones."""
    return StepSequence(1 + int(needs_account_id) + int(needs_add_key))
