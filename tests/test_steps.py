"""
Tests for step labelling.

Test plan:
- StepSequence emits 1-indexed "Step i of N" and refuses to overflow
- Unlabelled sequences count but return None
- Connect flow: indicator only when both screens are shown
- Connect-and-sign flow: signing screen always counted and labelled
"""

import pytest

from near_cli_wallet.steps import StepSequence, plan_message_steps, plan_sign_in_steps


class TestStepSequence:
    def test_labels(self) -> None:
        steps = StepSequence(3)
        assert [steps.next(), steps.next(), steps.next()] == [
            "Step 1 of 3",
            "Step 2 of 3",
            "Step 3 of 3",
        ]
        assert steps.current == 3

    def test_overflow(self) -> None:
        steps = StepSequence(1)
        steps.next()
        with pytest.raises(RuntimeError, match="exceeds declared total 1"):
            steps.next()

    def test_unlabelled(self) -> None:
        steps = StepSequence(2, labelled=False)
        assert steps.next() is None
        assert steps.current == 1

    def test_total_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            StepSequence(0)


class TestPlans:
    def test_sign_in_both_screens(self) -> None:
        steps = plan_sign_in_steps(needs_account_id=True, needs_add_key=True)
        assert steps.total == 2
        assert steps.next() == "Step 1 of 2"

    @pytest.mark.parametrize(
        ("needs_account_id", "needs_add_key"),
        [(True, False), (False, True), (False, False)],
    )
    def test_sign_in_single_screen_unlabelled(
        self, needs_account_id: bool, needs_add_key: bool
    ) -> None:
        steps = plan_sign_in_steps(
            needs_account_id=needs_account_id, needs_add_key=needs_add_key
        )
        assert steps.total == 1
        assert steps.next() is None

    @pytest.mark.parametrize(
        ("needs_account_id", "needs_add_key", "total"),
        [(True, True, 3), (True, False, 2), (False, True, 2), (False, False, 1)],
    )
    def test_message_flow(
        self, needs_account_id: bool, needs_add_key: bool, total: int
    ) -> None:
        steps = plan_message_steps(
            needs_account_id=needs_account_id, needs_add_key=needs_add_key
        )
        assert steps.total == total
        assert steps.next() == f"Step 1 of {total}"
