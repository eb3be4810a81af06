import pytest

from trichter.domain.enums import SubscriberAction, SubscriberState
from trichter.domain.exceptions import InvalidSubscriberTransition
from trichter.domain.state_machine import SubscriberLifecycle


def test_created_to_registered_transition() -> None:
    next_state = SubscriberLifecycle.transition(
        SubscriberState.CREATED, SubscriberAction.REGISTER
    )
    assert next_state == SubscriberState.REGISTERED


def test_registered_to_closing_to_closed() -> None:
    closing = SubscriberLifecycle.transition(
        SubscriberState.REGISTERED, SubscriberAction.CLOSE
    )
    assert closing == SubscriberState.CLOSING
    closed = SubscriberLifecycle.transition(closing, SubscriberAction.RELEASE)
    assert closed == SubscriberState.CLOSED


def test_idempotent_close() -> None:
    assert (
        SubscriberLifecycle.transition(SubscriberState.CLOSING, SubscriberAction.CLOSE)
        == SubscriberState.CLOSING
    )
    assert (
        SubscriberLifecycle.transition(SubscriberState.CLOSED, SubscriberAction.CLOSE)
        == SubscriberState.CLOSED
    )


def test_closed_subscriber_cannot_register_again() -> None:
    with pytest.raises(InvalidSubscriberTransition):
        SubscriberLifecycle.transition(SubscriberState.CLOSED, SubscriberAction.REGISTER)


def test_release_requires_closing() -> None:
    with pytest.raises(InvalidSubscriberTransition):
        SubscriberLifecycle.transition(SubscriberState.REGISTERED, SubscriberAction.RELEASE)


def test_only_registered_accepts_deliveries() -> None:
    assert SubscriberLifecycle.accepts_deliveries(SubscriberState.REGISTERED)
    assert not SubscriberLifecycle.accepts_deliveries(SubscriberState.CREATED)
    assert not SubscriberLifecycle.accepts_deliveries(SubscriberState.CLOSING)
    assert not SubscriberLifecycle.accepts_deliveries(SubscriberState.CLOSED)
