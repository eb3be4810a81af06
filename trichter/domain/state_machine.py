from trichter.domain.enums import SubscriberAction, SubscriberState
from trichter.domain.exceptions import InvalidSubscriberTransition


class SubscriberLifecycle:
    """State machine for a live subscriber: created -> registered -> closing -> closed."""

    _allowed_transitions: dict[tuple[SubscriberState, SubscriberAction], SubscriberState] = {
        (SubscriberState.CREATED, SubscriberAction.REGISTER): SubscriberState.REGISTERED,
        (SubscriberState.CREATED, SubscriberAction.CLOSE): SubscriberState.CLOSING,
        (SubscriberState.REGISTERED, SubscriberAction.CLOSE): SubscriberState.CLOSING,
        (SubscriberState.CLOSING, SubscriberAction.RELEASE): SubscriberState.CLOSED,
    }

    @classmethod
    def transition(cls, current: SubscriberState, action: SubscriberAction) -> SubscriberState:
        # Closing twice is a no-op; teardown runs from both the normal and the error path.
        if action == SubscriberAction.CLOSE and cls.is_closing_or_closed(current):
            return current

        next_state = cls._allowed_transitions.get((current, action))
        if not next_state:
            raise InvalidSubscriberTransition(current=current, action=action)
        return next_state

    @staticmethod
    def is_closing_or_closed(state: SubscriberState) -> bool:
        return state in (SubscriberState.CLOSING, SubscriberState.CLOSED)

    @staticmethod
    def accepts_deliveries(state: SubscriberState) -> bool:
        return state == SubscriberState.REGISTERED
