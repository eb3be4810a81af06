from trichter.domain.enums import SubscriberAction, SubscriberState


class InvalidSubscriberTransition(ValueError):
    def __init__(self, current: SubscriberState, action: SubscriberAction) -> None:
        super().__init__(
            f"Cannot apply action '{action.value}' from state '{current.value}'."
        )
        self.current = current
        self.action = action
