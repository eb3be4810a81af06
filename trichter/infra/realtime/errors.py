class PublishError(RuntimeError):
    """Raised when an event cannot be handed to the notification hub."""


class HubClosedError(PublishError):
    def __init__(self) -> None:
        super().__init__("Notification hub is not running")


class TransportUpgradeError(ConnectionError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Realtime transport upgrade failed: {reason}")
        self.reason = reason


class DeliveryError(ConnectionError):
    def __init__(self, subscriber_id: str, reason: str) -> None:
        super().__init__(f"Delivery to subscriber '{subscriber_id}' failed: {reason}")
        self.subscriber_id = subscriber_id
        self.reason = reason
