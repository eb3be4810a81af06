from enum import Enum


class SubscriberState(str, Enum):
    CREATED = "created"
    REGISTERED = "registered"
    CLOSING = "closing"
    CLOSED = "closed"


class SubscriberAction(str, Enum):
    REGISTER = "register"
    CLOSE = "close"
    RELEASE = "release"
