from enum import Enum
from typing import ClassVar

from ..domain import DomainEvent


class CustomerEventType(str, Enum):
    """Every kind of event a customer can go through."""

    CUSTOMER_REGISTERED = "CUSTOMER_REGISTERED"
    CUSTOMER_CREATED = "CUSTOMER_CREATED"
    CUSTOMER_UPDATED = "CUSTOMER_UPDATED"
    CUSTOMER_DEACTIVATED = "CUSTOMER_DEACTIVATED"
    CUSTOMER_REACTIVATED = "CUSTOMER_REACTIVATED"


class CustomerRegistered(DomainEvent):
    """Intent to create a customer, pending the email uniqueness check."""

    event_name: ClassVar[str] = CustomerEventType.CUSTOMER_REGISTERED.value

    name: str
    email: str


class CustomerCreated(DomainEvent):
    event_name: ClassVar[str] = CustomerEventType.CUSTOMER_CREATED.value

    name: str
    email: str | None = None
    password: str | None = None


class CustomerUpdated(DomainEvent):
    event_name: ClassVar[str] = CustomerEventType.CUSTOMER_UPDATED.value

    name: str


class CustomerDeactivated(DomainEvent):
    event_name: ClassVar[str] = CustomerEventType.CUSTOMER_DEACTIVATED.value


class CustomerReactivated(DomainEvent):
    event_name: ClassVar[str] = CustomerEventType.CUSTOMER_REACTIVATED.value


EVENT_TYPES: dict[CustomerEventType, type[DomainEvent]] = {
    CustomerEventType.CUSTOMER_REGISTERED: CustomerRegistered,
    CustomerEventType.CUSTOMER_CREATED: CustomerCreated,
    CustomerEventType.CUSTOMER_UPDATED: CustomerUpdated,
    CustomerEventType.CUSTOMER_DEACTIVATED: CustomerDeactivated,
    CustomerEventType.CUSTOMER_REACTIVATED: CustomerReactivated,
}
