"""Customer domain: aggregate, commands, events and the customer list read model."""

from .aggregate import Customer, CustomerStatus
from .commands import (
    CreateCustomer,
    DeactivateCustomer,
    ReactivateCustomer,
    RegisterCustomer,
    UpdateCustomer,
)
from .events import (
    EVENT_TYPES,
    CustomerCreated,
    CustomerDeactivated,
    CustomerEventType,
    CustomerReactivated,
    CustomerRegistered,
    CustomerUpdated,
)
from .projection import (
    CUSTOMERS,
    CustomerListProjection,
    CustomerRecord,
    GetCustomer,
    ListCustomers,
)

__all__ = [
    "Customer",
    "CustomerStatus",
    "RegisterCustomer",
    "CreateCustomer",
    "UpdateCustomer",
    "DeactivateCustomer",
    "ReactivateCustomer",
    "CustomerEventType",
    "EVENT_TYPES",
    "CustomerRegistered",
    "CustomerCreated",
    "CustomerUpdated",
    "CustomerDeactivated",
    "CustomerReactivated",
    "CUSTOMERS",
    "CustomerListProjection",
    "CustomerRecord",
    "GetCustomer",
    "ListCustomers",
]
