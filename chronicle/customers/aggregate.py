from enum import Enum

from ..domain import Aggregate, DomainRuleViolation
from ..routing import applies_event, handles_command
from .commands import (
    CreateCustomer,
    DeactivateCustomer,
    ReactivateCustomer,
    RegisterCustomer,
    UpdateCustomer,
)
from .events import (
    CustomerCreated,
    CustomerDeactivated,
    CustomerReactivated,
    CustomerRegistered,
    CustomerUpdated,
)


class CustomerStatus(str, Enum):
    NONEXISTENT = "nonexistent"
    REGISTERED = "registered"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Customer(Aggregate):
    """A customer account, folded from its CUSTOMER_* events.

    A customer may be registered first (an intent still waiting for the
    email uniqueness check) or created directly. Only created customers
    can be updated, deactivated and reactivated.
    """

    status: CustomerStatus = CustomerStatus.NONEXISTENT
    name: str = ""
    email: str | None = None

    @property
    def exists(self) -> bool:
        return self.status in (CustomerStatus.ACTIVE, CustomerStatus.INACTIVE)

    @handles_command
    def handle_register(self, cmd: RegisterCustomer) -> None:
        if self.status is not CustomerStatus.NONEXISTENT:
            raise DomainRuleViolation("can not register same customer more than once")
        self.emit(CustomerRegistered(name=cmd.name, email=cmd.email))

    @handles_command
    def handle_create(self, cmd: CreateCustomer) -> None:
        if self.exists:
            raise DomainRuleViolation("can not create same customer more than once")
        self.emit(
            CustomerCreated(name=cmd.name, email=cmd.email or self.email, password=cmd.password)
        )

    @handles_command
    def handle_update(self, cmd: UpdateCustomer) -> None:
        if not self.exists:
            raise DomainRuleViolation("can not update non-existent customer")
        self.emit(CustomerUpdated(name=cmd.name))

    @handles_command
    def handle_deactivate(self, cmd: DeactivateCustomer) -> None:
        if not self.exists:
            raise DomainRuleViolation("can not deactivate non-existent customer")
        if self.status is CustomerStatus.INACTIVE:
            raise DomainRuleViolation("customer is already deactivated")
        self.emit(CustomerDeactivated())

    @handles_command
    def handle_reactivate(self, cmd: ReactivateCustomer) -> None:
        if not self.exists:
            raise DomainRuleViolation("can not reactivate non-existent customer")
        if self.status is CustomerStatus.ACTIVE:
            raise DomainRuleViolation("customer is already active")
        self.emit(CustomerReactivated())

    @applies_event
    def apply_registered(self, evt: CustomerRegistered) -> None:
        self.status = CustomerStatus.REGISTERED
        self.name = evt.name
        self.email = evt.email

    @applies_event
    def apply_created(self, evt: CustomerCreated) -> None:
        self.status = CustomerStatus.ACTIVE
        self.name = evt.name
        self.email = evt.email

    @applies_event
    def apply_updated(self, evt: CustomerUpdated) -> None:
        self.name = evt.name

    @applies_event
    def apply_deactivated(self, evt: CustomerDeactivated) -> None:
        self.status = CustomerStatus.INACTIVE

    @applies_event
    def apply_reactivated(self, evt: CustomerReactivated) -> None:
        self.status = CustomerStatus.ACTIVE
