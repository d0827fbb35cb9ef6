"""Customer list read model.

Keeps one record per created customer in the ``customers`` collection.
CUSTOMER_REGISTERED is not handled: a registration stays an intent until the
email uniqueness check has passed and a CreateCustomer command followed.
"""

from pydantic import BaseModel, Field

from ..application.projections import Projection, Record
from ..domain import Event, ProjectionInvariantViolation, Query
from ..routing import handles_event, handles_query
from .events import CustomerCreated, CustomerDeactivated, CustomerReactivated, CustomerUpdated

CUSTOMERS = "customers"


class CustomerRecord(BaseModel):
    id: str
    name: str
    email: str | None = None
    password: str | None = Field(default=None, exclude=True, repr=False)
    active: int

    @classmethod
    def from_record(cls, id: str, record: Record) -> "CustomerRecord":
        return cls(id=id, **record)


class GetCustomer(Query[CustomerRecord | None]):
    customer_id: str


class ListCustomers(Query[list[CustomerRecord]]):
    active_only: bool = False


class CustomerListProjection(Projection):
    @handles_event
    async def on_customer_created(self, event: Event[CustomerCreated]) -> None:
        # A duplicate creation should have been rejected by the aggregate
        if await self.adapter.get(CUSTOMERS, event.aggregate_id) is not None:
            raise ProjectionInvariantViolation("Customer already exists")
        await self.adapter.insert(
            CUSTOMERS,
            event.aggregate_id,
            {
                "name": event.data.name,
                "email": event.data.email,
                "password": event.data.password,
                "active": 1,
            },
        )

    @handles_event
    async def on_customer_updated(self, event: Event[CustomerUpdated]) -> None:
        customer = await self._require(event)
        customer["name"] = event.data.name
        await self.adapter.update(CUSTOMERS, event.aggregate_id, customer)

    @handles_event
    async def on_customer_deactivated(self, event: Event[CustomerDeactivated]) -> None:
        customer = await self._require(event)
        customer["active"] = 0
        await self.adapter.update(CUSTOMERS, event.aggregate_id, customer)

    @handles_event
    async def on_customer_reactivated(self, event: Event[CustomerReactivated]) -> None:
        customer = await self._require(event)
        customer["active"] = 1
        await self.adapter.update(CUSTOMERS, event.aggregate_id, customer)

    @handles_query
    async def get_customer(self, query: GetCustomer) -> CustomerRecord | None:
        record = await self.adapter.get(CUSTOMERS, query.customer_id)
        if record is None:
            return None
        return CustomerRecord.from_record(query.customer_id, record)

    @handles_query
    async def list_customers(self, query: ListCustomers) -> list[CustomerRecord]:
        customers = []
        async for id, record in self.adapter.find_all(CUSTOMERS):
            if query.active_only and not record["active"]:
                continue
            customers.append(CustomerRecord.from_record(id, record))
        return customers

    async def _require(self, event: Event) -> Record:
        # Missing here means a broken domain model or an incomplete rebuild
        customer = await self.adapter.get(CUSTOMERS, event.aggregate_id)
        if customer is None:
            raise ProjectionInvariantViolation("Customer not found")
        return customer
