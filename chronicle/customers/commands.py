from pydantic import Field

from ..domain import Command


class RegisterCustomer(Command[None]):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class CreateCustomer(Command[None]):
    name: str = Field(min_length=1)
    email: str | None = None
    password: str | None = None


class UpdateCustomer(Command[None]):
    name: str = Field(min_length=1)


class DeactivateCustomer(Command[None]):
    pass


class ReactivateCustomer(Command[None]):
    pass
