"""Type loading utilities for MongoDB documents.

Event payloads are stored with the fully qualified name of their class so
they can be validated back into the right DomainEvent subclass.
"""

import importlib
from functools import lru_cache
from typing import Any


def get_qualified_name(cls: type) -> str:
    """Get the fully qualified name of a class.

    Example:
        >>> from chronicle.customers import CustomerCreated
        >>> get_qualified_name(CustomerCreated)
        'chronicle.customers.events.CustomerCreated'
    """
    return f"{cls.__module__}.{cls.__qualname__}"


@lru_cache(maxsize=256)
def load_type(qualified_name: str) -> type[Any]:
    """Load a type from its fully qualified name.

    Raises:
        ImportError: If the module cannot be imported or class doesn't exist.
    """
    module_path, _, class_name = qualified_name.rpartition(".")
    if not module_path:
        raise ImportError(f"Invalid qualified name: {qualified_name}")

    module = importlib.import_module(module_path)
    try:
        return getattr(module, class_name)  # type: ignore[no-any-return]
    except AttributeError:
        raise ImportError(f"Module '{module_path}' has no attribute '{class_name}'") from None
