# Standard library imports
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T")


class BaseContainer:
    """
    Minimal dependency injection container.

    Every registration is a singleton instance keyed by its type.
    """

    def __init__(self) -> None:
        self._singletons: Dict[Type[Any], Any] = {}

    def register_singleton(self, interface: Type[T], instance: T) -> None:
        self._singletons[interface] = instance

    def get(self, interface: Type[T]) -> T:
        """
        Resolve a dependency.

        Raises:
            ValueError: If nothing is registered for the interface
        """
        if interface in self._singletons:
            return self._singletons[interface]
        raise ValueError(f"No registration for {getattr(interface, '__name__', interface)}")
