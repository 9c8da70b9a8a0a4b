"""Observable state: fields that record changes and notify watchers"""

import collections
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

MISSING = object()


class Field(Generic[T]):
    """A state attribute descriptor with a default value"""

    def __init__(self, default: T) -> None:
        self._default = default
        self._name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    def __get__(self, instance: "State | None", owner: type) -> Any:
        if instance is None:
            return self
        return instance.__dict__["_field_values"].setdefault(self._name, self._default)

    def __set__(self, instance: "State", value: T) -> None:
        values = instance.__dict__["_field_values"]
        old_value = values.get(self._name, MISSING)
        values[self._name] = value
        if old_value is MISSING or old_value != value:
            instance._changed(self._name)


class State:
    """Tracks changes to its fields and notifies registered watchers"""

    def __init__(self) -> None:
        self._field_values: dict[str, Any] = {}
        self._changes: set[str] = set()
        self._watchers: dict[str, list[Callable[[], None]]] = (
            collections.defaultdict(list)
        )

    def _changed(self, name: str) -> None:
        self._changes.add(name)
        for callback in list(self._watchers[name]):
            callback()

    @property
    def changes(self) -> set[str]:
        """Get the set of field names that have changed."""
        return self._changes.copy()

    def clear_changes(self) -> None:
        """Clear the changes set."""
        self._changes.clear()

    def register_watcher(self, name: str, callback: Callable[[], None]) -> None:
        """Register a callback to be notified when a field changes"""
        self._watchers[name].append(callback)
