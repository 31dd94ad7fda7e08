"""Deferred values used by the settings objects.

A ``Provider`` wraps a parameterless callable evaluated on every ``get()``.
A ``Property`` adds an explicit value store that is checked before its
convention, so defaults track build configuration changes until a value is set.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class MissingValueError(ValueError):
    """Raised when a required deferred value has no value."""


class Provider(Generic[T]):
    """A value computed on demand."""

    def __init__(self, compute: Callable[[], Optional[T]], *, name: str = "provider") -> None:
        self._compute = compute
        self.name = name

    def get_or_none(self) -> Optional[T]:
        return self._compute()

    def get(self) -> T:
        value = self.get_or_none()
        if value is None:
            raise MissingValueError(f"No value has been specified for {self.name}")
        return value

    @property
    def is_present(self) -> bool:
        return self.get_or_none() is not None

    def map(self, transform: Callable[[T], U]) -> "Provider[U]":
        def _mapped() -> Optional[U]:
            value = self.get_or_none()
            return None if value is None else transform(value)

        return Provider(_mapped, name=self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


_UNSET: Any = object()


class Property(Provider[T]):
    """A settable value with an optional convention."""

    def __init__(self, name: str) -> None:
        super().__init__(self._resolve, name=name)
        self._value: Any = _UNSET
        self._convention: Optional[Callable[[], Optional[T]]] = None

    def set(self, value: T | Provider[T] | None) -> None:
        """Set an explicit value or provider. ``None`` stores an explicit absent value."""

        self._value = value

    def unset(self) -> None:
        self._value = _UNSET

    def convention(self, value: T | Provider[T] | Callable[[], Optional[T]] | None) -> None:
        if isinstance(value, Provider):
            self._convention = value.get_or_none
        elif callable(value):
            self._convention = value
        else:
            self._convention = lambda: value

    @property
    def is_explicit(self) -> bool:
        return self._value is not _UNSET

    def _resolve(self) -> Optional[T]:
        if self._value is not _UNSET:
            if isinstance(self._value, Provider):
                return self._value.get_or_none()
            return self._value
        if self._convention is None:
            return None
        return self._convention()


class ConventionMapping:
    """Maps field names of a convention-aware object to default thunks."""

    def __init__(self, properties: Dict[str, Property[Any]]) -> None:
        self._properties = properties

    def map(self, name: str, thunk: Callable[[], Any]) -> None:
        try:
            prop = self._properties[name]
        except KeyError as exc:
            known = ", ".join(sorted(self._properties))
            raise AttributeError(f"No convention-mapped property '{name}' (known: {known})") from exc
        prop.convention(thunk)


__all__ = ["ConventionMapping", "MissingValueError", "Property", "Provider"]
