from __future__ import annotations

from collections.abc import Hashable, Iterable


class RegistryError(Exception):
    """Base class for every error raised by a scene registry."""


class DuplicateKeyError(RegistryError, ValueError):
    def __init__(self, key: Hashable) -> None:
        super().__init__(f"Scene key {key!r} is already registered")
        self.key = key


class UnknownKeyError(RegistryError, LookupError):
    def __init__(self, key: Hashable, available: Iterable[Hashable] = ()) -> None:
        names = [str(k) for k in available]
        super().__init__(f"Scene key {key!r} is not registered. Available: {names}")
        self.key = key
        self.available = names


class LoadFailure(RegistryError):
    """A loader failed. Stored on the entry and re-raised to every caller.

    The loader's own exception is kept as `cause` and chained as `__cause__`.
    """

    def __init__(self, key: Hashable, cause: BaseException) -> None:
        super().__init__(f"Loading scene {key!r} failed: {type(cause).__name__}: {cause}")
        self.key = key
        self.cause = cause
        self.__cause__ = cause


class ResolveTimeout(RegistryError, TimeoutError):
    def __init__(self, key: Hashable, timeout_s: float) -> None:
        super().__init__(f"Gave up waiting for scene {key!r} after {timeout_s:g}s")
        self.key = key
        self.timeout_s = timeout_s


class RegistryClosedError(RegistryError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Registry is closed")
