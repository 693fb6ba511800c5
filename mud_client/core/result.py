from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from mud_client.core.errors import RemoteError, RemoteProtocolError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    message: str


Result = Ok[T] | Err


def _error_text(err: Any) -> str:
    """Flatten a backend error payload into display text.

    Backends answer either a plain string or a single-case variant such as
    `{"NotFound": null}` / `{"GenericError": {"message": "..."}}`.
    """

    if isinstance(err, str):
        return err
    if isinstance(err, dict) and len(err) == 1:
        ((tag, detail),) = err.items()
        if isinstance(detail, dict) and isinstance(detail.get("message"), str):
            return detail["message"]
        if isinstance(detail, str) and detail:
            return f"{tag}: {detail}"
        return str(tag)
    return str(err)


def result_from_wire(raw: Any, parse: Callable[[Any], T] | None = None) -> Result[T]:
    """Convert a wire `{"ok": ...}` / `{"err": ...}` object into Ok/Err.

    Anything else (missing tag, both tags, non-object) is rejected instead of being
    treated as a failure or a success.
    """

    if not isinstance(raw, dict) or len(raw) != 1:
        raise RemoteProtocolError(f"Malformed result: {raw!r}")
    if "ok" in raw:
        value = raw["ok"]
        return Ok(parse(value) if parse is not None else value)
    if "err" in raw:
        return Err(_error_text(raw["err"]))
    raise RemoteProtocolError(f"Malformed result: {raw!r}")


def unwrap(result: Result[T]) -> T:
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Err):
        raise RemoteError(result.message)
    raise RemoteProtocolError(f"Expected Ok or Err, got {type(result).__name__}")
