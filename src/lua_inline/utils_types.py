# src/lua_inline/utils_types.py


from pathlib import Path
from typing import (
    Any,
    Literal,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from .types import OriginType, PathResolved

T = TypeVar("T")


def cast_hint(typ: type[T], value: Any) -> T:
    """Explicit cast that documents intent but is purely for type hinting.

    Useful for TypedDict construction from plain dicts where static checkers
    cannot follow the narrowing.
    """
    return cast(T, value)


def schema_from_typeddict(td: type[Any]) -> dict[str, Any]:
    """Extract field names and their declared types from a TypedDict."""
    try:
        hints = get_type_hints(td)
    except (NameError, TypeError):
        hints = dict(getattr(td, "__annotations__", {}))
    return hints


def safe_isinstance(value: Any, expected_type: Any) -> bool:  # noqa: PLR0911
    """Like isinstance(), but safe for TypedDicts, Unions, Literals and generics."""
    if expected_type is Any:
        return True

    origin = get_origin(expected_type)
    args = get_args(expected_type)

    # Union / Optional
    if origin is Union or type(expected_type).__name__ == "UnionType":
        return any(safe_isinstance(value, t) for t in args)

    if origin is Literal:
        return value in args

    # TypedDict-like → only check that it's a dict
    if isinstance(expected_type, type) and hasattr(expected_type, "__total__"):
        return isinstance(value, dict)

    if origin is list:
        if not isinstance(value, list):
            return False
        if not args:
            return True
        return all(safe_isinstance(v, args[0]) for v in cast("list[Any]", value))

    if origin is dict:
        return isinstance(value, dict)

    # bool is an int subclass; never let True pass as a number
    if expected_type in (int, float) and isinstance(value, bool):
        return False
    if expected_type is float:
        return isinstance(value, (int, float))

    try:
        return isinstance(value, expected_type)
    except TypeError:
        return False


def make_pathresolved(
    path: Path | str,
    root: Path | str,
    origin: OriginType,
) -> PathResolved:
    """Anchor a path to its root, producing an absolute PathResolved entry."""
    root = Path(root).resolve()
    raw = Path(path).expanduser()
    full = raw if raw.is_absolute() else root / raw
    return {"path": full.resolve(), "root": root, "origin": origin}
