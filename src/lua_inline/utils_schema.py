# src/lua_inline/utils_schema.py
"""Shape checks for config dicts, collected into a ValidationSummary."""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, TypedDict

from .constants import DEFAULT_HINT_CUTOFF
from .utils import plural
from .utils_types import safe_isinstance, schema_from_typeddict

AGG_STRICT_WARN = "strict_warnings"
AGG_WARN = "warnings"


class _AggEntry(TypedDict):
    msg: str  # format string with {keys} and {ctx}
    contexts: list[str]


# severity → tag → every place the tag was seen
SchemaErrorAggregator = dict[str, dict[str, _AggEntry]]


@dataclass
class ValidationSummary:
    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool  # effective strictness of the root config


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,
    *,
    is_error: bool = False,
) -> None:
    """File `msg` as an error, or as a warning that strict mode makes fatal."""
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def flush_schema_aggregators(
    summary: ValidationSummary,
    agg: SchemaErrorAggregator,
) -> None:
    """Emit one message per aggregated tag, naming every place it occurred."""
    for severity, strict in ((AGG_STRICT_WARN, True), (AGG_WARN, False)):
        for tag, entry in agg.pop(severity, {}).items():
            places = ", ".join(c.removeprefix("in ") for c in entry["contexts"])
            collect_msg(
                strict, entry["msg"].format(keys=tag, ctx=f"in {places}"), summary
            )


def _type_label(expected_type: Any) -> str:
    return getattr(expected_type, "__name__", str(expected_type))


def validate_typed_dict(
    strict: bool,
    context: str,
    val: dict[str, Any],
    typedict_cls: type[Any],
    *,
    summary: ValidationSummary,
    skip: set[str] | frozenset[str] = frozenset(),
) -> bool:
    """Type-check the known keys of `val` and report unknown ones.

    Keys in `skip` are checked elsewhere and left alone here. Unknown keys
    get a "did you mean" hint when one of the schema's keys is close.
    """
    schema = schema_from_typeddict(typedict_cls)
    valid = True

    for key, value in val.items():
        if key in skip or key not in schema:
            continue
        if not safe_isinstance(value, schema[key]):
            collect_msg(
                strict,
                f"{context}: key `{key}` expected {_type_label(schema[key])},"
                f" got {type(value).__name__}",
                summary,
                is_error=True,
            )
            valid = False

    unknown = [k for k in val if k not in schema and k not in skip]
    if not unknown:
        return valid

    joined = ", ".join(f"`{k}`" for k in unknown)
    msg = f"Unknown key{plural(unknown)} {joined} {context}."
    hints: list[str] = []
    for k in unknown:
        close = get_close_matches(k, list(schema), n=1, cutoff=DEFAULT_HINT_CUTOFF)
        if close:
            hints.append(f"'{k}' → '{close[0]}'")
    if hints:
        msg += f"\nHint: did you mean {', '.join(hints)}?"
    collect_msg(strict, msg, summary)
    return valid and not strict


def warn_keys_once(
    strict: bool,
    tag: str,
    bad_keys: set[str],
    cfg: dict[str, Any],
    context: str,
    msg: str,
    *,
    agg: SchemaErrorAggregator,
) -> set[str]:
    """Record `cfg`'s keys from `bad_keys` (any case) under one shared `tag`.

    Every context lands in the same aggregator entry, so the flushed
    summary mentions each tag once. Returns the offending keys as written.
    """
    wanted = {k.lower() for k in bad_keys}
    found = {k for k in cfg if k.lower() in wanted}
    if found:
        bucket = agg.setdefault(AGG_STRICT_WARN if strict else AGG_WARN, {})
        bucket.setdefault(tag, {"msg": msg, "contexts": []})["contexts"].append(
            context
        )
    return found
