"""
Normalization primitives shared by every reconciler.

- to_comparable_string: the single identity/equality primitive
- reconcile_sequence: case-insensitive, order-preserving union of text lists
- estimate_confidence: observation count -> confidence tier
"""

from typing import Any, Iterable, Optional

from ...core.vocabulary import ConfidenceTier


def to_comparable_string(value: Any) -> str:
    """
    Null-safe, lower-cased string form of any value.

    None maps to "". Never raises; objects fall back to their default
    string conversion.
    """
    if value is None:
        return ""
    try:
        return str(value).lower()
    except Exception:
        return object.__repr__(value).lower()


def field_value(source: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-bearing object."""
    if source is None:
        return default
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def reconcile_sequence(
    existing: Optional[Iterable[Any]],
    incoming: Optional[Iterable[Any]]
) -> list:
    """
    Merge two ordered text sequences without case-insensitive duplicates.

    ``existing`` is kept verbatim (order and casing). Each incoming item
    that is non-empty after normalization and not already present is
    appended in its original casing.
    """
    merged = list(existing or [])
    seen = {to_comparable_string(item) for item in merged}

    for item in incoming or []:
        key = to_comparable_string(item)
        if not key or key in seen:
            continue
        merged.append(item)
        seen.add(key)

    return merged


def estimate_confidence(count: int) -> ConfidenceTier:
    """
    Map an observation count to a confidence tier.

    0 -> none, 1-2 -> low, 3-5 -> medium, 6+ -> high.
    """
    if count <= 0:
        return ConfidenceTier.NONE
    if count <= 2:
        return ConfidenceTier.LOW
    if count <= 5:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.HIGH
