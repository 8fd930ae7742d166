from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Union

FilterValue = Union[str, int, bool, Sequence[Union[str, int]]]
Segment = Union["ResourceAddress", str]
Params = Union[Mapping[str, FilterValue], Iterable[tuple[str, FilterValue]], None]


def _render_value(value: FilterValue) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int)):
        return str(value)
    return ",".join(str(v) for v in value)


def _as_pairs(value: Params) -> tuple[tuple[str, str], ...]:
    pairs = value.items() if isinstance(value, Mapping) else (value or ())
    return tuple(sorted((str(k), _render_value(v)) for k, v in pairs))


def _as_segment(value: Segment) -> ResourceAddress:
    if isinstance(value, ResourceAddress):
        return value
    return ResourceAddress(value)


def _as_keys(value: str | Iterable[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, init=False)
class ResourceAddress:
    """
    One position in the remote resource/collection graph.

    - `entity_type` names a resource (`league`), a collection (`leagues`) or a
      keyless sub-resource (`standings`).
    - `keys` empty => collection-scoped segment; non-empty => entity-scoped.
    - `params` are selector parameters bound to this segment itself
      (`users;use_login=1`), rendered before the chain.
    - `chain` holds nested addresses rendered as `/child` after this segment.
    - `filters` qualify the tail of the rendered path, sorted by name.
    - `out` lists sibling sub-resources fetched with the tail in one round trip.

    Plain strings are accepted wherever a segment is expected.
    """

    entity_type: str
    keys: tuple[str, ...] = ()
    params: tuple[tuple[str, str], ...] = ()
    chain: tuple[ResourceAddress, ...] = ()
    filters: tuple[tuple[str, str], ...] = ()
    out: tuple[ResourceAddress, ...] = ()

    def __init__(
        self,
        entity_type: str,
        keys: str | Iterable[str] | None = None,
        params: Params = None,
        chain: Iterable[Segment] = (),
        filters: Params = None,
        out: Iterable[Segment] = (),
    ) -> None:
        object.__setattr__(self, "entity_type", entity_type)
        object.__setattr__(self, "keys", _as_keys(keys))
        object.__setattr__(self, "params", _as_pairs(params))
        object.__setattr__(self, "chain", tuple(_as_segment(s) for s in chain))
        object.__setattr__(self, "filters", _as_pairs(filters))
        object.__setattr__(self, "out", tuple(_as_segment(s) for s in out))

    @property
    def is_collection(self) -> bool:
        return not self.keys

    @property
    def is_entity_scoped(self) -> bool:
        return bool(self.keys)

    # -----------------------------
    # Builder helpers (return new addresses)
    # -----------------------------

    def sub(self, *segments: Segment) -> ResourceAddress:
        """Append segments to the end of this address' sub-resource chain."""

        return replace(self, chain=self.chain + tuple(_as_segment(s) for s in segments))

    def where(self, **filters: FilterValue) -> ResourceAddress:
        merged = dict(self.filters)
        merged.update({k: _render_value(v) for k, v in filters.items()})
        return replace(self, filters=merged)

    def with_out(self, *selectors: Segment) -> ResourceAddress:
        return replace(self, out=self.out + tuple(_as_segment(s) for s in selectors))
