from __future__ import annotations

import re

from fantasy_relay.addressing.resource import ResourceAddress
from fantasy_relay.core.errors import InvalidChaining

_name_re = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_key_reserved_re = re.compile(r"[/;=,?#&\s]")
# Commas separate multi-valued parameters, so they are allowed in values.
_value_reserved_re = re.compile(r"[/;=?#&\s]")


# Keyed collections of the remote service and their resource names. Only these
# take the `{collection};{resource}_keys=...` form.
KEYED_COLLECTIONS = {
    "games": "game",
    "leagues": "league",
    "teams": "team",
    "players": "player",
    "transactions": "transaction",
    "users": "user",
}
_COLLECTION_OF = {resource: collection for collection, resource in KEYED_COLLECTIONS.items()}


def plural(entity_type: str) -> str | None:
    """Collection name for a keyed collection or resource (`league` -> `leagues`)."""

    if entity_type in KEYED_COLLECTIONS:
        return entity_type
    return _COLLECTION_OF.get(entity_type)


def _check_name(value: str, what: str) -> None:
    if not _name_re.match(value):
        raise InvalidChaining(f"Invalid {what} {value!r}")


def _render_pairs(
    owner: ResourceAddress, pairs: tuple[tuple[str, str], ...], reserved: set[str]
) -> str:
    text = ""
    for name, value in sorted(pairs):
        _check_name(name, "parameter name")
        if name in reserved:
            raise InvalidChaining(
                f"Parameter {name!r} on {owner.entity_type!r} collides with a reserved parameter"
            )
        if not value or _value_reserved_re.search(value):
            raise InvalidChaining(f"Invalid value {value!r} for parameter {name!r}")
        text += f";{name}={value}"
    return text


def _render_out(owner: ResourceAddress) -> str:
    names: list[str] = []
    for selector in owner.out:
        if selector.chain:
            raise InvalidChaining(
                f"out selector {selector.entity_type!r} under {owner.entity_type!r} "
                "cannot carry its own sub-resource chain"
            )
        if selector.keys or selector.params or selector.filters or selector.out:
            raise InvalidChaining(
                f"out selector {selector.entity_type!r} under {owner.entity_type!r} "
                "must be a bare sub-resource name"
            )
        _check_name(selector.entity_type, "out selector")
        names.append(selector.entity_type)
    return ";out=" + ",".join(names)


def _render_base(address: ResourceAddress) -> tuple[str, set[str]]:
    _check_name(address.entity_type, "entity type")
    for key in address.keys:
        if not key or _key_reserved_re.search(key):
            raise InvalidChaining(f"Invalid key {key!r} for {address.entity_type!r}")

    if len(address.keys) == 1 and address.entity_type not in KEYED_COLLECTIONS:
        return f"{address.entity_type}/{address.keys[0]}", {"out"}

    if address.keys:
        collection = plural(address.entity_type)
        if collection is None:
            raise InvalidChaining(
                f"{address.entity_type!r} has no keyed collection form; "
                f"expected one of {', '.join(sorted(KEYED_COLLECTIONS))}"
            )
        key_param = f"{KEYED_COLLECTIONS[collection]}_keys"
        keys = ",".join(address.keys)
        return f"{collection};{key_param}={keys}", {"out", key_param}

    return address.entity_type, {"out"}


def compose(address: ResourceAddress) -> str:
    """
    Render a ResourceAddress into the remote service's path syntax.

    `{entity}` when keyless, `{entity}/{key}` for a single resource, or
    `{entities};{entity}_keys=k1,k2` for the collection form; then segment
    params, then `/child` for every chained address (recursively), then the
    sorted `;name=value` filters, then a single `;out=a,b` clause.

    Pure function: no I/O, deterministic for equal inputs. Raises
    InvalidChaining for anything the remote service cannot express.
    """

    text, reserved = _render_base(address)
    text += _render_pairs(address, address.params, reserved)

    for child in address.chain:
        text += "/" + compose(child)

    # Filters land on the tail; key params only collide when nothing follows them.
    tail_reserved = reserved if not address.chain else {"out"}
    text += _render_pairs(address, address.filters, tail_reserved)

    if address.out:
        text += _render_out(address)

    return text
