# app/pipeline/identities.py
"""
Bidirectional address <-> identity table.

Built once per run from the identity source and read-only afterwards, so the
orchestrator can hand the same instance to every normalization call.
"""
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from app.core.errors import MalformedIdentityData

IdentityInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


MAX_IDENTITY = 0xFFFFFFFFFFFFFFFF


def is_identity_value(value: Any) -> bool:
    # bool is an int subclass; JSON true/false is never an identity
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_IDENTITY


class IdentityDirectory:
    def __init__(self, address_to_id: Dict[str, int], id_to_address: Dict[int, str]):
        self._address_to_id = address_to_id
        self._id_to_address = id_to_address

    @classmethod
    def build(cls, address_to_identity: IdentityInput) -> "IdentityDirectory":
        pairs = address_to_identity.items() if isinstance(address_to_identity, Mapping) else address_to_identity
        address_to_id: Dict[str, int] = {}
        id_to_address: Dict[int, str] = {}
        for address, identity in pairs:
            if not isinstance(address, str) or not address:
                raise MalformedIdentityData(f"identity address must be a non-empty string, got {address!r}")
            if not is_identity_value(identity):
                raise MalformedIdentityData(f"identity for {address} must be a non-negative integer, got {identity!r}")
            if address in address_to_id:
                raise MalformedIdentityData(f"duplicate address {address}")
            if identity in id_to_address:
                raise MalformedIdentityData(
                    f"identity {identity} mapped from both {id_to_address[identity]} and {address}"
                )
            address_to_id[address] = identity
            id_to_address[identity] = address
        return cls(address_to_id, id_to_address)

    @classmethod
    def empty(cls) -> "IdentityDirectory":
        return cls({}, {})

    @property
    def address_to_id(self) -> Mapping[str, int]:
        return MappingProxyType(self._address_to_id)

    @property
    def id_to_address(self) -> Mapping[int, str]:
        return MappingProxyType(self._id_to_address)

    def resolve(self, address: str) -> Optional[int]:
        return self._address_to_id.get(address)

    def address_of(self, identity: int) -> Optional[str]:
        return self._id_to_address.get(identity)

    def __len__(self) -> int:
        return len(self._address_to_id)

    def __contains__(self, address: object) -> bool:
        return address in self._address_to_id
