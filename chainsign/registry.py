"""
chainsign Signer Registry

Read-only lookup from signer id to the public identity (address or public
key hex) that the signer's signatures must recover to.
"""

import json
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional, Tuple


class SignerRegistry(Mapping):
    """
    Immutable signer id -> identity mapping.

    Signer ids are unique and matched exactly. Identities are compared
    case-insensitively, since hex encodings differ only in letter case.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping] = None):
        self._entries: Dict[str, str] = {}
        for signer_id, identity in (entries or {}).items():
            self._entries[signer_id] = _check_identity(signer_id, identity)

    def __getitem__(self, signer_id: str) -> str:
        return self._entries[signer_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SignerRegistry({self._entries!r})"

    def identity_for(self, signer_id: str) -> Optional[str]:
        """Return the registered identity, or None for unknown or blank entries."""
        identity = self._entries.get(signer_id)
        return identity or None

    def identity_matches(self, signer_id: str, candidate: str) -> bool:
        """True when `candidate` equals the registered identity, ignoring case."""
        identity = self.identity_for(signer_id)
        if identity is None or not isinstance(candidate, str):
            return False
        return identity.lower() == candidate.lower()

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)


def _check_identity(signer_id: str, identity: str) -> str:
    if not isinstance(signer_id, str):
        raise ValueError(f"Signer id must be a string, got {type(signer_id)}")
    if not isinstance(identity, str):
        raise ValueError(f"Identity for '{signer_id}' must be a string, got {type(identity)}")
    return identity


def create_signer_registry(signer_mappings: Iterable[Tuple[str, str]]) -> SignerRegistry:
    """
    Build a registry from (signer_id, identity) pairs.

    Raises:
        ValueError: if a signer id appears more than once
    """
    entries: Dict[str, str] = {}
    for signer_id, identity in signer_mappings:
        if signer_id in entries:
            raise ValueError(f"Duplicate signer id in registry: {signer_id}")
        entries[signer_id] = identity
    return SignerRegistry(entries)


def load_registry(path: str) -> SignerRegistry:
    """Load a registry from a JSON object file mapping signer ids to identities."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Registry file {path} must contain a JSON object")

    return create_signer_registry(data.items())
