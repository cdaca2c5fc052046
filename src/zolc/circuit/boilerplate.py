"""Boilerplate parameter nodes for one secret state variable."""

from __future__ import annotations

import re

from ..traverse.binding import MappingKey
from ..traverse.indicator import StateVariableIndicator
from ..traverse.node_types import Node
from .nodes import build_node

# Category order within one state variable's group of parameters.
PARAMETER_CATEGORIES: tuple[str, ...] = (
    "mapping",
    "PoKoSK",
    "nullification",
    "oldCommitmentPreimage",
    "oldCommitmentExistence",
    "newCommitment",
    "encryption",
)

_NON_WORD = re.compile(r"[^A-Za-z0-9_]+")


def mapping_key_parameter(key_name: str) -> str:
    """Circuit-side parameter name for a mapping key (``msg.sender`` -> ``msg``)."""
    if key_name == "msg.sender":
        return "msg"
    return _NON_WORD.sub("_", key_name).strip("_")


def _categories(
    new_commitments_required: bool,
    old_commitment_access_required: bool,
    encrypted: bool,
) -> list[str]:
    categories: list[str] = []
    if old_commitment_access_required:
        categories.extend(["PoKoSK", "nullification", "oldCommitmentPreimage", "oldCommitmentExistence"])
    if new_commitments_required:
        categories.append("newCommitment")
        if encrypted:
            categories.append("encryption")
    return categories


def collect_parameters(indicator: StateVariableIndicator, encrypted: bool = False) -> list[Node]:
    """Boilerplate parameter nodes for a finalised state-variable indicator.

    Mappings get one group per key, named ``<state>_<key>`` and led by a
    ``mapping`` entry; other states get a single group named after the state.
    """
    if indicator.is_whole is None:
        return []
    groups: list[tuple[str, str | None, MappingKey | None]] = []
    if indicator.is_mapping:
        for key_name, key in indicator.mapping_keys.items():
            key_param = mapping_key_parameter(key_name)
            groups.append((indicator.name + "_" + key_param, key_param, key))
    else:
        groups.append((indicator.name, None, None))
    parameters: list[Node] = []
    for name, key_param, key in groups:
        if key is not None:
            is_modified = key.is_modified
            is_accessed = key.is_accessed or (indicator.is_accessed and not key.is_modified)
            is_nullified = key.is_nullified
        else:
            is_modified = indicator.is_modified
            is_accessed = indicator.is_accessed
            is_nullified = indicator.is_nullified
        fields: dict[str, object] = {
            "name": name,
            "isWhole": indicator.is_whole,
            "isPartitioned": indicator.is_partitioned,
            "isAccessed": is_accessed,
            "isNullified": is_nullified,
            "initialisationRequired": bool(indicator.is_whole) and is_modified,
            "mappingKeyName": key_param,
        }
        categories = _categories(
            is_modified,
            is_nullified or is_accessed,
            encrypted,
        )
        if key_param is not None:
            categories.insert(0, "mapping")
        for bp_type in PARAMETER_CATEGORIES:
            if bp_type in categories:
                parameters.append(build_node("Boilerplate", dict(fields, bpType=bp_type)))
    return parameters
