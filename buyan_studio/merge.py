"""Merge engine: reconcile incoming assets with the Asset Store.

Three disjoint cases per key:
  only in new  → new value
  only in old  → old value
  in both      → resolved by a conflict rule; assets use last-writer-wins,
                 so an import always overwrites existing artwork

Malformed incoming SVG does not block the batch. In the default (lenient)
mode the failing identity gets an empty placeholder document; in strict
mode it is left out of the merge. Either way it is reported in
MergeResult.failures and logged.

Removal (single identity or everything) also lives here so that every
change to the store goes through one module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import NamedTuple, TypeVar

from buyan_studio.assets import AssetStore, SvgDocument, SvgParseError, parse_svg

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

Resolve = Callable[[K, V, V], V]


def take_new(key: K, old: V, new: V) -> V:
    """Last-writer-wins conflict rule."""
    return new


def reconcile(
    old: Mapping[K, V],
    new: Mapping[K, V],
    resolve: Resolve = take_new,
) -> dict[K, V]:
    """Return a new mapping containing every key of `old` and `new`.

    Keys present in both are passed to `resolve(key, old_value, new_value)`.
    Neither input is modified.
    """
    merged: dict[K, V] = {}
    for key, value in old.items():
        if key in new:
            merged[key] = resolve(key, value, new[key])
        else:
            merged[key] = value
    for key, value in new.items():
        if key not in old:
            merged[key] = value
    return merged


class MergeResult(NamedTuple):
    store: AssetStore
    failures: dict[str, str]  # identity -> parse error message


def parse_batch(
    texts: Mapping[str, str], *, strict: bool = False
) -> tuple[AssetStore, dict[str, str]]:
    """Parse identity -> SVG text into documents, collecting failures."""
    parsed: AssetStore = {}
    failures: dict[str, str] = {}
    for identity, text in texts.items():
        try:
            parsed[identity] = parse_svg(text)
        except SvgParseError as e:
            failures[identity] = str(e)
            if strict:
                logger.warning("Rejected asset %r: %s", identity, e)
            else:
                logger.warning("Asset %r is not valid SVG, using empty placeholder: %s", identity, e)
                parsed[identity] = SvgDocument.empty()
    return parsed, failures


def merge_assets(
    store: AssetStore, texts: Mapping[str, str], *, strict: bool = False
) -> MergeResult:
    """Merge an incoming batch of identity -> SVG text into `store`."""
    incoming, failures = parse_batch(texts, strict=strict)
    return MergeResult(reconcile(store, incoming), failures)


def remove_assets(store: AssetStore, identities: Iterable[str]) -> AssetStore:
    """Return a copy of `store` without the given identities."""
    drop = set(identities)
    return {identity: doc for identity, doc in store.items() if identity not in drop}


def clear_assets() -> AssetStore:
    return {}
