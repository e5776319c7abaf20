"""
Immutable tag sets for samples.

A SampleTags instance is created once and then shared by many samples, so
comparisons check identity before contents and the JSON encoding is computed
on first use and cached. An unset tag set is represented by ``None``; the
module level helpers accept ``None`` and treat it as an empty set.
"""

import json
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


class SampleTags:
    """
    Immutable str -> str mapping of sample tags.

    Direct modification is not possible once a tag set is created: use
    clone_tags() to get a mutable copy and build a new SampleTags from it.
    """

    __slots__ = ("_tags", "_json")

    def __init__(self, tags: Optional[Dict[str, str]] = None):
        # Callers should go through copy_of() or consume()
        self._tags: Dict[str, str] = tags if tags is not None else {}
        self._json: Optional[bytes] = None

    @classmethod
    def copy_of(cls, data: Optional[Mapping[str, str]]) -> "SampleTags":
        """Copy the supplied mapping into a new tag set"""
        return cls(dict(data) if data else {})

    @classmethod
    def consume(cls, data: Dict[str, str]) -> "SampleTags":
        """
        Take ownership of the supplied dict without copying it.

        The caller hands the dict over and must not use or modify it
        afterwards; doing so would change a tag set others treat as frozen.
        """
        return cls(data)

    def get(self, key: str) -> Tuple[str, bool]:
        """Return (value, True) if key is present, ("", False) otherwise"""
        if key in self._tags:
            return self._tags[key], True
        return "", False

    def is_equal(self, other: Optional["SampleTags"]) -> bool:
        """Compare two tag sets, short-circuiting on identity"""
        if self is other:
            return True
        if other is None or len(self._tags) != len(other._tags):
            return False
        for key, value in self._tags.items():
            if key not in other._tags or other._tags[key] != value:
                return False
        return True

    def to_json(self) -> bytes:
        """
        Serialize the tags as a JSON object and cache the result.
        Keys are sorted, so equal tag sets encode to equal bytes.

        Concurrent first calls may each compute the encoding; the last
        assignment wins and every result is identical.
        """
        if self._json is not None:
            return self._json
        encoded = json.dumps(self._tags, sort_keys=True, separators=(",", ":")).encode()
        self._json = encoded
        return encoded

    def load_json(self, data: Union[bytes, str]) -> None:
        """
        Replace the contents from a JSON object.

        Only meant for deserialization, before the instance is shared.
        """
        decoded = json.loads(data)
        self._tags = _validate_tag_dict(decoded) if decoded is not None else {}
        self._json = None

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> Optional["SampleTags"]:
        """Build a tag set from JSON; ``null`` gives an unset tag set"""
        decoded = json.loads(data)
        if decoded is None:
            return None
        return cls(_validate_tag_dict(decoded))

    def clone_tags(self) -> Dict[str, str]:
        """Return an independent, mutable copy of the tags"""
        return dict(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __contains__(self, key: object) -> bool:
        return key in self._tags

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampleTags):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash(frozenset(self._tags.items()))

    def __repr__(self) -> str:
        return f"SampleTags({self._tags!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            _coerce_sample_tags,
            serialization=core_schema.plain_serializer_function_ser_schema(
                _serialize_sample_tags, info_arg=True
            ),
        )


def _validate_tag_dict(data: Any) -> Dict[str, str]:
    if not isinstance(data, dict):
        raise ValueError("sample tags must be a JSON object")
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"tag {key!r} must have a string value")
    return data


def _coerce_sample_tags(value: Any) -> SampleTags:
    if isinstance(value, SampleTags):
        return value
    return SampleTags.copy_of(_validate_tag_dict(value))


def _serialize_sample_tags(
    tags: SampleTags, info: core_schema.SerializationInfo
) -> Dict[str, str]:
    # JSON dumps go through the cached encoding so key order matches to_json()
    if info.mode_is_json():
        return json.loads(tags.to_json())
    return tags.clone_tags()


# Helpers that treat None as an empty, unset tag set


def get_tag(tags: Optional[SampleTags], key: str) -> Tuple[str, bool]:
    if tags is None:
        return "", False
    return tags.get(key)


def tags_equal(a: Optional[SampleTags], b: Optional[SampleTags]) -> bool:
    if a is b:
        return True
    if a is None or b is None:
        return False
    return a.is_equal(b)


def tags_to_json(tags: Optional[SampleTags]) -> bytes:
    if tags is None:
        return b"null"
    return tags.to_json()


def clone_tags(tags: Optional[SampleTags]) -> Dict[str, str]:
    if tags is None:
        return {}
    return tags.clone_tags()
