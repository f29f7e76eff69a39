from __future__ import annotations

import collections.abc
import dataclasses
import enum
import types
import typing
from dataclasses import MISSING, dataclass, field
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from config_bind.exceptions import ConfigUnsupportedError
from config_bind.tags import parse_tag

__all__ = [
    "ShapeKind",
    "PrimitiveShape",
    "SequenceShape",
    "MappingShape",
    "CompositeShape",
    "Shape",
    "FieldSpec",
    "describe",
    "prop",
    "BUILTIN_PRIMITIVES",
]

META_KEY = "config_bind"

BUILTIN_PRIMITIVES: Tuple[type, ...] = (bool, int, float, str)

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.Iterable)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


class ShapeKind(enum.Enum):
    PRIMITIVE = "primitive"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    COMPOSITE = "composite"


@dataclass(frozen=True)
class PrimitiveShape:
    type: type
    kind = ShapeKind.PRIMITIVE


@dataclass(frozen=True)
class SequenceShape:
    element: "Shape"
    container: type = list
    kind = ShapeKind.SEQUENCE


@dataclass(frozen=True)
class MappingShape:
    value: "Shape"
    kind = ShapeKind.MAPPING


@dataclass(frozen=True)
class CompositeShape:
    type: type
    kind = ShapeKind.COMPOSITE

    @property
    def fields(self) -> Tuple["FieldSpec", ...]:
        return _field_specs(self.type)

    def build(self, values: Mapping[str, Any]) -> Any:
        init_values = {}
        late_values = {}
        for spec in self.fields:
            if spec.name in values:
                (init_values if spec.init else late_values)[spec.name] = values[spec.name]
        obj = self.type(**init_values)
        for name, value in late_values.items():
            object.__setattr__(obj, name, value)
        return obj


Shape = Union[PrimitiveShape, SequenceShape, MappingShape, CompositeShape]


@dataclass(frozen=True)
class FieldMeta:
    tag: Optional[str] = None
    embed: bool = False
    validate: Mapping[str, str] = field(default_factory=dict)
    items: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    hint: Any
    meta: FieldMeta
    init: bool = True
    has_default: bool = False

    @property
    def tag(self) -> Optional[str]:
        return self.meta.tag

    @property
    def embedded(self) -> bool:
        return self.meta.embed


def prop(
    tag: Optional[str] = None,
    *,
    embed: bool = False,
    items: Optional[Mapping[str, str]] = None,
    default: Any = MISSING,
    default_factory: Union[Callable[[], Any], Any] = MISSING,
    **validators: str,
) -> Any:
    """
    Declare how a dataclass field is bound.

    ``tag`` is a ``${key:=default}||splitter`` value tag. Extra keyword arguments
    name validators (``expr="value > 0"``, ``min="1"``); ``items`` holds validators
    applied to every element of a sequence or mapping field. ``embed=True`` flattens
    a nested dataclass into its parent's key space.
    """
    if tag is not None:
        parse_tag(tag)
    meta = FieldMeta(
        tag=tag,
        embed=embed,
        validate={k: str(v) for k, v in validators.items()},
        items={k: str(v) for k, v in (items or {}).items()},
    )
    return field(default=default, default_factory=default_factory, metadata={META_KEY: meta})


@lru_cache(maxsize=256)
def _field_specs(cls: type) -> Tuple[FieldSpec, ...]:
    try:
        hints = typing.get_type_hints(cls)
    except Exception as e:
        raise ConfigUnsupportedError(
            f"cannot resolve type hints of {cls.__qualname__}: {e}"
        ) from e
    specs = []
    for f in dataclasses.fields(cls):
        meta = f.metadata.get(META_KEY, FieldMeta())
        has_default = f.default is not MISSING or f.default_factory is not MISSING
        specs.append(
            FieldSpec(
                name=f.name,
                hint=hints.get(f.name, Any),
                meta=meta,
                init=f.init,
                has_default=has_default,
            )
        )
    return tuple(specs)


def _unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def describe(tp: Any, is_converted: Optional[Callable[[Any], bool]] = None) -> Optional[Shape]:
    """
    Describe ``tp`` as a binding shape, or return None when it cannot be bound.

    ``is_converted`` reports whether a converter is registered for a type; such
    types bind as primitives even when they are dataclasses.
    """
    if isinstance(tp, (PrimitiveShape, SequenceShape, MappingShape, CompositeShape)):
        return tp
    tp = _unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if origin is None:
        return _describe_plain(tp, is_converted)

    args = typing.get_args(tp)
    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return None
        element = describe(args[0], is_converted) if args else PrimitiveShape(str)
        if element is None:
            return None
        return SequenceShape(element, tuple if origin is tuple else list)
    if origin in _MAPPING_ORIGINS:
        if args and args[0] is not str:
            return None
        value = describe(args[1], is_converted) if args else PrimitiveShape(str)
        if value is None:
            return None
        return MappingShape(value)
    return None


def _describe_plain(tp: Any, is_converted: Optional[Callable[[Any], bool]]) -> Optional[Shape]:
    if not isinstance(tp, type):
        return None
    if is_converted is not None and is_converted(tp):
        return PrimitiveShape(tp)
    if tp in BUILTIN_PRIMITIVES or issubclass(tp, enum.Enum):
        return PrimitiveShape(tp)
    if dataclasses.is_dataclass(tp):
        return CompositeShape(tp)
    if tp in (list, tuple):
        return SequenceShape(PrimitiveShape(str), tp)
    if tp is dict:
        return MappingShape(PrimitiveShape(str))
    return None
