from __future__ import annotations

import enum
import itertools
import logging
import re
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from config_bind.exceptions import (
    ConfigConflictError,
    ConfigConversionError,
    ConfigError,
    ConfigNotFoundError,
    ConfigUnsupportedError,
)
from config_bind.registries import Registries, default_registries, split_comma
from config_bind.resolver import PlaceholderResolver
from config_bind.shapes import (
    CompositeShape,
    FieldSpec,
    MappingShape,
    PrimitiveShape,
    SequenceShape,
    Shape,
    ShapeKind,
    describe,
)
from config_bind.store.adaptors import PropertySourceProtocol
from config_bind.store.manager import PropertyStore
from config_bind.tags import BindTarget
from config_bind.utils import _redact_for_log, index_key, join_key
from config_bind.validation.base import FieldValidator

logger = logging.getLogger("config_bind.binder")
logger.addHandler(logging.NullHandler())

__all__ = ["TypeBinder", "FieldFilter", "parse_bool"]

# Returns True when the caller has taken care of the field itself.
FieldFilter = Callable[[FieldSpec, BindTarget], bool]

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))


def parse_bool(s: str) -> bool:
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ValueError(f"invalid boolean {s!r}")


_OCTAL = re.compile(r"^([+-]?)0([0-7]+)$")


def _parse_int(s: str) -> int:
    try:
        return int(s, 0)
    except ValueError:
        # a bare leading zero means octal
        m = _OCTAL.match(s)
        if m is None:
            raise
        return int(m.group(1) + m.group(2), 8)


def _parse_enum(tp: type, s: str) -> Any:
    try:
        return tp[s]
    except KeyError:
        return tp(s)


_PARSERS: Dict[type, Callable[[str], Any]] = {
    bool: parse_bool,
    int: _parse_int,
    float: float,
    str: str,
}


def _type_name(tp: Any) -> str:
    if isinstance(tp, (PrimitiveShape, CompositeShape)):
        tp = tp.type
    return getattr(tp, "__name__", None) or str(tp)


class TypeBinder:
    """
    Binds properties into typed values.

    Targets are described as primitive, sequence, mapping or composite shapes and
    each kind has its own binding strategy. The binder only reads its property
    source; callers must not mutate the source while a bind is in progress.
    """

    def __init__(
        self,
        store: PropertySourceProtocol,
        registries: Optional[Registries] = None,
        *,
        resolver: Optional[PlaceholderResolver] = None,
    ) -> None:
        self._store = store
        self._registries = registries if registries is not None else default_registries()
        self._resolver = resolver if resolver is not None else PlaceholderResolver(store)
        self._validator = FieldValidator(self._registries.validators)
        self._dispatch = {
            ShapeKind.PRIMITIVE: self._bind_primitive,
            ShapeKind.SEQUENCE: self._bind_sequence,
            ShapeKind.MAPPING: self._bind_mapping,
            ShapeKind.COMPOSITE: self._bind_composite,
        }

    @property
    def store(self) -> PropertySourceProtocol:
        return self._store

    @property
    def registries(self) -> Registries:
        return self._registries

    @property
    def resolver(self) -> PlaceholderResolver:
        return self._resolver

    def describe(self, tp: Any) -> Optional[Shape]:
        return describe(tp, self._registries.converters.has)

    def bind(
        self,
        tp: Any,
        tag: str = "${ROOT}",
        *,
        path: Optional[str] = None,
        field_filter: Optional[FieldFilter] = None,
    ) -> Any:
        """
        Bind the properties selected by ``tag`` into a value of type ``tp``.

        ``tp`` is a type (``int``, ``list[str]``, a dataclass, ...) or a shape
        descriptor. ``${ROOT}`` binds from the top of the store.
        """
        path = path or _type_name(tp)
        shape = self.describe(tp)
        if shape is None:
            logger.error("Unsupported bind type %r at %s", tp, path)
            raise ConfigUnsupportedError(f"unsupported bind type {tp!r}", path=path)
        target = BindTarget(path=path).bind_tag(tag)
        return self.bind_value(shape, target, field_filter=field_filter)

    def bind_value(
        self,
        shape: Shape,
        target: BindTarget,
        props: Optional[PropertySourceProtocol] = None,
        field_filter: Optional[FieldFilter] = None,
    ) -> Any:
        props = self._store if props is None else props
        logger.debug("Binding %s key=%r as %s", target.path, target.key, shape.kind.value)
        value = self._dispatch[shape.kind](shape, target, props, field_filter)
        self._validator.validate_value(target.validate, value, key=target.key, path=target.path)
        return value

    def convert(self, text: str, tp: type, target: Optional[BindTarget] = None) -> Any:
        """Convert ``text`` with the converter registered for ``tp``, else a built-in parser."""
        key = target.key if target is not None else None
        path = target.path if target is not None else None
        fn = self._registries.converters.find(tp)
        if fn is None:
            fn = _PARSERS.get(tp)
            if fn is None and isinstance(tp, type) and issubclass(tp, enum.Enum):
                return self._convert_with(lambda s: _parse_enum(tp, s), text, tp, key, path)
        if fn is None:
            raise ConfigUnsupportedError(f"unsupported bind type {tp!r}", key=key, path=path)
        return self._convert_with(fn, text, tp, key, path)

    @staticmethod
    def _convert_with(
        fn: Callable[[str], Any], text: str, tp: type, key: Optional[str], path: Optional[str]
    ) -> Any:
        try:
            return fn(text)
        except ConfigError:
            raise
        except Exception as e:
            logger.error("Cannot convert %s to %s at %s", _redact_for_log(key or "", text), tp, path)
            raise ConfigConversionError(
                f"cannot convert {text!r} to {_type_name(tp)}: {e}",
                target_type=tp,
                key=key,
                path=path,
            ) from e

    def _bind_primitive(
        self,
        shape: PrimitiveShape,
        target: BindTarget,
        props: PropertySourceProtocol,
        field_filter: Optional[FieldFilter],
    ) -> Any:
        text = self._resolver.resolve(target, props)
        return self.convert(text, shape.type, target)

    def _bind_sequence(
        self,
        shape: SequenceShape,
        target: BindTarget,
        props: PropertySourceProtocol,
        field_filter: Optional[FieldFilter],
    ) -> Any:
        source = self._sequence_source(shape, target, props)
        elements: List[Any] = []
        if source is not None:
            for i in itertools.count():
                key = index_key(target.key, i)
                if not source.has(key):
                    break
                sub = BindTarget(key=key, path=index_key(target.path, i), validate=target.items)
                elements.append(self.bind_value(shape.element, sub, source, field_filter))
        return shape.container(elements)

    def _sequence_source(
        self, shape: SequenceShape, target: BindTarget, props: PropertySourceProtocol
    ) -> Optional[PropertySourceProtocol]:
        """
        Return the source holding ``key[0]``, ``key[1]``, ... for a sequence target.

        Indexed keys already present are used as they are. Otherwise the scalar
        value (or the tag default) is split into a temporary indexed source; each
        element is expanded afterwards, when it is bound.
        """
        key, tag = target.key, target.tag
        if props.has(index_key(key, 0)):
            return props
        if props.has(key):
            text = props.get(key)
        else:
            if not tag.has_default:
                raise ConfigNotFoundError(
                    f"property {key!r}: not exist", key=key, path=target.path
                )
            if tag.default == "":
                return None
            if not isinstance(shape.element, PrimitiveShape):
                raise ConfigUnsupportedError(
                    "sequence can't have a non empty default value", key=key, path=target.path
                )
            text = tag.default
        if text == "":
            return None

        parts = self._split(text, target)
        source = PropertyStore()
        for i, part in enumerate(parts):
            source.set(index_key(key, i), part)
        return source

    def _split(self, text: str, target: BindTarget) -> List[str]:
        name = target.tag.splitter
        if not name:
            return split_comma(text)
        fn = self._registries.splitters.find(name)
        if fn is None:
            logger.error("Unknown splitter %r at %s", name, target.path)
            raise ConfigUnsupportedError(
                f"unknown splitter {name!r}", key=target.key, path=target.path
            )
        try:
            return [str(part) for part in fn(text)]
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigConversionError(
                f"split error: {e}", key=target.key, path=target.path
            ) from e

    def _bind_mapping(
        self,
        shape: MappingShape,
        target: BindTarget,
        props: PropertySourceProtocol,
        field_filter: Optional[FieldFilter],
    ) -> Dict[str, Any]:
        if target.tag.has_default and target.tag.default != "":
            raise ConfigUnsupportedError(
                "map can't have a non empty default value", key=target.key, path=target.path
            )
        try:
            names = props.sub_keys(target.key)
        except ConfigConflictError as e:
            raise ConfigUnsupportedError(str(e), key=target.key, path=target.path) from e
        if any(name.startswith("[") for name in names):
            logger.error("Cannot bind indexed property %r as a map at %s", target.key, target.path)
            raise ConfigUnsupportedError(
                f"property {target.key!r} is a list, not a map", key=target.key, path=target.path
            )
        result: Dict[str, Any] = {}
        for name in names:
            sub = BindTarget(
                key=join_key(target.key, name),
                path=join_key(target.path, name),
                validate=target.items,
            )
            result[name] = self.bind_value(shape.value, sub, props, field_filter)
        return result

    def _bind_composite(
        self,
        shape: CompositeShape,
        target: BindTarget,
        props: PropertySourceProtocol,
        field_filter: Optional[FieldFilter],
    ) -> Any:
        if target.tag.has_default and target.tag.default != "":
            raise ConfigUnsupportedError(
                "struct can't have a non empty default value", key=target.key, path=target.path
            )
        values: Dict[str, Any] = {}
        for spec in shape.fields:
            sub = BindTarget(key=target.key, path=f"{target.path}.{spec.name}")
            field_shape = self.describe(spec.hint)

            if spec.tag is not None:
                sub = sub.bind_tag(spec.tag, spec.meta.validate, spec.meta.items)
                if field_shape is None:
                    raise ConfigUnsupportedError(
                        f"unsupported bind type {spec.hint!r}", key=sub.key, path=sub.path
                    )
                if field_filter is not None and field_filter(spec, sub):
                    logger.debug("Field %s claimed by filter", sub.path)
                    continue
                values[spec.name] = self.bind_value(field_shape, sub, props, field_filter)
                continue

            if spec.embedded:
                if not isinstance(field_shape, CompositeShape):
                    logger.debug("Skipping embedded non-composite field %s", sub.path)
                    continue
                sub = replace(sub, validate=spec.meta.validate)
                values[spec.name] = self.bind_value(field_shape, sub, props, field_filter)
                continue

            if field_shape is None:
                continue
            sub = replace(
                sub,
                key=join_key(target.key, spec.name),
                validate=spec.meta.validate,
                items=spec.meta.items,
            )
            if spec.has_default and not props.has(sub.key):
                logger.debug("Keeping default for %s, %r not set", sub.path, sub.key)
                continue
            values[spec.name] = self.bind_value(field_shape, sub, props, field_filter)

        try:
            return shape.build(values)
        except TypeError as e:
            raise ConfigUnsupportedError(
                f"cannot construct {_type_name(shape.type)}: {e}",
                key=target.key,
                path=target.path,
            ) from e
