# fastblur Filters - Base Classes
"""
Base classes for the filter system.

All filters are dataclasses with JSON serialization support and can be
created from a compact string form such as ``'blur 2.5'``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, field, MISSING
from typing import Any, TYPE_CHECKING
import json

if TYPE_CHECKING:
    from fastblur.raster import Raster


@dataclass
class FilterContext:
    """Values reported by filters while a pipeline runs.

    FastGaussianBlur stores its elapsed time as 'blur_time_ms' and the
    number of threads it used as 'blur_threads'.
    """

    data: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


# Global registries
FILTER_REGISTRY: dict[str, type['Filter']] = {}
FILTER_ALIASES: dict[str, tuple[type['Filter'], dict[str, Any]]] = {}


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Decorator registering a filter under its class name, any case."""
    FILTER_REGISTRY[cls.__name__] = cls
    FILTER_REGISTRY[cls.__name__.lower()] = cls
    return cls


def register_alias(alias: str, cls: type['Filter'], **default_params: Any) -> None:
    """Register a short name for a filter, optionally with preset parameters.

    Examples:
        register_alias('blur', FastGaussianBlur)
        register_alias('blurmt', FastGaussianBlur, threads=0)
    """
    FILTER_ALIASES[alias.lower()] = (cls, default_params)


def _lookup(name: str) -> tuple[type['Filter'], dict[str, Any]]:
    """Resolve a filter name or alias to its class and preset parameters."""
    if name in FILTER_ALIASES:
        filter_cls, presets = FILTER_ALIASES[name]
        return filter_cls, dict(presets)
    if name in FILTER_REGISTRY:
        return FILTER_REGISTRY[name], {}
    raise ValueError(f"Unknown filter: {name}")


@dataclass
class Filter(ABC):
    """Base class for all filters.

    Example:
        @register_filter
        @dataclass
        class MyFilter(Filter):
            amount: int = 1

            def apply(self, raster: Raster, context: FilterContext | None = None) -> Raster:
                ...
    """

    @abstractmethod
    def apply(self, raster: 'Raster', context: FilterContext | None = None) -> 'Raster':
        """Apply filter to a raster and return a new raster.

        Implementations never modify the input raster.

        :param raster: The input raster.
        :param context: Optional context filters report values into.
        :returns: The processed raster.
        """

    def __call__(self, raster: 'Raster', context: FilterContext | None = None) -> 'Raster':
        return self.apply(raster, context)

    @property
    def type(self) -> str:
        """Filter type name for serialization."""
        return self.__class__.__name__

    @classmethod
    def parameter_names(cls) -> list[str]:
        """The filter's parameters in declaration order."""
        return [f.name for f in fields(cls) if not f.name.startswith('_')]

    def to_dict(self) -> dict[str, Any]:
        data = {name: getattr(self, name) for name in self.parameter_names()}
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Create a filter from a dictionary holding a 'type' key.

        :raises ValueError: If the type is not registered
        """
        params = dict(data)
        filter_type = params.pop('type', cls.__name__)
        filter_cls = FILTER_REGISTRY.get(filter_type) or FILTER_REGISTRY.get(filter_type.lower())
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")
        # composite filters rebuild their children themselves
        if 'from_dict' in vars(filter_cls):
            return filter_cls.from_dict(params)
        return filter_cls(**params)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def parse(cls, text: str) -> 'Filter':
        """Create a filter from its compact string form.

        The first token names the filter (class name or alias). Further
        tokens are either values assigned to the parameters in declaration
        order or ``name=value`` pairs, which take precedence::

            'blur 2.5'            -> FastGaussianBlur(sigma=2.5)
            'blur 2 3 threads=0'  -> FastGaussianBlur(sigma=2, box_count=3, threads=0)
            'hbox radius=4'       -> HorizontalBoxBlur(radius=4)

        :raises ValueError: On an unknown filter or parameter, or too many values
        """
        tokens = text.split()
        if not tokens:
            raise ValueError(f"Invalid filter format: {text!r}")

        filter_cls, kwargs = _lookup(tokens[0].lower())
        names = filter_cls.parameter_names()
        positional = [token for token in tokens[1:] if '=' not in token]
        named = [token.split('=', 1) for token in tokens[1:] if '=' in token]

        if len(positional) > len(names):
            raise ValueError(
                f"Too many positional args for {filter_cls.__name__}: "
                f"got {len(positional)}, max {len(names)}"
            )
        kwargs.update(zip(names, map(_parse_value, positional)))
        for key, value in named:
            if key not in names:
                raise ValueError(f"Unknown parameter for {filter_cls.__name__}: {key}")
            kwargs[key] = _parse_value(value)

        return filter_cls(**kwargs)

    def to_string(self) -> str:
        """Compact string form listing the non-default parameters.

        E.g. ``'fastgaussianblur sigma=2.0'``, accepted by :meth:`parse`.
        """
        parts = [self.type.lower()]
        for f in fields(self):
            if f.name.startswith('_'):
                continue
            value = getattr(self, f.name)
            if f.default is MISSING or value != f.default:
                parts.append(f'{f.name}={value}')
        return ' '.join(parts)


_LITERALS = {'true': True, 'false': False, 'none': None}


def _parse_value(s: str) -> int | float | bool | str | None:
    """Convert a token to bool, None, int or float, else keep it as string."""
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in '\'"':
        return s[1:-1]
    if s.lower() in _LITERALS:
        return _LITERALS[s.lower()]
    for convert in (int, float):
        try:
            return convert(s)
        except ValueError:
            pass
    return s


__all__ = [
    'Filter',
    'FilterContext',
    'FILTER_REGISTRY',
    'FILTER_ALIASES',
    'register_filter',
    'register_alias',
]
