r"""
Argot converters: text tokens to typed values.

Overview
- Converter: abstract base. Two operations:
  • convert(token) -> value, raising InvalidValueError on empty or unparseable text.
  • supports(value) -> bool, answering whether a runtime value belongs to the
    converter's output domain. Used at build time to reject type-incorrect
    defaults (e.g., a string default for an integer variable).
- Concrete converters
  • StringConverter: token as-is (empty rejected).
  • IntegerConverter(base): base 0/unset means decimal; 2..36 otherwise.
  • BooleanConverter(insensitive): "true"/"false"; empty text means True so that
    parameterless flags read as switches.
  • FloatConverter: decimal/scientific notation.

Strictness
- Integer and float tokens must be bare ASCII literals: surrounding whitespace,
  "_" digit separators, non-ASCII digits and radix prefixes ("0x" for base 16)
  are rejected even though Python's int()/float() accept them.

Quick example:
    >>> IntegerConverter(16).convert("7b")
    123
    >>> BooleanConverter(insensitive=True)("TRUE")
    True
"""
import numbers
from abc import abstractmethod

from .faults import InvalidValueError, FaultCode
from .utils import Unset, IntrospectableType

# Bases whose radix prefix int() would otherwise accept.
_PREFIXES = {2: "0b", 8: "0o", 16: "0x"}


class Converter(metaclass=IntrospectableType):
    """
    Text-to-value transformation with a domain-membership check.

    Subclasses implement convert() and supports(). Instances are immutable
    and may be shared freely between arguments and commands.
    """

    @abstractmethod
    def convert(self, token, /):
        raise NotImplementedError

    @abstractmethod
    def supports(self, value, /):
        raise NotImplementedError

    def __call__(self, token, /):
        return self.convert(token)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return dict(self.__rich_repr__()) == dict(other.__rich_repr__())

    def __hash__(self):
        return hash((type(self), *self.__rich_repr__()))

    def _invalid(self, token, reason, /):
        return InvalidValueError(
            "invalid %s value %r (%s)" % (type(self).__typename__.removesuffix("-converter"), token, reason),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            token=token,
            converter=self,
            hint="check the expected type of this value in the usage text",
        )


class StringConverter(Converter):
    """
    Identity conversion; only the empty token is rejected.
    """

    def convert(self, token, /):
        if not token:
            raise self._invalid(token, "empty text")
        return token

    def supports(self, value, /):
        return isinstance(value, str)


class IntegerConverter(Converter):
    """
    Signed integer literals in a fixed base.

    Parameters
    - base: int
      0 (the default) means decimal; otherwise 2..36. Radix prefixes such as
      "0x" are rejected, so "0x7b" is not a base 16 integer.
    """

    __introspectable__ = ("base",)

    def __init__(self, base=0, /):
        if isinstance(base, bool) or not isinstance(base, int):
            raise TypeError(f"{type(self).__typename__} 'base' must be an integer")
        if base < 0:
            raise ValueError(f"{type(self).__typename__} 'base' cannot be negative")
        if base == 1 or base > 36:
            raise ValueError(f"{type(self).__typename__} 'base' must be 0 or between 2 and 36")
        self._base = base

    @property
    def radix(self):
        """
        Effective base used for parsing (0 resolves to 10).
        """
        return self._base or 10

    def convert(self, token, /):
        if not token:
            raise self._invalid(token, "empty text")
        if not token.isascii() or token != token.strip() or "_" in token:
            raise self._invalid(token, "not a base %d integer" % self.radix)
        if (prefix := _PREFIXES.get(self._base)) and token.lstrip("+-")[:2].lower() == prefix:
            raise self._invalid(token, "not a base %d integer" % self.radix)
        try:
            return int(token, self.radix)
        except ValueError:
            raise self._invalid(token, "not a base %d integer" % self.radix) from None

    def supports(self, value, /):
        return isinstance(value, numbers.Real) and not isinstance(value, bool)


class BooleanConverter(Converter):
    """
    "true"/"false" literals; the empty token converts to True.

    Parameters
    - insensitive: bool
      Compare case-insensitively ("TRUE", "False", ...).
    """

    __introspectable__ = ("insensitive",)

    def __init__(self, insensitive=False, /):
        self._insensitive = bool(insensitive)

    def convert(self, token, /):
        if not token:
            return True
        literal = token.casefold() if self._insensitive else token
        if literal == "true":
            return True
        if literal == "false":
            return False
        raise self._invalid(token, "expected 'true' or 'false'")

    def supports(self, value, /):
        return isinstance(value, bool)


class FloatConverter(Converter):
    def convert(self, token, /):
        if not token:
            raise self._invalid(token, "empty text")
        if not token.isascii() or token != token.strip() or "_" in token:
            raise self._invalid(token, "not a number")
        try:
            return float(token)
        except ValueError:
            raise self._invalid(token, "not a number") from None

    def supports(self, value, /):
        return isinstance(value, numbers.Real) and not isinstance(value, bool)


# Shorthands accepted wherever a converter is expected.
_shorthands = {
    None: StringConverter,
    str: StringConverter,
    int: IntegerConverter,
    bool: BooleanConverter,
    float: FloatConverter,
}


def resolve(converter=None, /, base=Unset):
    """
    Internal: materialize a converter from an instance or a shorthand.

    Accepted
    - a Converter instance (returned as-is)
    - None/str, int, bool, float (or the converter classes themselves)
    - base: only with integer converters; builds IntegerConverter(base)

    Raises
    - TypeError: unknown shorthand, or base with a non-integer converter.
    - ValueError: invalid base (see IntegerConverter).
    """
    if isinstance(converter, Converter):
        if base is not Unset:
            if not isinstance(converter, IntegerConverter):
                raise TypeError("'base' is only valid for integer converters")
            return IntegerConverter(base)
        return converter

    if isinstance(converter, type) and issubclass(converter, Converter):
        factory = converter
    else:
        try:
            factory = _shorthands[converter]
        except (KeyError, TypeError):
            raise TypeError(f"unsupported converter {converter!r}") from None

    if base is not Unset:
        if not issubclass(factory, IntegerConverter):
            raise TypeError("'base' is only valid for integer converters")
        return factory(base)
    return factory()


__all__ = (
    "Converter",
    "StringConverter",
    "IntegerConverter",
    "BooleanConverter",
    "FloatConverter",
)
