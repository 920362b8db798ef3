"""
Argot handler binding: map extracted values onto a callable's parameters.

Purpose
- A command hands its accumulated values to an arbitrary Python callable.
  Before the call, the values are checked against the callable's signature:
  • arity: positional parameters without a default are required; the call
    may supply up to every positional parameter, or any number beyond them
    when the handler declares *args.
  • types: each value must be compatible with its parameter's annotation
    (numeric/string compatibility, see coerce()); numbers are converted to
    the annotated numeric class.
- Any mismatch raises BindingError and the handler is never invoked.

Annotation handling
- Annotations are evaluated (eval_str) so "from __future__ import annotations"
  handlers work; unresolvable ones fall back to the raw signature.
- Annotated[T, ...] is dereferenced to T.
- Missing annotations, Any, object, and non-class annotations (unions,
  parametrized generics) accept any value unchanged.
"""
import inspect
import numbers
import typing
from inspect import Parameter

from .faults import BindingError, FaultCode

_POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


class _Incompatible(Exception):
    """Internal: raised by coerce() for a value/annotation mismatch."""


def _fault(message, handler, /, **options):
    return BindingError(
        message,
        title="incompatible handler",
        code=FaultCode.BINDING,
        handler=handler,
        hint="make the handler's parameters match the command's values (count and types)",
        **options,
    )


def dereference(annotation, /):
    """
    Strip Annotated[...] wrappers, keeping the underlying type.
    """
    if typing.get_origin(annotation) is typing.Annotated:
        return typing.get_args(annotation)[0]
    return annotation


def coerce(value, annotation, /):
    """
    Convert a value for a parameter annotated with 'annotation'.

    Rules
    - unannotated / Any / object / non-class annotations: value unchanged.
    - bool: only bool values.
    - numbers.Number subclasses: any non-bool number, converted by calling the class.
    - str: only str values.
    - other classes: instances of the class, unchanged.

    Raises
    - _Incompatible when the value cannot be passed as the annotated type.
    """
    annotation = dereference(annotation)

    if annotation is Parameter.empty or annotation is typing.Any or annotation is object:
        return value
    if not isinstance(annotation, type):
        return value

    if annotation is bool:
        if isinstance(value, bool):
            return value
        raise _Incompatible
    if issubclass(annotation, numbers.Number):
        if isinstance(value, bool) or not isinstance(value, numbers.Number):
            raise _Incompatible
        if isinstance(value, annotation):
            return value
        try:
            return annotation(value)
        except (TypeError, ValueError, OverflowError):
            raise _Incompatible from None
    if isinstance(value, annotation):
        return value
    raise _Incompatible


def signature(handler, /):
    """
    Return the handler's signature with evaluated annotations.

    Raises
    - BindingError when the handler is not callable or cannot be inspected.
    """
    if not callable(handler):
        raise _fault("handler %r is not callable" % (handler,), handler)
    try:
        return inspect.signature(handler, eval_str=True)
    except (NameError, SyntaxError, TypeError, AttributeError):
        pass
    except ValueError:
        raise _fault("handler %r cannot be inspected" % (handler,), handler) from None
    try:
        return inspect.signature(handler)
    except (TypeError, ValueError):
        raise _fault("handler %r cannot be inspected" % (handler,), handler) from None


def bind(handler, values, /):
    """
    Check values against the handler's signature and return the call arguments.

    Returns
    - tuple: the (possibly numerically converted) positional arguments.

    Raises
    - BindingError: not callable, arity mismatch, required keyword-only
      parameter, or a value incompatible with its annotation.
    """
    parameters = signature(handler).parameters.values()

    positional = [parameter for parameter in parameters if parameter.kind in _POSITIONAL]
    tail = next((parameter for parameter in parameters if parameter.kind is Parameter.VAR_POSITIONAL), None)

    for parameter in parameters:
        if parameter.kind is Parameter.KEYWORD_ONLY and parameter.default is Parameter.empty:
            raise _fault(
                "handler keyword-only parameter %r cannot be bound" % parameter.name, handler,
                parameter=parameter.name,
            )

    required = sum(parameter.default is Parameter.empty for parameter in positional)
    count = len(values)

    if count < required or (tail is None and count > len(positional)):
        if tail is not None:
            expected = "at least %d" % required
        elif required == len(positional):
            expected = "%d" % required
        else:
            expected = "%d to %d" % (required, len(positional))
        raise _fault(
            "handler expects %s parameters but %d values were extracted" % (expected, count), handler,
            expected=expected,
            count=count,
        )

    args = []
    for index, value in enumerate(values):
        parameter = positional[index] if index < len(positional) else tail
        try:
            args.append(coerce(value, parameter.annotation))
        except _Incompatible:
            raise _fault(
                "cannot pass %s value %r as %r (%s)" % (
                    type(value).__name__, value, parameter.name, getattr(parameter.annotation, "__name__", parameter.annotation)
                ),
                handler,
                parameter=parameter.name,
                value=value,
            ) from None

    return tuple(args)


__all__ = (
    "bind",
    "coerce",
    "dereference",
    "signature",
)
