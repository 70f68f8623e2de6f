"""Internal module to define, encode, decode and validate JSON data structures."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import collections.abc
import dataclasses
import inspect
import json
import wrapt


class SchemaError(ValueError):
    """
    Raised if a value does not conform to its schema.

    Parameters:
    • msg: Description of the error.
    • path: JSON pointer style path to value with error.
    """

    def __init__(self, msg, path=None):
        super().__init__(msg)
        self.msg = str(msg)
        self.path = path

    def push(self, name):
        """Push a name in front of the path."""
        self.path = f"/{name}{self.path}" if self.path else f"/{name}"

    def __str__(self):
        result = []
        if self.path is not None:
            result.append(self.path)
        if self.msg is not None:
            result.append(self.msg)
        return ": ".join(result)


def _reject_constant(name):
    raise ValueError(f"invalid JSON number: {name}")


def parse_json(text):
    """
    Parse JSON text into JSON object model representation. Raises ValueError if the
    text is not valid JSON. The NaN, Infinity and -Infinity constants that the
    Python JSON module otherwise accepts are rejected.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as re:
        raise ValueError("JSON text is too deeply nested") from re


class _type:
    """
    Base class for all schema types.

    Parameters and instance variables:
    • python_type: Python data type.
    • json_type: JSON schema data type.
    • content_type: Content type used when value is expressed in a body.  ["text/plain"]
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(
        self,
        *,
        python_type=object,
        json_type=None,
        content_type="text/plain",
        nullable=False,
        description=None,
    ):
        super().__init__()
        self.python_type = python_type
        self.json_type = json_type
        self.content_type = content_type
        self.nullable = nullable
        self.description = description

    def __repr__(self):
        return self.python_type.__name__

    def validate(self, value):
        """Validate value against the schema."""
        if value is None and not self.nullable:
            raise SchemaError("value is not nullable")
        if value is not None and not isinstance(value, self.python_type):
            raise SchemaError(
                f"value {value!r} does not match expected type: {self.python_type.__name__}"
            )

    def json_encode(self, value):
        """
        Encode the value into JSON object model representation. The method does not
        dump the value as JSON text; it represents the value such that the Python
        JSON module can dump as JSON text if required.
        """
        self.validate(value)
        return value

    def json_decode(self, value):
        """
        Decode the value from JSON object model representation. The method does not
        parse the value as JSON text; it takes a Python value as though the Python JSON
        module loaded the JSON text.
        """
        self.validate(value)
        return value

    def str_encode(self, value):
        """Encode the value into string representation."""
        raise NotImplementedError

    def str_decode(self, value):
        """Decode the value from string representation."""
        raise NotImplementedError

    def bin_encode(self, value):
        """Encode the value into binary representation."""
        return None if value is None else self.str_encode(value).encode()

    def bin_decode(self, value):
        """Decode the value from binary representation."""
        if value is None:
            return None
        try:
            text = value.decode()
        except UnicodeDecodeError as ude:
            raise SchemaError(ude) from ude
        return self.str_decode(text)


class _json(_type):
    """Base class for schema types expressed as JSON text in an entity-body."""

    def __init__(self, *, content_type="application/json", **kwargs):
        super().__init__(content_type=content_type, **kwargs)

    def str_encode(self, value):
        """Encode the value into string representation."""
        return json.dumps(self.json_encode(value))

    def str_decode(self, value):
        """Decode the value from string representation."""
        try:
            parsed = parse_json(value)
        except ValueError as ve:
            raise SchemaError(f"malformed JSON: {ve}") from ve
        return self.json_decode(parsed)


def _required(required):
    if isinstance(required, str):
        required = required.replace(",", " ").split()
    return set(required)


class _dict(_json):
    """
    Schema type for dictionary.

    Parameters and instance variables:
    • props: A mapping of name to schema.
    • required: Set of property names that are required.
    • additional: Additional unvalidated properties are allowed.
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(self, props, required=set(), *, additional=False, **kwargs):
        super().__init__(
            python_type=collections.abc.Mapping, json_type="object", **kwargs
        )
        self.props = props
        self.required = _required(required)
        self.additional = additional

    def _process(self, method, value):
        if value is None:
            return None
        result = {}
        for k, v in value.items():
            try:
                if k in self.props:
                    result[k] = getattr(self.props[k], method)(v)
                elif self.additional:
                    result[k] = v  # pass through
                else:
                    raise SchemaError("unexpected property")
            except SchemaError as se:
                se.push(k)
                raise
        return result

    def validate(self, value):
        """Validate value against the schema."""
        super().validate(value)
        if value is not None:
            for prop in self.required:
                if prop not in value:
                    raise SchemaError("value required", f"/{prop}")
            self._process("validate", value)

    def json_encode(self, value):
        """Encode the value into JSON object model representation."""
        self.validate(value)
        return self._process("json_encode", value)

    def json_decode(self, value):
        """Decode the value from JSON object model representation."""
        _type.validate(self, value)
        value = self._process("json_decode", value)
        self.validate(value)
        return value


class _list(_json):
    """
    Schema type for list.

    Parameters and instance variables:
    • items: Schema which all items must adhere to.
    • nullable: Allow None as a valid value.
    • description: A description of the schema.

    List values are represented in JSON as an array.
    """

    def __init__(self, items, **kwargs):
        super().__init__(
            python_type=collections.abc.Sequence, json_type="array", **kwargs
        )
        self.items = items

    def _process(self, method, value):
        if value is None:
            return None
        method = getattr(self.items, method)
        result = []
        for n, item in enumerate(value):
            try:
                result.append(method(item))
            except SchemaError as se:
                se.push(n)
                raise
        return result

    @staticmethod
    def _check_not_str(value):
        if isinstance(value, (str, bytes)):  # iterable, but not what we want
            raise SchemaError("expecting a sequence type")

    def validate(self, value):
        """Validate value against the schema."""
        self._check_not_str(value)
        super().validate(value)
        self._process("validate", value)

    def json_encode(self, value):
        """Encode the value into JSON object model representation."""
        self.validate(value)
        return self._process("json_encode", value)

    def json_decode(self, value):
        """Decode the value from JSON object model representation."""
        self._check_not_str(value)
        _type.validate(self, value)
        return self._process("json_decode", value)


class _str(_type):
    """
    Schema type for Unicode character string.

    Parameters and instance variables:
    • min_length: Minimum character length of the string.
    • max_length: Maximum character length of the string.
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(self, *, min_length=0, max_length=None, **kwargs):
        super().__init__(python_type=str, json_type="string", **kwargs)
        self.min_length = min_length
        self.max_length = max_length

    def validate(self, value):
        """Validate value against the schema."""
        super().validate(value)
        if value is not None:
            if len(value) < self.min_length:
                raise SchemaError(f"expecting minimum length of {self.min_length}")
            if self.max_length is not None and len(value) > self.max_length:
                raise SchemaError(f"expecting maximum length of {self.max_length}")

    def str_encode(self, value):
        """Encode the value into string representation."""
        self.validate(value)
        return value

    def str_decode(self, value):
        """Decode the value from string representation."""
        self.validate(value)
        return value


class _int(_type):
    """
    Schema type for integer.

    Parameters and instance variables:
    • minimum: Inclusive lower limit of the value.
    • maximum: Inclusive upper limit of the value.
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(self, *, minimum=None, maximum=None, **kwargs):
        super().__init__(python_type=int, json_type="integer", **kwargs)
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, value):
        """Validate value against the schema."""
        if isinstance(value, bool):  # bool is a subclass of int
            raise SchemaError("expecting int type")
        super().validate(value)
        if value is not None:
            if self.minimum is not None and value < self.minimum:
                raise SchemaError(f"expecting minimum value of {self.minimum}")
            if self.maximum is not None and value > self.maximum:
                raise SchemaError(f"expecting maximum value of {self.maximum}")

    def json_decode(self, value):
        """Decode the value from JSON object model representation."""
        result = value
        if isinstance(result, float):
            try:
                result = result.__int__()
            except (OverflowError, ValueError) as e:  # infinity or NaN
                raise SchemaError("expecting integer value") from e
            if result != value:  # 1.0 == 1
                raise SchemaError("expecting integer value")
        self.validate(result)
        return result

    def str_encode(self, value):
        """Encode the value into string representation."""
        self.validate(value)
        return None if value is None else str(value)

    def str_decode(self, value):
        """Decode the value from string representation."""
        if value is not None:
            try:
                value = int(value)
            except ValueError as ve:
                raise SchemaError("expecting an integer value") from ve
        self.validate(value)
        return value


class _bool(_type):
    """
    Schema type for boolean value.

    Parameters and instance variables:
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(self, **kwargs):
        super().__init__(python_type=bool, json_type="boolean", **kwargs)

    def str_encode(self, value):
        """Encode the value into string representation."""
        self.validate(value)
        if value is None:
            return None
        return "true" if value else "false"

    def str_decode(self, value):
        """Decode the value from string representation."""
        try:
            return {None: None, "true": True, "false": False}[value]
        except KeyError:
            raise SchemaError("expecting true or false")


class _dataclass(_json):
    """
    Schema type for data class. Data class fields must be annotated with schema
    types.

    Every attribute is expressed in the JSON object model, including those with a
    value of None, so an encoded value is structurally complete. Decoding rejects
    properties that do not map to an attribute.

    Parameters and instance variables:
    • cls: Data class.
    • names: Mapping of attribute name to JSON property name, where they differ.
    • nullable: Allow None as a valid value.
    • description: A description of the schema.
    """

    def __init__(self, cls, *, names=None, **kwargs):
        super().__init__(python_type=cls, json_type="object", **kwargs)
        self.cls = cls
        self.attrs = {f.name: f.type for f in dataclasses.fields(cls)}
        self.names = {attr: (names or {}).get(attr, attr) for attr in self.attrs}

    def validate(self, value):
        """Validate value against the schema."""
        super().validate(value)
        if value is not None:
            for attr, schema in self.attrs.items():
                try:
                    schema.validate(getattr(value, attr))
                except SchemaError as se:
                    se.push(self.names[attr])
                    raise

    def json_encode(self, value):
        """Encode the value into JSON object model representation."""
        self.validate(value)
        if value is None:
            return None
        result = {}
        for attr, schema in self.attrs.items():
            result[self.names[attr]] = schema.json_encode(getattr(value, attr))
        return result

    def json_decode(self, value):
        """Decode the value from JSON object model representation."""
        if value is None:
            self.validate(value)
            return None
        if not isinstance(value, collections.abc.Mapping):
            raise SchemaError("expecting an object")
        attrs = {name: attr for attr, name in self.names.items()}
        kwargs = {}
        for name, v in value.items():
            attr = attrs.get(name)
            if attr is None:
                raise SchemaError("unexpected property", f"/{name}")
            try:
                kwargs[attr] = self.attrs[attr].json_decode(v)
            except SchemaError as se:
                se.push(name)
                raise
        try:
            result = self.cls(**kwargs)
        except TypeError as te:  # attribute without default value
            raise SchemaError(te) from te
        self.validate(result)
        return result

    def merge(self, target, tree):
        """
        Update the target value in place from a JSON object model tree. Properties
        present in the tree overwrite the corresponding attributes of the target;
        properties absent from the tree leave the target untouched. Nested arrays
        and objects are replaced wholesale, not merged. The target is only modified
        if the entire result decodes successfully.
        """
        if not isinstance(tree, collections.abc.Mapping):
            raise SchemaError("expecting an object")
        result = self.json_decode({**self.json_encode(target), **tree})
        for attr in self.attrs:
            setattr(target, attr, getattr(result, attr))
        return target


def function_params(function):
    """
    Return a dict schema of the schema-annotated parameters of a function.
    Parameters without a default value are required.
    """
    props = {}
    required = set()
    for p in inspect.signature(function).parameters.values():
        schema = function.__annotations__.get(p.name)
        if isinstance(schema, _type):
            props[p.name] = schema
            if p.default is p.empty:
                required.add(p.name)
    return _dict(props, required)


def call(function, args, kwargs):
    """
    Call a function, validating its input parameters and return value.

    Parameters:
    • function: Function to call.
    • args: Positional arguments to pass to function.
    • kwargs: Keyword arguments to pass to function.
    """
    try:
        bound = inspect.signature(function).bind(*args, **kwargs)
    except TypeError as te:
        raise SchemaError(te) from te
    for name, value in bound.arguments.items():
        schema = function.__annotations__.get(name)
        if isinstance(schema, _type):
            try:
                schema.validate(value)
            except SchemaError as se:
                se.path = f"{name}:{se.path}" if se.path else name
                raise
    result = function(*bound.args, **bound.kwargs)
    returns = function.__annotations__.get("return")
    if isinstance(returns, _type):
        returns.validate(result)
    return result


@wrapt.decorator
def validate(wrapped, instance, args, kwargs):
    """
    Decorate a function to validate its parameters and return value.

    Example:

    import patchable.schema as s

    @s.validate
    def fn(a: s.str(), b: s.int()) -> s.str():
        ...
    """
    return call(wrapped, args, kwargs)
