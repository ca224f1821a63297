"""Declarative input schemas for tools and the argument validator.

A tool's input schema is a flat list of named parameters. Each parameter has a
primitive kind, an optional enum, an optional default, and for arrays an
optional item kind. The same description is rendered as JSON Schema for
tools/list and interpreted by ``InputSchema.validate`` for tools/call.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Mapping

from mcplex.errors import ValidationError


class _Missing:
    """Sentinel type for parameters without a default."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

PARAM_TYPES = ("string", "number", "integer", "boolean", "array", "object")


def _check_kind(kind: str, value: Any) -> tuple[bool, Any]:
    """Check a value against a primitive kind.

    Returns:
        (matches, coerced_value)
    """
    if kind == "string":
        return isinstance(value, str), value
    if kind == "boolean":
        return isinstance(value, bool), value
    if kind == "number":
        if isinstance(value, bool):
            return False, value
        return isinstance(value, (int, float)), value
    if kind == "integer":
        if isinstance(value, bool):
            return False, value
        if isinstance(value, int):
            return True, value
        if isinstance(value, float) and value.is_integer():
            return True, int(value)
        return False, value
    if kind == "array":
        return isinstance(value, list), value
    if kind == "object":
        return isinstance(value, dict), value
    return False, value


def _type_name(value: Any) -> str:
    """Name a Python value's type the way JSON Schema would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


@dataclass(frozen=True)
class Param:
    """A named tool parameter.

    A parameter with a default is optional regardless of ``required``.
    """

    name: str
    type: str
    description: str = ""
    required: bool = True
    default: Any = MISSING
    enum: tuple[Any, ...] | None = None
    items: str | None = None

    def __post_init__(self) -> None:
        if self.type not in PARAM_TYPES:
            raise ValueError(f"Unsupported parameter type '{self.type}' for {self.name}")
        if self.items is not None and self.type != "array":
            raise ValueError(f"Only array parameters can declare items: {self.name}")
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(self.enum))

    @property
    def is_required(self) -> bool:
        return self.required and self.default is MISSING

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.items is not None:
            schema["items"] = {"type": self.items}
        if self.default is not MISSING:
            schema["default"] = self.default
        return schema

    def check(self, value: Any) -> tuple[Any, str | None]:
        """Check one value against this parameter.

        Returns:
            (coerced_value, error) where error is None when the value is valid
        """
        ok, coerced = _check_kind(self.type, value)
        if not ok:
            return value, (
                f"Argument '{self.name}' must be of type {self.type}, "
                f"got {_type_name(value)}"
            )

        if self.enum is not None and coerced not in self.enum:
            allowed = ", ".join(repr(member) for member in self.enum)
            return value, f"Argument '{self.name}' must be one of {allowed}"

        if self.items is not None:
            checked_items = []
            for index, item in enumerate(coerced):
                item_ok, item_value = _check_kind(self.items, item)
                if not item_ok:
                    return value, (
                        f"Argument '{self.name}[{index}]' must be of type "
                        f"{self.items}, got {_type_name(item)}"
                    )
                checked_items.append(item_value)
            coerced = checked_items

        return coerced, None


@dataclass
class ValidationResult:
    """Outcome of validating tool arguments.

    Attributes:
        arguments: Validated arguments with defaults applied (only meaningful if ok)
        errors: Human-readable validation errors, empty when valid
    """

    arguments: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> dict[str, Any]:
        """Return the arguments, or raise ValidationError if invalid."""
        if self.errors:
            raise ValidationError(self.errors)
        return self.arguments


class InputSchema:
    """Ordered collection of parameters describing a tool's input."""

    def __init__(self, *params: Param):
        names = [param.name for param in params]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate parameter names: {', '.join(duplicates)}")
        self.params: tuple[Param, ...] = params

    def __iter__(self):
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"InputSchema({', '.join(param.name for param in self.params)})"

    @property
    def required(self) -> list[str]:
        return [param.name for param in self.params if param.is_required]

    def to_json_schema(self) -> dict[str, Any]:
        """Render the schema as a JSON Schema object for tools/list."""
        return {
            "type": "object",
            "properties": {param.name: param.to_json_schema() for param in self.params},
            "required": self.required,
        }

    def validate(self, arguments: Any) -> ValidationResult:
        """Validate tool call arguments against this schema.

        Unknown fields are ignored and not passed on. A null value counts as
        missing. Missing optional fields get their default when they have one.

        Args:
            arguments: The raw ``arguments`` member of a tools/call request

        Returns:
            ValidationResult holding either the coerced arguments or the errors
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            return ValidationResult(
                errors=[f"Arguments must be an object, got {_type_name(arguments)}"]
            )

        result = ValidationResult()
        for param in self.params:
            value = arguments.get(param.name)
            if value is None:
                if param.default is not MISSING:
                    result.arguments[param.name] = copy.deepcopy(param.default)
                elif param.is_required:
                    result.errors.append(f"Missing required argument '{param.name}'")
                continue

            coerced, error = param.check(value)
            if error:
                result.errors.append(error)
            else:
                result.arguments[param.name] = coerced

        return result
