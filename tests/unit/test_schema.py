"""Unit tests for tool input schemas and argument validation."""

import pytest

from mcplex.errors import ValidationError
from mcplex.tools.schema import InputSchema, Param


@pytest.fixture
def movie_schema():
    """Schema shaped like movie-ratings: required, optional and enum with default."""
    return InputSchema(
        Param("title", "string", "Movie title"),
        Param("year", "integer", "Release year", required=False),
        Param("plot", "string", "Plot length", default="short", enum=("short", "full")),
    )


def test_to_json_schema(movie_schema):
    """Test rendering as a JSON Schema object."""
    schema = movie_schema.to_json_schema()

    assert schema["type"] == "object"
    assert schema["required"] == ["title"]
    assert schema["properties"]["title"] == {"type": "string", "description": "Movie title"}
    assert schema["properties"]["plot"]["enum"] == ["short", "full"]
    assert schema["properties"]["plot"]["default"] == "short"


def test_array_items_in_json_schema():
    """Test that array item types are rendered."""
    schema = InputSchema(Param("items", "array", items="string")).to_json_schema()

    assert schema["properties"]["items"] == {"type": "array", "items": {"type": "string"}}


def test_validate_applies_defaults(movie_schema):
    """Test that missing optional fields get defaults or are omitted."""
    result = movie_schema.validate({"title": "Inception"})

    assert result.ok
    assert result.arguments == {"title": "Inception", "plot": "short"}


def test_validate_missing_required(movie_schema):
    """Test that a missing required field is reported."""
    result = movie_schema.validate({"year": 2010})

    assert not result.ok
    assert result.errors == ["Missing required argument 'title'"]


def test_validate_null_counts_as_missing(movie_schema):
    """Test that a null required field is reported as missing."""
    result = movie_schema.validate({"title": None})

    assert result.errors == ["Missing required argument 'title'"]


def test_validate_none_arguments():
    """Test that absent arguments are treated as an empty object."""
    schema = InputSchema(Param("directory", "string", default="./"))

    result = schema.validate(None)

    assert result.ok
    assert result.arguments == {"directory": "./"}


def test_validate_rejects_non_object():
    """Test that non-object arguments are rejected."""
    result = InputSchema(Param("a", "number")).validate([1, 2])

    assert result.errors == ["Arguments must be an object, got array"]


def test_validate_wrong_type(movie_schema):
    """Test that a value of the wrong type is reported with both types."""
    result = movie_schema.validate({"title": 42})

    assert result.errors == ["Argument 'title' must be of type string, got integer"]


@pytest.mark.parametrize("value", [True, False])
def test_bool_is_not_a_number(value):
    """Test that booleans are never accepted as numbers."""
    schema = InputSchema(Param("a", "number"), Param("b", "integer"))

    result = schema.validate({"a": value, "b": value})

    assert len(result.errors) == 2


def test_integer_coercion():
    """Test that integral floats are coerced and fractional ones rejected."""
    schema = InputSchema(Param("year", "integer"))

    assert schema.validate({"year": 2010.0}).arguments == {"year": 2010}
    assert not schema.validate({"year": 2010.5}).ok


def test_number_accepts_int_and_float():
    """Test that number accepts both ints and floats unchanged."""
    schema = InputSchema(Param("a", "number"), Param("b", "number"))

    result = schema.validate({"a": 2, "b": 3.5})

    assert result.arguments == {"a": 2, "b": 3.5}


def test_enum_violation(movie_schema):
    """Test that values outside the enum are rejected."""
    result = movie_schema.validate({"title": "Heat", "plot": "medium"})

    assert result.errors == ["Argument 'plot' must be one of 'short', 'full'"]


def test_array_item_types():
    """Test that array items are checked against the item type."""
    schema = InputSchema(Param("items", "array", items="string"))

    assert schema.validate({"items": ["a", "b"]}).ok
    result = schema.validate({"items": ["a", 2]})
    assert result.errors == ["Argument 'items[1]' must be of type string, got integer"]


def test_unknown_fields_are_dropped(movie_schema):
    """Test that unknown fields are accepted but not passed on."""
    result = movie_schema.validate({"title": "Heat", "director": "Mann"})

    assert result.ok
    assert "director" not in result.arguments


def test_mutable_defaults_are_copied():
    """Test that a default value is not shared between calls."""
    schema = InputSchema(Param("tags", "array", default=[]))

    first = schema.validate({}).arguments
    first["tags"].append("x")

    assert schema.validate({}).arguments == {"tags": []}


def test_raise_for_errors():
    """Test that raise_for_errors raises ValidationError with all messages."""
    result = InputSchema(Param("a", "number"), Param("b", "number")).validate({})

    with pytest.raises(ValidationError) as exc_info:
        result.raise_for_errors()

    assert len(exc_info.value.errors) == 2


def test_duplicate_param_names():
    """Test that a schema cannot declare the same parameter twice."""
    with pytest.raises(ValueError, match="Duplicate parameter names: a"):
        InputSchema(Param("a", "number"), Param("a", "string"))


def test_unsupported_param_type():
    """Test that unknown parameter types are rejected at declaration."""
    with pytest.raises(ValueError, match="Unsupported parameter type"):
        Param("a", "float")


def test_items_only_for_arrays():
    """Test that only array parameters may declare an item type."""
    with pytest.raises(ValueError, match="Only array parameters"):
        Param("a", "string", items="string")
