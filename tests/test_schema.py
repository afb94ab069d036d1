import pytest

from career_agent.schema import InputSchema, Param, SchemaValidationError


@pytest.fixture
def schema():
    return InputSchema(
        {
            "job_id": Param(description="Job ID"),
            "limit": Param(type="integer", required=False, default=10),
            "tags": Param(type="array", items="string", required=False),
            "status": Param(required=False, enum=["Applied", "Offer"]),
        }
    )


def test_validate_fills_defaults_and_drops_unknown_keys(schema):
    values = schema.validate({"job_id": "j1", "surprise": 1})
    assert values == {"job_id": "j1", "limit": 10, "tags": None, "status": None}


def test_validate_missing_required_field(schema):
    with pytest.raises(SchemaValidationError, match="job_id"):
        schema.validate({"limit": 3})


def test_validate_wrong_type(schema):
    with pytest.raises(SchemaValidationError, match="limit"):
        schema.validate({"job_id": "j1", "limit": "lots"})


def test_validate_enum(schema):
    assert schema.validate({"job_id": "j1", "status": "Offer"})["status"] == "Offer"
    with pytest.raises(SchemaValidationError, match="must be one of Applied, Offer"):
        schema.validate({"job_id": "j1", "status": "Ghosted"})


def test_validate_rejects_non_object():
    with pytest.raises(SchemaValidationError, match="expected an object"):
        InputSchema().validate(["not", "a", "dict"])


def test_validate_none_is_empty_object():
    assert InputSchema().validate(None) == {}


def test_unknown_param_type_accepts_anything():
    schema = InputSchema({"payload": Param(type="mystery")})
    assert schema.validate({"payload": {"nested": [1, 2]}}) == {"payload": {"nested": [1, 2]}}


def test_to_json_schema(schema):
    assert schema.to_json_schema() == {
        "type": "object",
        "properties": {
            "job_id": {"type": "string", "description": "Job ID"},
            "limit": {"type": "integer", "default": 10},
            "tags": {"type": "array", "items": {"type": "string"}},
            "status": {"type": "string", "enum": ["Applied", "Offer"]},
        },
        "required": ["job_id"],
    }


@pytest.mark.parametrize("name", ["_id", "model_config", "schema", "json", "fields"])
def test_reserved_looking_names_validate_like_any_other(name):
    schema = InputSchema({name: Param(), "note": Param(required=False, default="none")})

    assert schema.validate({name: "x"}) == {name: "x", "note": "none"}
    with pytest.raises(SchemaValidationError, match=name):
        schema.validate({})
    assert schema.to_json_schema()["required"] == [name]
