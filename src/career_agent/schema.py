# schema.py
# Descriptive input schemas for tools.
#
# A tool declares its input as a mapping of field name -> Param. The schema
# validates raw model-supplied input and renders itself as the JSON Schema
# object providers expect. Validation is delegated to a pydantic model built
# on the fly; tool authors never touch pydantic directly.

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

logger = logging.getLogger(__name__)

_PYTHON_TYPES: dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "array": list,
    "object": dict,
}


class SchemaValidationError(Exception):
    """Raised when raw tool input does not satisfy the tool's schema."""


class Param(BaseModel):
    """One input field of a tool."""

    type: str = Field("string", description="JSON type name: string, integer, number, boolean, array, object.")
    description: str = ""
    required: bool = True
    default: Any = None
    enum: list[Any] | None = None
    items: str | None = Field(None, description="Element type for arrays.")

    def python_type(self) -> Any:
        base = _PYTHON_TYPES.get(self.type, Any)
        if base is list and self.items in _PYTHON_TYPES:
            return list[_PYTHON_TYPES[self.items]]
        return base

    def to_json_schema(self) -> dict[str, Any]:
        if self.type not in _PYTHON_TYPES:
            # Unknown types degrade to an unconstrained property.
            logger.debug("Unrepresentable param type %r, rendering as any", self.type)
            return {"description": self.description} if self.description else {}

        prop: dict[str, Any] = {"type": self.type}
        if self.description:
            prop["description"] = self.description
        if self.enum is not None:
            prop["enum"] = list(self.enum)
        if self.type == "array" and self.items in _PYTHON_TYPES:
            prop["items"] = {"type": self.items}
        if not self.required and self.default is not None:
            prop["default"] = self.default
        return prop


class InputSchema:
    """A tool's declared input: field name -> Param."""

    def __init__(self, params: dict[str, Param] | None = None) -> None:
        self.params: dict[str, Param] = dict(params or {})
        self._model: type[BaseModel] | None = None

    def _validator(self) -> type[BaseModel]:
        if self._model is None:
            # Fields get internal names and carry the declared name as an alias,
            # so names pydantic reserves (leading underscore, model_config) still validate.
            fields: dict[str, Any] = {}
            for index, (name, param) in enumerate(self.params.items()):
                annotation = param.python_type()
                if param.required:
                    fields[f"field_{index}"] = (annotation, Field(..., alias=name))
                else:
                    fields[f"field_{index}"] = (Optional[annotation], Field(param.default, alias=name))
            self._model = create_model(
                "ToolInput",
                __config__=ConfigDict(extra="ignore"),
                **fields,
            )
        return self._model

    def validate(self, raw: dict[str, Any] | None) -> dict[str, Any]:
        """
        Validate raw input and return the cleaned values.

        Unknown keys are dropped, optional fields are filled with their
        defaults. Raises SchemaValidationError on failure.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise SchemaValidationError(f"expected an object, got {type(raw).__name__}")

        try:
            parsed = self._validator().model_validate(raw)
        except ValidationError as exc:
            raise SchemaValidationError(_format_errors(exc)) from exc

        values = parsed.model_dump(by_alias=True)
        for name, param in self.params.items():
            value = values.get(name)
            if param.enum is not None and value is not None and value not in param.enum:
                allowed = ", ".join(str(option) for option in param.enum)
                raise SchemaValidationError(f"{name}: must be one of {allowed}")
        return values

    def to_json_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {name: param.to_json_schema() for name, param in self.params.items()},
            "required": [name for name, param in self.params.items() if param.required],
        }


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "input"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
