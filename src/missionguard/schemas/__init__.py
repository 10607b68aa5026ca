"""Artifact JSON Schema definitions and validation utilities.

Every artifact type written to a run store has a packaged schema:

    - mission_brief.schema.json, prd.schema.json
    - architecture.schema.json, api_contract.schema.json
    - ui_spec.schema.json, test_plan.schema.json
    - code_bundle.schema.json: frontend_code and backend_code
    - verification_result.schema.json: review_report and security_report
    - human_feedback.schema.json, deployment.schema.json, repair_log.schema.json

Usage:
    from missionguard.schemas import validate_artifact

    errors = validate_artifact("prd", {"title": "Todo", "features": []})
    # [] when valid, otherwise [(json_pointer_path, message), ...]
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

from jsonschema import Draft202012Validator

ARTIFACT_SCHEMAS: dict[str, str] = {
    "mission_brief": "mission_brief.schema.json",
    "prd": "prd.schema.json",
    "architecture": "architecture.schema.json",
    "api_contract": "api_contract.schema.json",
    "ui_spec": "ui_spec.schema.json",
    "test_plan": "test_plan.schema.json",
    "frontend_code": "code_bundle.schema.json",
    "backend_code": "code_bundle.schema.json",
    "review_report": "verification_result.schema.json",
    "security_report": "verification_result.schema.json",
    "human_feedback": "human_feedback.schema.json",
    "deployment": "deployment.schema.json",
    "repair_log": "repair_log.schema.json",
}


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'prd.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("missionguard.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_artifact_schema(artifact_type: str) -> dict[str, Any] | None:
    """Get the schema for an artifact type.

    Returns:
        JSON Schema, or None when the type has no packaged schema
    """
    name = ARTIFACT_SCHEMAS.get(artifact_type)
    if name is None:
        return None
    return _load_schema(name)


def _pointer(path: Any) -> str:
    parts = [str(p) for p in path]
    return "/" + "/".join(parts) if parts else "/"


def validate_against(schema: dict[str, Any], data: Any) -> list[tuple[str, str]]:
    """Collect every violation of ``schema`` by ``data``.

    Returns:
        (json_pointer_path, message) pairs, ordered by path; empty when valid
    """
    validator = Draft202012Validator(schema)
    found = [
        (_pointer(e.absolute_path), e.message) for e in validator.iter_errors(data)
    ]
    return sorted(found)


def validate_artifact(artifact_type: str, data: Any) -> list[tuple[str, str]]:
    """Validate artifact data against its packaged schema.

    Types without a packaged schema only need to be JSON objects.
    """
    schema = get_artifact_schema(artifact_type)
    if schema is None:
        if not isinstance(data, dict):
            return [("/", f"{type(data).__name__} is not of type 'object'")]
        return []
    return validate_against(schema, data)


__all__ = [
    "ARTIFACT_SCHEMAS",
    "get_artifact_schema",
    "validate_against",
    "validate_artifact",
]
