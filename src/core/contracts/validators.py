"""
JSON Schema Contract Validators

Validates wire payloads against the formal JSON Schema contracts using the
jsonschema library (Draft 2020-12).

Schemas (contracts/schema/):
- remanent_request.json   — expenses, q/p rules, k periods
- remanent_report.json    — processed expenses, k period sums, totals
- validation_report.json  — {valid, message, errors}
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ContractViolation(ValueError):
    """
    A payload does not match its contract.

    Attributes:
        schema_name: contract that was checked
        errors: every schema error, formatted as "<path>: <message>"
    """

    def __init__(self, schema_name: str, errors: list[str]):
        self.schema_name = schema_name
        self.errors = tuple(errors)
        super().__init__(
            f"Payload violates {schema_name} contract ({len(self.errors)} error(s)): "
            f"{list(self.errors)}"
        )


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Loads JSON Schema files.

    Schemas are looked up in contracts/schema/ relative to the project root.
    """

    def __init__(self, schema_dir: Path | None = None):
        # Project root is 4 levels above this file
        self._schema_dir = schema_dir or (
            Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        )
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Cache of loaded schemas
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load a JSON Schema file.

        Args:
            schema_name: Schema name without extension (e.g. 'remanent_request')

        Returns:
            Loaded schema as dict

        Raises:
            FileNotFoundError: if the schema file does not exist
            json.JSONDecodeError: if the file is not valid JSON
            ValueError: if the file is not a valid Draft 2020-12 schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation of the schema itself
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Global loader instance
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Base class for contract validators.

    Wraps validation of data against one JSON Schema.
    """

    def __init__(self, schema_name: str):
        """
        Args:
            schema_name: Name of the schema to validate against
        """
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Validate data against the schema (first error only).

        Raises:
            ValidationError: if data does not match the schema
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        """True if data matches the schema."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Any) -> Iterator[ValidationError]:
        """
        Iterate over every validation error.

        Yields:
            ValidationError for each problem found
        """
        return self.validator.iter_errors(data)

    def ensure_valid(self, data: Any) -> None:
        """
        Validate and report every error at once.

        Raises:
            ContractViolation: listing all errors, ordered by JSON path
        """
        errors = sorted(self.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
        if errors:
            raise ContractViolation(self.schema_name, [format_error(e) for e in errors])


class RemanentRequestValidator(ContractValidator):
    """Validator for the remanent_request contract."""

    def __init__(self):
        super().__init__("remanent_request")


class RemanentReportValidator(ContractValidator):
    """Validator for the remanent_report contract."""

    def __init__(self):
        super().__init__("remanent_report")


class ValidationReportValidator(ContractValidator):
    """Validator for the validation_report contract."""

    def __init__(self):
        super().__init__("validation_report")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def format_error(error: ValidationError) -> str:
    """'<json path>: <message>', with '$' for the document root."""
    return f"{error.json_path}: {error.message}"


def validate_remanent_request(data: Dict[str, Any]) -> None:
    """
    Validate a remanent request payload.

    Raises:
        ContractViolation: if the payload does not match the schema
    """
    RemanentRequestValidator().ensure_valid(data)


def validate_remanent_report(data: Dict[str, Any]) -> None:
    """
    Validate an encoded remanent report.

    Raises:
        ContractViolation: if the report does not match the schema
    """
    RemanentReportValidator().ensure_valid(data)


def validate_validation_report(data: Dict[str, Any]) -> None:
    """
    Validate an encoded validation report.

    Raises:
        ContractViolation: if the report does not match the schema
    """
    ValidationReportValidator().ensure_valid(data)
