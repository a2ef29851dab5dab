"""
Question-set file validation for TelStudy.

Validates uploaded question-set files before they are stored:
- File extension (.json) and size limit
- JSON syntax
- JSON Schema (non-empty array of four-option questions)

Errors are reported as ``path: message`` strings so the upload UI can show
them inline.
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Union

from jsonschema import Draft7Validator
from jsonschema import ValidationError as SchemaValidationError

from ..config import config
from ..models.question import Question, questions_from_list


def _format_size(num_bytes: int) -> str:
    mib = 1024 * 1024
    if num_bytes >= mib and num_bytes % mib == 0:
        return f"{num_bytes // mib}MB"
    return f"{num_bytes} bytes"


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The parsed data (raw JSON value)
        questions: Parsed Question objects when valid
    """

    def __init__(
        self,
        valid: bool,
        errors: List[str],
        data: Any = None,
        questions: Optional[List[Question]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.questions = questions or []

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            return f"✓ Validation passed ({len(self.questions)} question(s))"
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class QuestionSetValidator:
    """
    JSON Schema validator for question-set files.

    Usage:
        validator = QuestionSetValidator()
        result = validator.validate_file("biology.json", raw_bytes)
        if result:
            questions = result.questions
        else:
            print(result.errors)
    """

    def __init__(self, schema_path: Optional[Union[Path, str]] = None):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file (default: config.paths.question_set_schema)
        """
        self.schema_path = Path(schema_path or config.paths.question_set_schema)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema)

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate parsed JSON data against the question-set schema.

        Args:
            data: Parsed JSON value

        Returns:
            ValidationResult with validation status, errors and questions
        """
        errors = [
            self._format_error(error)
            for error in sorted(self.validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        ]
        if errors:
            return ValidationResult(valid=False, errors=errors, data=data)
        return ValidationResult(valid=True, errors=[], data=data, questions=questions_from_list(data))

    def validate_file(
        self,
        filename: str,
        content: Union[bytes, str],
        max_size_bytes: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate an uploaded file: extension, size, JSON syntax, then schema.

        Args:
            filename: Original file name
            content: Raw file content
            max_size_bytes: Size limit (default: config.quiz.max_file_size_bytes)

        Returns:
            ValidationResult
        """
        limit = config.quiz.max_file_size_bytes if max_size_bytes is None else max_size_bytes
        raw = content.encode("utf-8") if isinstance(content, str) else content

        if len(raw) > limit:
            return ValidationResult(
                valid=False, errors=[f"File exceeds {_format_size(limit)} limit"]
            )

        if not filename.lower().endswith(".json"):
            return ValidationResult(valid=False, errors=["File must be a .json file"])

        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return ValidationResult(valid=False, errors=["File is not valid JSON"])

        return self.validate(parsed)

    def _format_error(self, error: SchemaValidationError) -> str:
        """
        Convert a jsonschema error to a ``path: message`` string.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message
        """
        path = ".".join(str(p) for p in error.path)
        return f"{path}: {error.message}" if path else error.message


_default_validator: Optional[QuestionSetValidator] = None


def get_question_set_validator() -> QuestionSetValidator:
    """Get or create the shared validator for the configured schema."""
    global _default_validator
    if _default_validator is None:
        _default_validator = QuestionSetValidator()
    return _default_validator


def validate_question_file(filename: str, content: Union[bytes, str]) -> ValidationResult:
    """
    Convenience function to validate an uploaded question-set file.

    Args:
        filename: Original file name
        content: Raw file content

    Returns:
        ValidationResult
    """
    return get_question_set_validator().validate_file(filename, content)


def validate_question_set(data: Any) -> ValidationResult:
    """
    Convenience function to validate already-parsed question-set data.

    Args:
        data: Parsed JSON value

    Returns:
        ValidationResult
    """
    return get_question_set_validator().validate(data)
