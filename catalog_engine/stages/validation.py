"""
Schema Validator.

Checks loosely-typed topic candidates against the topic schema and builds
normalized Topic values. Collects every defect in one pass so authors get
the complete list per run.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from catalog_engine.models.findings import ValidationError
from catalog_engine.models.topic import (
    CATEGORIES,
    CodeExample,
    QAPair,
    Resource,
    Topic,
    TopicCandidate,
)

logger = logging.getLogger(__name__)


SLUG_RE = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")

# Top-level topic fields (authoring names)
REQUIRED_TEXT_FIELDS = ("id", "title", "explanation")
OPTIONAL_TEXT_FIELDS = ("subtitle", "summary", "analogy", "visualConcept", "realWorldUse", "diagram")
SEQUENCE_FIELDS = ("keyPoints", "codeExamples", "resources", "questions", "behavioralQuestions", "discussions")

# Nested record shapes: (required text fields, optional text fields)
CODE_EXAMPLE_SHAPE = (("title", "language", "code"), ("description",))
RESOURCE_SHAPE = (("title", "url"), ("type", "description"))
QA_PAIR_SHAPE = (("question", "answer"), ())

NESTED_SHAPES = {
    "codeExamples": CODE_EXAMPLE_SHAPE,
    "resources": RESOURCE_SHAPE,
    "discussions": RESOURCE_SHAPE,
    "questions": QA_PAIR_SHAPE,
    "behavioralQuestions": QA_PAIR_SHAPE,
}


@dataclass
class ValidationResult:
    """Either a normalized Topic or a non-empty list of errors."""
    topic: Optional[Topic] = None
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.topic is not None and not self.errors


def _type_name(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


def _check_record(
    record: dict,
    path: str,
    required: Sequence[str],
    optional: Sequence[str],
    errors: List[ValidationError]
) -> bool:
    """
    Run presence, type and non-emptiness checks over the text fields of one record.

    Args:
        record: Mapping under validation
        path: Path prefix for error reporting ("" for the topic itself)
        required: Text fields that must be present and non-empty
        optional: Text fields that must be non-blank when present
        errors: Collector, appended to in check order

    Returns:
        True if no error was added
    """
    start = len(errors)
    prefix = f"{path}." if path else ""

    # 1. Presence
    missing = set()
    for name in required:
        if record.get(name) is None:
            errors.append(ValidationError(f"{prefix}{name}", "required field is missing"))
            missing.add(name)

    # 2. Types
    present = [n for n in required if n not in missing]
    present += [n for n in optional if record.get(n) is not None]
    typed = []
    for name in present:
        value = record[name]
        if isinstance(value, str):
            typed.append(name)
        else:
            errors.append(ValidationError(f"{prefix}{name}", f"expected text, got {_type_name(value)}"))

    # 3. Non-emptiness
    for name in typed:
        if not record[name].strip():
            reason = "must not be empty" if name in required else "must not be blank when present"
            errors.append(ValidationError(f"{prefix}{name}", reason))

    return len(errors) == start


def _strip_optional(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


class SchemaValidator:
    """
    Validates topic candidates and normalizes them into Topic values.

    Pure: validate() has no side effects and never raises for bad input.
    """

    def validate(self, candidate: TopicCandidate) -> ValidationResult:
        """
        Validate one candidate record.

        Checks run in order: required-field presence, type conformance,
        non-emptiness, then nested code examples, resources and Q/A pairs.
        Nested failures are collected, not short-circuited.

        Args:
            candidate: Loaded candidate with its category and source

        Returns:
            ValidationResult holding the Topic, or every error found
        """
        data = candidate.data
        if not isinstance(data, dict):
            return ValidationResult(errors=[
                ValidationError("", f"topic record must be a mapping, got {_type_name(data)}")
            ])

        errors: List[ValidationError] = []

        _check_record(data, "", REQUIRED_TEXT_FIELDS, OPTIONAL_TEXT_FIELDS, errors)

        # Slug shape only matters once id is known to be usable text
        topic_id = data.get("id")
        if isinstance(topic_id, str) and topic_id.strip() and not SLUG_RE.match(topic_id.strip()):
            errors.append(ValidationError(
                "id", f"'{topic_id}' is not a lower-case slug (letters, digits, '-' or '_')"
            ))

        if candidate.category not in CATEGORIES:
            errors.append(ValidationError(
                "category", f"unknown category '{candidate.category}'"
            ))

        sequences_ok = self._check_sequence_types(data, errors)

        if "keyPoints" in sequences_ok:
            self._check_key_points(data["keyPoints"], errors)

        for name, (required, optional) in NESTED_SHAPES.items():
            if name in sequences_ok:
                self._check_nested(data[name], name, required, optional, errors)

        if errors:
            logger.debug(f"Rejected {candidate.label}: {len(errors)} validation errors")
            return ValidationResult(errors=errors)

        return ValidationResult(topic=self._build_topic(data, candidate.category))

    def _check_sequence_types(self, data: dict, errors: List[ValidationError]) -> List[str]:
        """Return the sequence fields that are present and actually lists."""
        usable = []
        for name in SEQUENCE_FIELDS:
            value = data.get(name)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                usable.append(name)
            else:
                errors.append(ValidationError(name, f"expected a list, got {_type_name(value)}"))
        return usable

    def _check_key_points(self, points: Sequence[object], errors: List[ValidationError]) -> None:
        for i, point in enumerate(points):
            path = f"keyPoints[{i}]"
            if not isinstance(point, str):
                errors.append(ValidationError(path, f"expected text, got {_type_name(point)}"))
            elif not point.strip():
                errors.append(ValidationError(path, "must not be empty"))

    def _check_nested(
        self,
        records: Sequence[object],
        name: str,
        required: Tuple[str, ...],
        optional: Tuple[str, ...],
        errors: List[ValidationError]
    ) -> None:
        for i, record in enumerate(records):
            path = f"{name}[{i}]"
            if not isinstance(record, dict):
                errors.append(ValidationError(path, f"expected a mapping, got {_type_name(record)}"))
                continue
            _check_record(record, path, required, optional, errors)

    def _build_topic(self, data: Dict, category: str) -> Topic:
        """Normalize a candidate that passed every check."""
        return Topic(
            id=data["id"].strip(),
            title=data["title"].strip(),
            explanation=data["explanation"],
            category=category,
            subtitle=(data.get("subtitle") or "").strip(),
            summary=(data.get("summary") or "").strip(),
            key_points=tuple(p.strip() for p in data.get("keyPoints") or []),
            code_examples=tuple(
                CodeExample(
                    title=e["title"].strip(),
                    language=e["language"].strip().lower(),
                    code=e["code"],
                    description=_strip_optional(e.get("description")),
                )
                for e in data.get("codeExamples") or []
            ),
            resources=tuple(self._build_resource(r) for r in data.get("resources") or []),
            questions=tuple(self._build_qa(q) for q in data.get("questions") or []),
            analogy=_strip_optional(data.get("analogy")),
            visual_concept=_strip_optional(data.get("visualConcept")),
            real_world_use=_strip_optional(data.get("realWorldUse")),
            diagram=_strip_optional(data.get("diagram")),
            behavioral_questions=tuple(
                self._build_qa(q) for q in data.get("behavioralQuestions") or []
            ),
            discussions=tuple(self._build_resource(r) for r in data.get("discussions") or []),
        )

    @staticmethod
    def _build_resource(record: dict) -> Resource:
        resource_type = _strip_optional(record.get("type"))
        return Resource(
            title=record["title"].strip(),
            url=record["url"].strip(),
            type=resource_type.lower() if resource_type else None,
            description=_strip_optional(record.get("description")),
        )

    @staticmethod
    def _build_qa(record: dict) -> QAPair:
        return QAPair(question=record["question"].strip(), answer=record["answer"].strip())


def validate(candidate: TopicCandidate) -> ValidationResult:
    """Module-level shortcut for SchemaValidator().validate()."""
    return SchemaValidator().validate(candidate)
