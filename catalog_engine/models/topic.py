"""
Topic data model.

Represents validated educational topics and their nested records
(code examples, resources, question/answer pairs).
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# Closed category taxonomy: tag -> display name.
# Order is the order categories are listed in exports.
CATEGORIES: Dict[str, str] = {
    "fundamentals": "Fundamentals",
    "oop": "Object-Oriented Programming",
    "design-patterns": "Design Patterns",
    "operating-systems": "Operating Systems",
    "concurrency": "Concurrency & Synchronization",
    "memory-management": "Memory Management",
    "storage": "Storage & File Organization",
    "indexing": "Indexing",
    "transactions": "Transactions & Recovery",
    "query-processing": "Query Processing & Optimization",
    "security": "Security",
    "distributed": "Distributed Systems",
    "networking": "Networking",
    "protocols": "Network Protocols",
    "interview": "Interview Preparation",
}


@dataclass
class TopicCandidate:
    """
    An unvalidated topic record as loaded from a content file.
    Used by the schema validator to decide whether a Topic can be built.
    """
    data: object  # Raw parsed record, usually a dict
    category: str  # Section the record was placed in
    source: str  # Content file the record came from
    position: int = 0  # Index within the source file

    @property
    def label(self) -> str:
        """Human-readable reference for reports."""
        topic_id = self.data.get("id") if isinstance(self.data, dict) else None
        where = f"{self.source}#{self.position}" if self.position else self.source
        if isinstance(topic_id, str) and topic_id.strip():
            return f"{topic_id.strip()} ({where})"
        return f"{self.source}#{self.position}"


@dataclass(frozen=True)
class CodeExample:
    """Illustrative code snippet attached to a topic. Never executed."""
    title: str
    language: str  # Lower-case tag, e.g. "sql", "java"
    code: str  # Preserved verbatim (indentation matters)
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CodeExample":
        return cls(
            title=data["title"],
            language=data["language"],
            code=data["code"],
            description=data.get("description"),
        )

    def to_dict(self) -> dict:
        result = {"title": self.title, "language": self.language, "code": self.code}
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class Resource:
    """External link (article, video, documentation, ...)."""
    title: str
    url: str  # Shape is checked by the link auditor, not at ingestion
    type: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Resource":
        return cls(
            title=data["title"],
            url=data["url"],
            type=data.get("type"),
            description=data.get("description"),
        )

    def to_dict(self) -> dict:
        result = {"title": self.title, "url": self.url}
        if self.type is not None:
            result["type"] = self.type
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass(frozen=True)
class QAPair:
    question: str
    answer: str

    @classmethod
    def from_dict(cls, data: dict) -> "QAPair":
        return cls(question=data["question"], answer=data["answer"])

    def to_dict(self) -> dict:
        return {"question": self.question, "answer": self.answer}


@dataclass(frozen=True)
class Topic:
    """
    One validated educational unit.

    Immutable once built: a registry snapshot never patches topics in place,
    it re-ingests the full set.
    """
    id: str  # Slug-like, unique within a registry
    title: str
    explanation: str
    category: str  # Tag from CATEGORIES
    subtitle: str = ""
    summary: str = ""
    key_points: Tuple[str, ...] = field(default_factory=tuple)  # Ranked list
    code_examples: Tuple[CodeExample, ...] = field(default_factory=tuple)
    resources: Tuple[Resource, ...] = field(default_factory=tuple)
    questions: Tuple[QAPair, ...] = field(default_factory=tuple)

    # Optional presentation extras
    analogy: Optional[str] = None
    visual_concept: Optional[str] = None
    real_world_use: Optional[str] = None
    diagram: Optional[str] = None
    behavioral_questions: Tuple[QAPair, ...] = field(default_factory=tuple)
    discussions: Tuple[Resource, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Validate category
        if self.category not in CATEGORIES:
            raise ValueError(
                f"Invalid category: {self.category}. Must be one of {', '.join(CATEGORIES)}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "Topic":
        """Create Topic from its exported (camelCase) JSON dict."""
        return cls(
            id=data["id"],
            title=data["title"],
            explanation=data["explanation"],
            category=data["category"],
            subtitle=data.get("subtitle", ""),
            summary=data.get("summary", ""),
            key_points=tuple(data.get("keyPoints", [])),
            code_examples=tuple(CodeExample.from_dict(e) for e in data.get("codeExamples", [])),
            resources=tuple(Resource.from_dict(r) for r in data.get("resources", [])),
            questions=tuple(QAPair.from_dict(q) for q in data.get("questions", [])),
            analogy=data.get("analogy"),
            visual_concept=data.get("visualConcept"),
            real_world_use=data.get("realWorldUse"),
            diagram=data.get("diagram"),
            behavioral_questions=tuple(
                QAPair.from_dict(q) for q in data.get("behavioralQuestions", [])
            ),
            discussions=tuple(Resource.from_dict(r) for r in data.get("discussions", [])),
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict using the authoring field names."""
        result = {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "subtitle": self.subtitle,
            "summary": self.summary,
            "explanation": self.explanation,
            "keyPoints": list(self.key_points),
            "codeExamples": [e.to_dict() for e in self.code_examples],
            "resources": [r.to_dict() for r in self.resources],
            "questions": [q.to_dict() for q in self.questions],
        }
        optional = {
            "analogy": self.analogy,
            "visualConcept": self.visual_concept,
            "realWorldUse": self.real_world_use,
            "diagram": self.diagram,
        }
        for key, value in optional.items():
            if value is not None:
                result[key] = value
        if self.behavioral_questions:
            result["behavioralQuestions"] = [q.to_dict() for q in self.behavioral_questions]
        if self.discussions:
            result["discussions"] = [d.to_dict() for d in self.discussions]
        return result
