"""
Validation module for process diagrams.
"""

from flowscope.validation.diagram_validator import (
    DiagramValidationResult,
    DiagramValidator,
    ValidationIssue,
    ValidationSeverity,
    validate_diagram,
    validate_payload,
    validation_score,
    validation_summary,
)

__all__ = [
    "DiagramValidationResult",
    "DiagramValidator",
    "ValidationIssue",
    "ValidationSeverity",
    "validate_diagram",
    "validate_payload",
    "validation_score",
    "validation_summary",
]
