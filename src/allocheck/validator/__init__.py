from allocheck.validator.matcher import best_suggestion, levenshtein
from allocheck.validator.orchestrator import (
    ValidationOrchestrator,
    run_all_validations,
    validate_dataset,
)
from allocheck.validator.repair import repair_requests
from allocheck.validator.types import ValidationResult

__all__ = [
    "ValidationOrchestrator",
    "ValidationResult",
    "best_suggestion",
    "levenshtein",
    "repair_requests",
    "run_all_validations",
    "validate_dataset",
]
