from __future__ import annotations

from typing import Any

from allocheck.validator.field_checks import INVALID_JSON_MESSAGE
from allocheck.validator.types import ValidationResult

REPAIR_COLUMN = "AttributesJSON"
DEFAULT_REPAIR_CONTEXT = "valid JSON string that is properly escaped"


def repair_requests(
    result: ValidationResult, context: str = DEFAULT_REPAIR_CONTEXT
) -> list[dict[str, Any]]:
    """
    @brief
    List the cells the external repair service can be asked to fix.

    @details
    Selects client attribute cells whose diagnostic is the invalid-JSON
    finding and pairs the offending literal with the context string the
    service expects. Selection is by column and exact message, so other
    diagnostics quoting user values are never picked up. The engine does
    not call the service itself.

    @params
        result : ValidationResult
            Output of a validation run.
        context : str
            Short description of the expected value.

    @returns
        List of {entity, row, field, value, context} dictionaries in
        row order.
    """
    requests: list[dict[str, Any]] = []

    for row, client in enumerate(result.clients):
        err = client.errors.get(REPAIR_COLUMN)
        if err is None or err.message != INVALID_JSON_MESSAGE:
            continue
        requests.append(
            {
                "entity": "clients",
                "row": row,
                "field": REPAIR_COLUMN,
                "value": client.attributes_json,
                "context": context,
            }
        )
    return requests


__all__ = ["repair_requests", "REPAIR_COLUMN", "DEFAULT_REPAIR_CONTEXT"]
