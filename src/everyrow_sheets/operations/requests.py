"""
Request builders for everyrow operations.

Each operation kind has one builder that embeds the input records, the user's
instruction and, where the service needs one, a ``response_schema`` describing
the fields each output row should gain:

- rank:   ``POST /operations/rank``       input, task, sort_by, ascending, response_schema
- screen: ``POST /operations/screen``     input, task, response_schema (one boolean field)
- dedupe: ``POST /operations/dedupe``     input, equivalence_relation
- merge:  ``POST /operations/merge``      left_input, right_input, task, optional keys
- agent:  ``POST /operations/agent_map``  input, task, response_schema
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from everyrow_sheets.exceptions import ValidationError
from everyrow_sheets.spreadsheet.converter import Record


class OperationKind(Enum):
    """Operation kinds supported by the orchestrator."""
    RANK = "rank"
    SCREEN = "screen"
    DEDUPE = "dedupe"
    MERGE = "merge"
    AGENT = "agent"

    @property
    def title(self) -> str:
        return self.value.capitalize()


@dataclass
class OperationRequest:
    """A ready-to-submit operation.

    Attributes:
        kind: Operation kind
        path: Endpoint path relative to the API root
        body: JSON request body
    """
    kind: OperationKind
    path: str
    body: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"kind": self.kind.value, "path": self.path, "body": self.body}


def response_schema(name: str, field_type: str, description: Optional[str] = None) -> Dict[str, Any]:
    """Build a JSON schema describing one output field that every row must carry."""
    prop: Dict[str, Any] = {"type": field_type}
    if description:
        prop["description"] = description
    return {
        "type": "object",
        "properties": {name: prop},
        "required": [name],
    }


def _instruction(text: str, what: str = "A task description") -> str:
    if not text or not text.strip():
        raise ValidationError(f"{what} is required.")
    return text.strip()


def rank_request(
    records: List[Record],
    task: str,
    field_name: str = "score",
    field_type: str = "number",
    ascending: bool = False,
) -> OperationRequest:
    """Rank rows by a field the service computes for each of them.

    Rows are sorted on ``field_name``, highest first unless ``ascending``.
    """
    return OperationRequest(
        kind=OperationKind.RANK,
        path="/operations/rank",
        body={
            "input": records,
            "task": _instruction(task),
            "sort_by": field_name,
            "ascending": ascending,
            "response_schema": response_schema(field_name, field_type, task.strip()),
        },
    )


def screen_request(
    records: List[Record],
    task: str,
    field_name: str = "passes_screen",
) -> OperationRequest:
    """Keep only the rows that satisfy the instruction.

    The service requires at least one boolean field in the response schema.
    """
    return OperationRequest(
        kind=OperationKind.SCREEN,
        path="/operations/screen",
        body={
            "input": records,
            "task": _instruction(task),
            "response_schema": response_schema(
                field_name, "boolean", "Whether the row passes the screen"
            ),
        },
    )


def dedupe_request(records: List[Record], equivalence_relation: str) -> OperationRequest:
    """Group equivalent rows; one row per group is marked ``selected``."""
    return OperationRequest(
        kind=OperationKind.DEDUPE,
        path="/operations/dedupe",
        body={
            "input": records,
            "equivalence_relation": _instruction(
                equivalence_relation, "An equivalence relation"
            ),
        },
    )


def merge_request(
    left_records: List[Record],
    right_records: List[Record],
    task: str,
    left_key: Optional[str] = None,
    right_key: Optional[str] = None,
) -> OperationRequest:
    """Match rows of the left table to rows of the right table.

    ``left_key``/``right_key`` hint which columns identify a row; they are
    omitted from the body when not given.
    """
    body: Dict[str, Any] = {
        "left_input": left_records,
        "right_input": right_records,
        "task": _instruction(task),
    }
    if left_key:
        body["left_key"] = left_key
    if right_key:
        body["right_key"] = right_key
    return OperationRequest(kind=OperationKind.MERGE, path="/operations/merge", body=body)


def agent_request(
    records: List[Record],
    task: str,
    field_name: str = "answer",
    field_type: str = "string",
) -> OperationRequest:
    """Run a research agent on every row, adding ``field_name`` to each."""
    return OperationRequest(
        kind=OperationKind.AGENT,
        path="/operations/agent_map",
        body={
            "input": records,
            "task": _instruction(task),
            "response_schema": response_schema(field_name, field_type, task.strip()),
        },
    )
