"""
Step role definitions for wall-bounce collaboration.
A role describes what a model does at its position in the chain;
it is not bound to any specific model.
"""

from dataclasses import dataclass
from enum import Enum

from .request import TaskType


class StepPosition(Enum):
    OPENING = "opening"
    BOUNCE = "bounce"
    CLOSING = "closing"


@dataclass(frozen=True)
class RoleDefinition:
    label: str
    instruction: str


ROLE_DEFINITIONS: dict[TaskType, dict[StepPosition, RoleDefinition]] = {
    TaskType.GENERAL: {
        StepPosition.OPENING: RoleDefinition(
            label="initial-response",
            instruction="Answer the question directly and completely. Other models will review your answer.",
        ),
        StepPosition.BOUNCE: RoleDefinition(
            label="cross-check",
            instruction="Review the previous answers. Point out mistakes or gaps, then give an improved answer.",
        ),
        StepPosition.CLOSING: RoleDefinition(
            label="final-verification",
            instruction="Verify the previous answers and write the final, corrected answer to the original question.",
        ),
    },
    TaskType.CODING: {
        StepPosition.OPENING: RoleDefinition(
            label="implementation-draft",
            instruction="Write a working implementation for the request. Explain key decisions briefly.",
        ),
        StepPosition.BOUNCE: RoleDefinition(
            label="code-review",
            instruction="Review the previous implementation for bugs, edge cases and security issues. Provide a corrected version.",
        ),
        StepPosition.CLOSING: RoleDefinition(
            label="final-verification",
            instruction="Verify the reviewed implementation and produce the final code with a short explanation.",
        ),
    },
    TaskType.ANALYSIS: {
        StepPosition.OPENING: RoleDefinition(
            label="technical-analysis",
            instruction="Analyse the problem: likely causes, relevant factors and how to confirm them.",
        ),
        StepPosition.BOUNCE: RoleDefinition(
            label="critical-review",
            instruction="Challenge the previous analysis. Add missing factors and correct weak conclusions.",
        ),
        StepPosition.CLOSING: RoleDefinition(
            label="final-verification",
            instruction="Verify the analysis so far and give a consolidated conclusion with recommended actions.",
        ),
    },
    TaskType.ARCHITECTURE: {
        StepPosition.OPENING: RoleDefinition(
            label="design-proposal",
            instruction="Propose an architecture: components, responsibilities, data flow and trade-offs.",
        ),
        StepPosition.BOUNCE: RoleDefinition(
            label="design-review",
            instruction="Review the proposed design for scalability, failure modes and operability. Suggest changes.",
        ),
        StepPosition.CLOSING: RoleDefinition(
            label="final-verification",
            instruction="Verify the reviewed design and present the final architecture with its key decisions.",
        ),
    },
}


def position_for(index: int, total: int) -> StepPosition:
    if index == 0:
        return StepPosition.OPENING
    if index == total - 1:
        return StepPosition.CLOSING
    return StepPosition.BOUNCE


def get_role_definition(task_type: TaskType, index: int, total: int) -> RoleDefinition:
    return ROLE_DEFINITIONS[task_type][position_for(index, total)]
