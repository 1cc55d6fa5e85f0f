from __future__ import annotations

from adminflow.core.errors import WorkflowDefinitionError
from adminflow.workflow.models import WorkflowStep


def dependency_order(steps: list[WorkflowStep]) -> list[WorkflowStep]:
    """Return `steps` reordered so every step follows its dependencies.

    The engine sweeps steps once in stored order, so callers building workflows by
    hand can run them through this first. Steps that are already in a compatible
    order keep their relative position.

    Raises:
        WorkflowDefinitionError: on duplicate ids, unknown dependency ids or cycles.
    """

    by_id: dict[str, WorkflowStep] = {}
    for step in steps:
        if step.id in by_id:
            raise WorkflowDefinitionError(f"Duplicate step id: {step.id}")
        by_id[step.id] = step

    in_degree = {s.id: 0 for s in steps}
    dependents: dict[str, list[str]] = {s.id: [] for s in steps}
    for step in steps:
        for dep in dict.fromkeys(step.dependencies):
            if dep not in by_id:
                raise WorkflowDefinitionError(
                    f"Step {step.id} depends on unknown step {dep}"
                )
            in_degree[step.id] += 1
            dependents[dep].append(step.id)

    position = {s.id: i for i, s in enumerate(steps)}
    ready = [s.id for s in steps if in_degree[s.id] == 0]
    ordered: list[WorkflowStep] = []
    while ready:
        ready.sort(key=position.__getitem__)
        current = ready.pop(0)
        ordered.append(by_id[current])
        for child in dependents[current]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                ready.append(child)

    if len(ordered) != len(steps):
        stuck = sorted(sid for sid, degree in in_degree.items() if degree > 0)
        raise WorkflowDefinitionError(f"Dependency cycle among steps: {', '.join(stuck)}")
    return ordered
