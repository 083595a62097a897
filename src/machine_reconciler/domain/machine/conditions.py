"""Condition tracking for the machine provider status."""
from datetime import datetime, timezone
from typing import List, Optional

from machine_reconciler.domain.machine.value_objects import (
    ConditionReason,
    ConditionStatus,
    ConditionType,
    MachineProviderCondition,
)


def set_provider_condition(
    condition: MachineProviderCondition,
    conditions: List[MachineProviderCondition],
    now: Optional[datetime] = None,
) -> List[MachineProviderCondition]:
    """
    Merge a condition into a condition list and return the new list.

    If no condition of the same type exists, the condition is appended with
    both timestamps set to now. An existing condition is only touched when the
    reason or the message changed; the transition time then moves only when
    the status changed too.

    Args:
        condition: Newly computed condition
        conditions: Current conditions; left unmodified
        now: Timestamp to record, defaults to the current UTC time

    Returns:
        New list holding at most one condition per type
    """
    now = now or datetime.now(timezone.utc)
    result = list(conditions)

    index = _find_condition(result, condition.type)
    if index is None:
        result.append(condition.model_copy(update={
            "last_probe_time": now,
            "last_transition_time": now,
        }))
        return result

    existing = result[index]
    if not _should_update_condition(condition, existing):
        return result

    update = {
        "status": condition.status,
        "reason": condition.reason,
        "message": condition.message,
        "last_probe_time": now,
    }
    if existing.status != condition.status:
        update["last_transition_time"] = now
    result[index] = existing.model_copy(update=update)
    return result


def _find_condition(conditions: List[MachineProviderCondition], condition_type: ConditionType) -> Optional[int]:
    for i, existing in enumerate(conditions):
        if existing.type == condition_type:
            return i
    return None


def _should_update_condition(new: MachineProviderCondition, existing: MachineProviderCondition) -> bool:
    return new.reason != existing.reason or new.message != existing.message


def condition_success() -> MachineProviderCondition:
    return MachineProviderCondition(
        type=ConditionType.MACHINE_CREATION,
        status=ConditionStatus.TRUE,
        reason=ConditionReason.MACHINE_CREATION_SUCCEEDED.value,
        message="Machine successfully created",
    )


def condition_failed(message: str = "") -> MachineProviderCondition:
    return MachineProviderCondition(
        type=ConditionType.MACHINE_CREATION,
        status=ConditionStatus.FALSE,
        reason=ConditionReason.MACHINE_CREATION_FAILED.value,
        message=message,
    )
