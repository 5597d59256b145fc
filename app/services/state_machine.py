from app.utils.constants import JOB_STATUSES

ALLOWED_TRANSITIONS = {
    "pending": ["active", "cancelled", "failed"],
    "active": ["completed", "failed", "cancelled"],
    "completed": [],
    "failed": [],
    "cancelled": [],
}


class InvalidTransition(ValueError):
    pass


def is_terminal(status: str) -> bool:
    return status in JOB_STATUSES and not ALLOWED_TRANSITIONS.get(status)


def ensure_transition(current: str, target: str) -> None:
    if current not in JOB_STATUSES:
        raise InvalidTransition(f"Unknown state: {current}")
    if target not in JOB_STATUSES:
        raise InvalidTransition(f"Unknown target state: {target}")

    allowed = ALLOWED_TRANSITIONS.get(current, [])
    if target not in allowed:
        raise InvalidTransition(f"Invalid transition: {current} -> {target}")


def sources_for(target: str) -> list[str]:
    return [s for s, targets in ALLOWED_TRANSITIONS.items() if target in targets]
