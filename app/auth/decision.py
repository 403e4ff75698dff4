from dataclasses import dataclass


@dataclass(frozen=True)
class Decision:
    """Allow/deny outcome of a read-path check; truthy when allowed."""
    allowed: bool
    reason: str

    def __bool__(self):
        return self.allowed

    def to_dict(self):
        return {"allowed": self.allowed, "reason": self.reason}


def allow(reason: str) -> Decision:
    return Decision(True, reason)


def deny(reason: str = "denied") -> Decision:
    return Decision(False, reason)
