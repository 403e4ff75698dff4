from prometheus_client import Counter

# Outcome of every permission resolver evaluation, by the path that decided it
ACCESS_DECISIONS = Counter(
    "access_decisions_total",
    "Permission resolver decisions",
    ["path", "outcome"],
)

# Wallet proof verification, by the channel that matched (or "none")
WALLET_VERIFICATIONS = Counter(
    "wallet_verifications_total",
    "Wallet proof verifications",
    ["channel", "outcome"],
)


def record_decision(reason: str, allowed: bool) -> None:
    path = reason.split(":", 1)[0]
    ACCESS_DECISIONS.labels(path, "allow" if allowed else "deny").inc()


def record_wallet_verification(channel: str, allowed: bool) -> None:
    WALLET_VERIFICATIONS.labels(channel, "allow" if allowed else "deny").inc()
