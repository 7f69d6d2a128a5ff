# ---
# File: app/utils/time_utils.py
# Purpose: UTC timestamp helpers and id generation shared by models and the core
# ---

from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---
# Naive datetimes coming from legacy payloads are taken to be UTC,
# so every comparison in the core is between aware values.
# ---
def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---
# Generate an opaque id with a resource prefix, e.g. "inc_3f9a1c2b7".
# ---
def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:9]}"
