"""Per-source load status models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from hashlib import sha256


@dataclass(frozen=True)
class SourceStatus:
    """Capture the origin metadata for one successfully loaded source."""

    name: str
    location: str
    format: str
    retrieved_at: datetime
    content_hash: str
    packages: int
    total_records: int
    skipped_records: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.retrieved_at.tzinfo is None:
            raise ValueError("retrieved_at must be timezone-aware")
        if not self.location:
            raise ValueError("location must be provided")
        if not self.content_hash or len(self.content_hash) != 64:
            raise ValueError("content_hash must be a SHA-256 hex digest")

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "location": self.location,
            "format": self.format,
            "retrievedAt": self.retrieved_at.isoformat().replace("+00:00", "Z"),
            "contentHash": self.content_hash,
            "packages": self.packages,
            "totalRecords": self.total_records,
            "skippedRecords": list(self.skipped_records),
        }

    @classmethod
    def from_content(
        cls,
        *,
        name: str,
        location: str,
        format: str,
        content: str,
        packages: int,
        total_records: int,
        skipped_records: tuple[str, ...] = (),
        retrieved_at: datetime | None = None,
    ) -> SourceStatus:
        timestamp = retrieved_at or datetime.now(timezone.utc)
        digest = sha256(content.encode("utf-8")).hexdigest()
        return cls(
            name=name,
            location=location,
            format=format,
            retrieved_at=timestamp,
            content_hash=digest,
            packages=packages,
            total_records=total_records,
            skipped_records=tuple(skipped_records),
        )


@dataclass(frozen=True)
class SourceFailure:
    """A source that could not be fetched or parsed."""

    name: str
    location: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "location": self.location, "error": self.message}
