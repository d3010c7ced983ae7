from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Endpoint:
    """
    One Netbox REST endpoint, e.g. /api/dcim/cables/.

    - app: Netbox application (dcim, circuits, core)
    - slug: URL segment, also used as the CLI command name
    - singular/plural: human labels used in rendered output
    - read_only: no PATCH/POST/DELETE on this endpoint
    """

    app: str
    slug: str
    singular: str
    plural: str
    read_only: bool = False

    @property
    def path(self) -> str:
        return f"/api/{self.app}/{self.slug}/"

    def object_path(self, object_id: int) -> str:
        return f"{self.path}{object_id}/"


@dataclass
class Page:
    """A single page of a Netbox list response."""

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return bool(self.next)

    @classmethod
    def from_dict(cls, data: Any) -> "Page":
        if not isinstance(data, dict):
            raise RuntimeError(f"Expected a Netbox list response object, got {type(data).__name__}")
        results = data.get("results")
        if not isinstance(results, list):
            raise RuntimeError("Netbox list response has no 'results' list")
        count = data.get("count")
        return cls(
            count=count if isinstance(count, int) else len(results),
            next=data.get("next") or None,
            previous=data.get("previous") or None,
            results=[r for r in results if isinstance(r, dict)],
        )
