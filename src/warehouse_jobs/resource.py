"""Generic remote resource driven by a declared capability table.

A resource names which remote capabilities it exposes and, for each one, how
its request is shaped. Owners compose a ``RemoteResource`` instead of
subclassing it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Protocol

from warehouse_jobs.errors.exceptions import ApiError, UnsupportedCapabilityError

logger = logging.getLogger(__name__)

CAPABILITIES = ("exists", "get", "get_metadata", "set_metadata")


class RequestParent(Protocol):
    async def request(
        self,
        method: str,
        uri: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]: ...


@dataclass(frozen=True)
class RequestShape:
    """Per-capability overrides merged into the outgoing request."""

    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))


def build_capability_table(methods: Mapping[str, bool | RequestShape]) -> Mapping[str, RequestShape]:
    """Normalize ``{capability: True | RequestShape}`` into a read-only table."""
    table: dict[str, RequestShape] = {}
    for name, shape in methods.items():
        if name not in CAPABILITIES:
            raise ValueError(f"Unknown capability: {name}")
        if shape is True:
            table[name] = RequestShape()
        elif isinstance(shape, RequestShape):
            table[name] = shape
    return MappingProxyType(table)


class RemoteResource:
    """A server-side resource addressed as ``<base_url>/<id>`` under its parent."""

    def __init__(
        self,
        parent: RequestParent,
        base_url: str,
        id: str,
        methods: Mapping[str, bool | RequestShape],
    ) -> None:
        self.parent = parent
        self.base_url = base_url
        self.id = id
        self.methods = build_capability_table(methods)

    def __repr__(self) -> str:
        return f"RemoteResource({self.base_url}/{self.id})"

    def _shape(self, capability: str) -> RequestShape:
        try:
            return self.methods[capability]
        except KeyError:
            raise UnsupportedCapabilityError(capability, repr(self)) from None

    async def request(
        self,
        method: str = "GET",
        uri: str = "",
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Issue a request scoped to this resource."""
        return await self.parent.request(
            method,
            f"{self.base_url}/{self.id}{uri}",
            params=params,
            json=json,
        )

    async def get_metadata(self) -> dict[str, Any]:
        """Fetch a fresh metadata snapshot."""
        shape = self._shape("get_metadata")
        return await self.request("GET", params=dict(shape.params))

    async def exists(self) -> bool:
        self._shape("exists")
        try:
            await self.get_metadata()
        except ApiError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    async def get(self) -> dict[str, Any]:
        self._shape("get")
        return await self.get_metadata()

    async def set_metadata(self, metadata: dict[str, Any]) -> dict[str, Any]:
        """PATCH the resource with *metadata* and return the updated body."""
        shape = self._shape("set_metadata")
        logger.debug("Updating metadata for %r", self)
        return await self.request("PATCH", params=dict(shape.params), json=metadata)
