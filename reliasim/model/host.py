"""Minimal host object model.

A `Host` is the simulated entity reliability modules attach to. Instances
point at a prototype host (the shared definition they were built from) and
carry an ordered module list. Attachment waits until all three of host,
prototype and module list exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class Host:
    """A simulated entity.

    Attributes:
        name: Unique instance name.
        part_name: Type name shared by every instance built from the same
            prototype; the default configuration scope of attached modules.
        prototype: The shared definition this instance was built from. None for
            prototypes themselves and for instances still under construction.
        modules: Ordered attached modules, or None while under construction.
        attrs: Free-form attributes consulted by scope conditions.
        destroyed: Set once the host is torn down.
    """

    name: str
    part_name: str
    prototype: Optional["Host"] = None
    modules: Optional[List[Any]] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
    destroyed: bool = False

    @property
    def full_name(self) -> str:
        if self.name == self.part_name:
            return self.name
        return f"{self.part_name}({self.name})"

    def flat_attrs(self) -> Dict[str, Any]:
        """Attributes for condition matching; top-level fields win over attrs."""
        merged = dict(self.attrs)
        merged["name"] = self.name
        merged["part_name"] = self.part_name
        return merged

    def add_module(self, module: Any) -> None:
        if self.modules is None:
            self.modules = []
        self.modules.append(module)

    def destroy(self) -> None:
        self.destroyed = True

    def __repr__(self) -> str:
        return f"Host(name={self.name!r}, part_name={self.part_name!r})"
