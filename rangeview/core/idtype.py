from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IDType:
    """
    Identifies the entity space row or column ids live in (e.g. "cell", "gene").

    - id: stable identifier, used in persisted descriptors
    - name: human-readable singular label
    - names: human-readable plural label
    - internal: True for generated placeholder types (e.g. "_rows")
    """

    id: str
    name: str = ""
    names: str = ""
    internal: bool = False

    @classmethod
    def named(cls, idtype_id: str) -> IDType:
        label = idtype_id.lstrip("_")
        return cls(
            id=idtype_id,
            name=label,
            names=f"{label}s",
            internal=idtype_id.startswith("_"),
        )


class IDTypeRegistry:
    """
    Lookup table for IDTypes.

    Tables receive a registry explicitly (defaulting to the process-wide one),
    so lookups stay injectable and tests can use an isolated instance.
    """

    def __init__(self):
        self._types: Dict[str, IDType] = {}

    def register(self, idtype: IDType) -> IDType:
        """
        :raises ValueError: if a different IDType with the same id already exists
        """
        existing = self._types.get(idtype.id)
        if existing is not None and existing != idtype:
            raise ValueError(f"IDType '{idtype.id}' already registered with a different definition")
        self._types[idtype.id] = idtype
        return idtype

    def resolve(self, idtype: Union[IDType, str]) -> IDType:
        """
        Return the registered IDType for an id (or IDType), creating and
        registering a default definition on first use.
        """
        if isinstance(idtype, IDType):
            return self._types.get(idtype.id) or self.register(idtype)

        existing = self._types.get(idtype)
        if existing is not None:
            return existing
        logger.debug("Creating IDType on first use", extra={"idtype": idtype})
        return self.register(IDType.named(idtype))

    def get(self, idtype_id: str) -> Optional[IDType]:
        return self._types.get(idtype_id)

    def list(self) -> List[IDType]:
        return list(self._types.values())

    def clear(self) -> None:
        self._types.clear()


_registry: Optional[IDTypeRegistry] = None


def init_registry(registry: Optional[IDTypeRegistry] = None) -> IDTypeRegistry:
    """Explicitly (re)initialise the process-wide registry."""
    global _registry
    _registry = registry if registry is not None else IDTypeRegistry()
    return _registry


def get_registry() -> IDTypeRegistry:
    return _registry if _registry is not None else init_registry()
