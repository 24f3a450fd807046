import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

log = logging.getLogger("registry")


class SignalKind(str, Enum):
    DIGITAL = "digital"
    ANALOG = "analog"


@dataclass(frozen=True)
class SignalDefinition:
    name: str
    kind: SignalKind


class SignalRegistry:
    """Read-only lookup of declared signal kinds, built once at startup."""

    def __init__(self, definitions: Mapping[str, SignalDefinition]):
        self._defs = MappingProxyType(dict(definitions))

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[str, str]]) -> "SignalRegistry":
        """Build from (signal_name, signal_type) pairs as stored in signal_register_table.

        A name declared twice with different kinds is rejected. Type strings
        other than digital/analog fall back to analog.
        """
        defs: Dict[str, SignalDefinition] = {}
        for name, signal_type in rows:
            try:
                kind = SignalKind(str(signal_type).strip().lower())
            except ValueError:
                log.warning(
                    f"Signal {name} has unrecognised type {signal_type!r}; treating as analog")
                kind = SignalKind.ANALOG
            existing = defs.get(name)
            if existing is not None and existing.kind is not kind:
                raise ValueError(
                    f"signal {name!r} declared as both {existing.kind.value} and {kind.value}")
            defs[name] = SignalDefinition(name=name, kind=kind)
        return cls(defs)

    def lookup(self, name: str) -> Optional[SignalDefinition]:
        return self._defs.get(name)

    def kind_counts(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in SignalKind}
        for d in self._defs.values():
            counts[d.kind.value] += 1
        return counts

    def __contains__(self, name: object) -> bool:
        return name in self._defs

    def __len__(self) -> int:
        return len(self._defs)
