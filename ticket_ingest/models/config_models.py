from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

"""Config dataclasses for the ticket ingestion pipeline.

FieldAliasTable is the injectable header-alias configuration consumed by the
column resolver; IngestConfig is the root configuration object produced by
config.loader.load_config.
"""

__all__ = [
    "AliasOverlapError",
    "FieldAliasTable",
    "IngestConfig",
]


class AliasOverlapError(ValueError):
    """Raised when two canonical fields share a header alias."""


@dataclass(frozen=True)
class FieldAliasTable:
    """Canonical field name -> ordered header aliases.

    Aliases are compared case-insensitively when checking for overlap, the
    same way the resolver falls back to case-insensitive matching. A field
    may repeat an alias in several spellings ("Assigned to" / "Assigned To"),
    two different fields may not.
    """
    aliases: Mapping[str, tuple[str, ...]]
    required: tuple[str, ...] = ("number", "opened")

    def __post_init__(self) -> None:
        frozen = {name: tuple(values) for name, values in self.aliases.items()}
        owner: dict[str, str] = {}
        for name, values in frozen.items():
            for alias in values:
                key = alias.lower()
                other = owner.setdefault(key, name)
                if other != name:
                    raise AliasOverlapError(
                        f"alias '{alias}' used by both '{other}' and '{name}'"
                    )
        missing = [r for r in self.required if r not in frozen]
        if missing:
            raise ValueError(f"required fields without aliases: {missing}")
        object.__setattr__(self, "aliases", MappingProxyType(frozen))

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self.aliases[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.aliases)

    def __len__(self) -> int:
        return len(self.aliases)

    def get(self, name: str) -> tuple[str, ...]:
        return self.aliases.get(name, ())

    def merged(self, overrides: Mapping[str, list[str] | tuple[str, ...]]) -> FieldAliasTable:
        """Return a new table where ``overrides`` replace the aliases of the named fields."""
        data = dict(self.aliases)
        for name, values in overrides.items():
            data[name] = tuple(values)
        return FieldAliasTable(aliases=data, required=self.required)


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration for ingestion and SLA evaluation.

    Every field has a default so the pipeline runs without a config file.
    """
    timezone: str = "UTC"
    progress_stride: int = 100
    sla_thresholds: Mapping[str, float] | None = None  # None -> 既定テーブル
    default_sla_hours: float = 36
    alias_overrides: Mapping[str, Mapping[str, tuple[str, ...]]] = field(default_factory=dict)
    priority_rules: tuple | None = None  # tuple[PriorityRule, ...]
    location_map: Mapping[str, str] | None = None
