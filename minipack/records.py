"""
Module records produced by the graph builder.
"""
import os
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModuleRecord(BaseModel):
    """One bundled module: its identity, lowered code and resolved imports."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    path: str
    raw_dependencies: List[str] = Field(default_factory=list)
    code: str
    mapping: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _mapping_covers_dependencies(self):
        if set(self.mapping) != set(self.raw_dependencies):
            missing = sorted(set(self.raw_dependencies) - set(self.mapping))
            extra = sorted(set(self.mapping) - set(self.raw_dependencies))
            raise ValueError(
                f"mapping of module {self.id} does not match its dependencies "
                f"(missing: {missing}, unexpected: {extra})"
            )
        return self

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)


def validate_graph(records):
    """Check that records carry dense ids in order and only point at each other."""
    if not records:
        raise ValueError("module graph is empty")
    for index, record in enumerate(records):
        if record.id != index:
            raise ValueError(f"module ids must be dense and ordered, found {record.id} at {index}")
    count = len(records)
    for record in records:
        for specifier, target in record.mapping.items():
            if not 0 <= target < count:
                raise ValueError(
                    f"module {record.id} maps '{specifier}' to unknown module {target}"
                )
