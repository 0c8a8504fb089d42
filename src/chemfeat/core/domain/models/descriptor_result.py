"""Domain model for per-molecule descriptor results."""

from dataclasses import dataclass, field
from typing import Dict, Union

Number = Union[int, float]


@dataclass
class DescriptorResult:
    """Descriptor values keyed by name, with failures reported per descriptor."""

    values: Dict[str, Number] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def __getitem__(self, name: str) -> Number:
        return self.values[name]

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def failure_messages(self) -> Dict[str, str]:
        return {
            name: f"{type(error).__name__}: {error}"
            for name, error in self.failures.items()
        }
