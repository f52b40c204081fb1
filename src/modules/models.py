"""Data models for module specifiers, installs and measurements."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ModuleKind(Enum):
    """Mutually exclusive classification of a module specifier."""
    LOCAL = "local"
    BUILTIN = "builtin"
    PACKAGE = "package"


@dataclass(frozen=True)
class ModuleSpecifier:
    """A module token as given on the command line."""
    raw: str
    name: str
    version: Optional[str]  # None means "latest"
    kind: ModuleKind


@dataclass(frozen=True)
class InstalledPackage:
    """Name/version pair reported by the installer."""
    name: str
    version: Optional[str]

    def __str__(self) -> str:
        return f"{self.name}@{self.version or 'unknown'}"


@dataclass
class ResolvedInputs:
    """Everything the bundler consumes for one run."""
    packages: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    builtins: List[str] = field(default_factory=list)

    @property
    def entries(self) -> List[str]:
        """Bundle entry points; builtins are registered separately."""
        return self.packages + self.files


@dataclass
class MeasurementResult:
    """Final byte counts of the three pipeline stages."""
    raw_bytes: int
    minified_bytes: int
    compressed_bytes: int
    gzip_level: Optional[int] = None
