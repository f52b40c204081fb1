"""Token parsing and classification of module specifiers."""

from typing import Optional, Tuple

from .builtins import BUILTINS
from .models import ModuleKind, ModuleSpecifier

LATEST = "latest"


def is_local(spec: str) -> bool:
    """Return True for relative or absolute file paths."""
    return spec[:1] in (".", "/")


def split_specifier(spec: str) -> Tuple[str, Optional[str]]:
    """Return (name, version or None) using the first '@' past a scope marker.

    Local paths are never split, so ``./foo@bar.js`` stays whole.
    """
    spec = spec.strip()
    if is_local(spec):
        return spec, None
    idx = spec.find("@", 1)
    if idx == -1:
        return spec, None
    name = spec[:idx]
    version = spec[idx + 1:].strip()
    if not version or version.lower() == LATEST:
        return name, None
    return name, version


def is_builtin(spec: str) -> bool:
    """Return True when the specifier names a runtime builtin."""
    if is_local(spec):
        return False
    return split_specifier(spec)[0] in BUILTINS


def is_package(spec: str) -> bool:
    """Return True for anything that must be installed from the registry."""
    return not is_local(spec) and not is_builtin(spec)


def classify(spec: str) -> ModuleKind:
    """Classify a specifier purely from its syntactic form."""
    if is_local(spec):
        return ModuleKind.LOCAL
    if is_builtin(spec):
        return ModuleKind.BUILTIN
    return ModuleKind.PACKAGE


def bare_name(name: str) -> str:
    """Strip a sub-path suffix: ``lodash/fp`` -> ``lodash``.

    Scoped names keep their scope: ``@scope/pkg/sub`` -> ``@scope/pkg``.
    """
    parts = name.split("/")
    if name.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def parse_specifier(spec: str) -> ModuleSpecifier:
    """Parse a CLI token into a ModuleSpecifier."""
    name, version = split_specifier(spec)
    return ModuleSpecifier(raw=spec, name=name, version=version, kind=classify(spec))
