"""Resolve classified specifiers into inputs the bundler can consume.

Packages resolve through the installer's cache directory, local modules
relative to the working directory, builtins pass through by name.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Iterable, List, Optional

from common.errors import ResolutionFailure
from common.logging_utils import extra_context, is_debug_enabled

from .models import ModuleKind, ResolvedInputs
from .parser import bare_name, is_builtin, parse_specifier, split_specifier

logger = logging.getLogger(__name__)

_EXTENSIONS = ("", ".js", ".json")
_INDEX_FILES = ("index.js", "index.json")


def _candidates(path: str) -> List[str]:
    """Node-style lookup order for a module path."""
    found = [path + ext for ext in _EXTENSIONS]
    found.extend(os.path.join(path, index) for index in _INDEX_FILES)
    return found


def _first_file(path: str) -> Optional[str]:
    for candidate in _candidates(path):
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)
    return None


def _package_entry(package_dir: str) -> str:
    """Return the entry path declared by a package.json, unresolved."""
    manifest = os.path.join(package_dir, "package.json")
    main = "index.js"
    try:
        with open(manifest, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return os.path.join(package_dir, main)
    except (OSError, ValueError) as e:
        raise ResolutionFailure(f"Cannot read {manifest}: {e}") from e

    if isinstance(data, dict):
        browser = data.get("browser")
        if isinstance(browser, str) and browser:
            main = browser
        elif isinstance(data.get("main"), str) and data["main"]:
            main = data["main"]
    return os.path.join(package_dir, main)


def resolve_package(spec: str, cache_dir: str) -> Optional[str]:
    """Return the on-disk entry file of an installed package.

    Returns None for builtins. Raises ResolutionFailure when the package is
    missing from the cache after installation.
    """
    if is_builtin(spec):
        return None
    name = split_specifier(spec)[0]
    package = bare_name(name)
    package_dir = os.path.join(cache_dir, "node_modules", package)
    if not os.path.isdir(package_dir):
        raise ResolutionFailure(
            f"Cannot find module '{package}' in {cache_dir}; was it installed?"
        )

    sub_path = name[len(package):].lstrip("/")
    target = os.path.join(package_dir, sub_path) if sub_path else _package_entry(package_dir)
    resolved = _first_file(target)
    if resolved is None and not sub_path:
        resolved = _first_file(os.path.join(package_dir, "index"))
    if resolved is None:
        raise ResolutionFailure(f"Cannot find module '{name}' from {cache_dir}")
    return resolved


def resolve_builtin(spec: str) -> Optional[str]:
    """Return the builtin name iff the specifier classifies as Builtin."""
    if not is_builtin(spec):
        return None
    return split_specifier(spec)[0]


def resolve_file(spec: str, cwd: Optional[str] = None) -> str:
    """Resolve a local specifier to an absolute, existing file path."""
    base = cwd or os.getcwd()
    path = spec if os.path.isabs(spec) else os.path.join(base, spec)
    resolved = _first_file(os.path.normpath(path))
    if resolved is None:
        raise ResolutionFailure(f"Cannot find module '{spec}' from '{base}'")
    return resolved


def resolve_all(specs: Iterable[str], cache_dir: str, cwd: Optional[str] = None) -> ResolvedInputs:
    """Apply each resolver to the specifiers of its own kind."""
    buckets: Dict[ModuleKind, List[str]] = {kind: [] for kind in ModuleKind}
    for parsed in (parse_specifier(s) for s in specs):
        buckets[parsed.kind].append(parsed.raw)
    inputs = ResolvedInputs(
        packages=[resolve_package(s, cache_dir) for s in buckets[ModuleKind.PACKAGE]],
        files=[resolve_file(s, cwd) for s in buckets[ModuleKind.LOCAL]],
        builtins=[resolve_builtin(s) for s in buckets[ModuleKind.BUILTIN]],
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Resolved modules",
            extra=extra_context(
                event="decision",
                component="resolver",
                action="resolve_all",
                packages=len(inputs.packages),
                files=len(inputs.files),
                builtins=len(inputs.builtins),
            ),
        )
    return inputs
