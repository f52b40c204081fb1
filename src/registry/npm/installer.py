"""npm installer adapter.

Installs the package bucket of a run into the module cache with a single
``npm install --json --prefix <cache>`` call and normalizes its output into
InstalledPackage records.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Sequence

import semantic_version

from common.errors import InstallFailure
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from modules.models import InstalledPackage
from modules.parser import LATEST, bare_name, is_package, split_specifier

logger = logging.getLogger(__name__)

BANNER_PREFIX = "> "


def normalize_packages(specs: Iterable[str]) -> List[str]:
    """Return deduplicated ``name@version`` install tokens for package specs.

    Raises:
        InstallFailure: If one package is pinned to two different versions.
    """
    pinned: Dict[str, Optional[str]] = {}
    for spec in specs:
        if not is_package(spec):
            continue
        name, version = split_specifier(spec)
        name = bare_name(name)
        if name not in pinned or pinned[name] is None:
            pinned[name] = version
        elif version is not None and version != pinned[name]:
            raise InstallFailure(
                f"Conflicting versions requested for {name}: "
                f"{pinned[name]} and {version}"
            )
    return [f"{name}@{version or LATEST}" for name, version in pinned.items()]


def _strip_banners(stdout: str) -> str:
    """Keep only the JSON payload of npm's --json output.

    Lifecycle-script banners are dropped wherever they appear. Any other
    text (``npm WARN`` lines, notices) is skipped up to the first line that
    opens an object or array.
    """
    lines = [line for line in stdout.splitlines() if not line.startswith(BANNER_PREFIX)]
    for idx, line in enumerate(lines):
        if line.lstrip().startswith(("{", "[")):
            return "\n".join(lines[idx:])
    return "\n".join(lines)


def _record(name: Any, data: Any) -> Optional[InstalledPackage]:
    if not isinstance(name, str) or not name:
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return InstalledPackage(name=name, version=version if isinstance(version, str) else None)


def packages_to_list(payload: Any) -> List[InstalledPackage]:
    """Normalize the two accepted payload shapes; anything else yields []."""
    found: List[Optional[InstalledPackage]] = []
    if isinstance(payload, list):
        found = [_record(item.get("name"), item) for item in payload if isinstance(item, dict)]
    elif isinstance(payload, dict) and isinstance(payload.get("dependencies"), dict):
        found = [_record(name, data) for name, data in payload["dependencies"].items()]
    return [pkg for pkg in found if pkg is not None]


def parse_install_output(stdout: str) -> List[InstalledPackage]:
    """Parse ``npm install --json`` stdout into InstalledPackage records.

    Raises:
        InstallFailure: If the remaining payload is not JSON.
    """
    body = _strip_banners(stdout).strip()
    try:
        # trailing notices after the payload are ignored
        payload, _ = json.JSONDecoder().raw_decode(body)
    except ValueError as e:
        raise InstallFailure(f"Unable to parse installer output: {e}") from e
    return packages_to_list(payload)


def read_installed_version(cache_dir: str, name: str) -> Optional[str]:
    """Return the version recorded in an installed package's manifest."""
    manifest = os.path.join(cache_dir, "node_modules", name, "package.json")
    try:
        with open(manifest, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None
    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) else None


def _satisfies(version: str, requested: str) -> Optional[bool]:
    """Check a version against an npm range; None when either is not semver."""
    try:
        return semantic_version.NpmSpec(requested).match(semantic_version.Version(version))
    except ValueError:
        return None


def warn_on_mismatch(tokens: Sequence[str], installed: Sequence[InstalledPackage]) -> None:
    """Log a warning for pinned requests the installed version does not satisfy."""
    versions = {pkg.name: pkg.version for pkg in installed}
    for token in tokens:
        name, requested = split_specifier(token)
        actual = versions.get(name)
        if requested is None or actual is None:
            continue
        if _satisfies(actual, requested) is False:
            logger.warning(
                "Installed %s@%s does not satisfy requested %s", name, actual, requested
            )


async def _run_installer(command: List[str]) -> str:
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise InstallFailure(f"Unable to start installer '{command[0]}': {e}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        detail = stderr.decode("utf-8", "replace").strip()
        raise InstallFailure(
            f"Installer exited with status {proc.returncode}"
            + (f": {detail}" if detail else "")
        )
    return stdout.decode("utf-8", "replace")


async def install(
    specs: Iterable[str],
    cache_dir: str,
    npm_command: Optional[List[str]] = None,
) -> List[InstalledPackage]:
    """Install the package-kind specifiers into ``cache_dir``.

    Returns an empty list without spawning anything when no package is
    requested.
    """
    tokens = normalize_packages(specs)
    if not tokens:
        return []

    os.makedirs(cache_dir, exist_ok=True)
    command = list(npm_command or Constants.NPM_COMMAND)
    command += ["install", "--json", "--prefix", cache_dir] + tokens
    logger.debug("Installing: %s", " ".join(tokens))

    with Timer() as t:
        stdout = await _run_installer(command)

    packages = parse_install_output(stdout)
    if not packages:
        # Newer npm releases print a summary object instead of a dependency map.
        packages = [
            InstalledPackage(name=name, version=read_installed_version(cache_dir, name))
            for name in (split_specifier(token)[0] for token in tokens)
        ]

    if is_debug_enabled(logger):
        logger.debug(
            "Installer finished",
            extra=extra_context(
                event="subprocess_exit",
                component="installer",
                action="install",
                outcome="success",
                count=len(packages),
                duration_ms=t.duration_ms(),
            ),
        )
    warn_on_mismatch(tokens, packages)
    return packages
