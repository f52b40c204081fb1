"""Command line for the external bundler."""

from typing import Dict, List, Optional, Sequence


def env_transform(env: Dict[str, str]) -> List[str]:
    """Subarg transform substituting ``process.env`` values at bundle time."""
    args = ["-t", "[", "envify"]
    for key, value in env.items():
        args.extend([f"--{key}", value])
    args.append("]")
    return args


def build_bundle_command(
    bundler: Sequence[str],
    entries: Sequence[str],
    builtins: Sequence[str] = (),
    env: Optional[Dict[str, str]] = None,
) -> List[str]:
    """Build the bundler argv.

    Entries are bundle entry points. Builtins are exposed with ``-r`` so they
    land in the runtime module table without being entry points.
    """
    command = list(bundler) + list(entries)
    if env:
        command.extend(env_transform(env))
    for name in builtins:
        command.extend(["-r", name])
    return command
