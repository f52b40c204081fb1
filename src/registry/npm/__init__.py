"""npm registry support: installing packages into the module cache."""

from .installer import install, normalize_packages, parse_install_output  # noqa: F401

__all__ = [
    "install",
    "normalize_packages",
    "parse_install_output",
]
