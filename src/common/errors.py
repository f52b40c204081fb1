"""Error kinds raised by the measurement run.

Every error here is fatal: nothing in the pipeline recovers from them. The
entry point maps each kind to its exit code.
"""

from constants import ExitCodes


class BundleCostError(Exception):
    """Base class for all fatal bundlecost errors."""

    exit_code = ExitCodes.INSTALL_ERROR


class ConfigError(BundleCostError):
    """The configuration file exists but cannot be used."""

    exit_code = ExitCodes.USAGE_ERROR


class InstallFailure(BundleCostError):
    """The package installer failed or produced unparseable output."""

    exit_code = ExitCodes.INSTALL_ERROR


class ResolutionFailure(BundleCostError):
    """A requested file or installed package could not be located."""

    exit_code = ExitCodes.RESOLUTION_ERROR


class BundleFailure(BundleCostError):
    """The bundler could not produce a bundle for the module graph."""

    exit_code = ExitCodes.BUNDLE_ERROR


class StreamFailure(BundleCostError):
    """A downstream transform failed to start or exited abnormally."""

    exit_code = ExitCodes.STREAM_ERROR
