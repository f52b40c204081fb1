"""Constants used in the project."""

import os
from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    INSTALL_ERROR = 1
    USAGE_ERROR = 2
    RESOLUTION_ERROR = 3
    BUNDLE_ERROR = 4
    STREAM_ERROR = 5


class Stages(Enum):
    """Measurement stages reported by the pipeline.

    Args:
        Enum (string): Stage names, in expected completion order.
    """

    RAW = "raw"
    MINIFIED = "minified"
    COMPRESSED = "compressed"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    MODULE_CACHE_PATH = os.path.join(
        os.path.dirname(os.path.abspath(__file__)), ".cached_modules"
    )
    NPM_COMMAND = ["npm"]
    BUNDLER_COMMAND = ["browserify"]
    MINIFIER_COMMAND = ["uglifyjs"]
    DEFAULT_MINIFIER_ARGS = ["--compress", "--mangle"]
    NODE_ENV = "production"
    CHUNK_SIZE = 64 * 1024
    GZIP_LEVELS = list(range(-1, 10))

    LOG_FORMAT = "%(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    ENV_LOG_LEVEL = "BUNDLECOST_LOG_LEVEL"
    ENV_CONFIG = "BUNDLECOST_CONFIG"
    ENV_CACHE_DIR = "BUNDLECOST_CACHE_DIR"
    CONFIG_SECTION = "bundlecost"
