# config.py
import os

BYTE_VALUES = 256      # size of the byte domain split into layers
CHANNELS = 3           # R, G, B; alpha is always dropped

# Optional stencil header (off unless --header is passed)
HEADER_MAGIC = b"HSTENCIL"
HEADER_VERSION = 1
HEADER_FORMAT = ">8sHHIII"   # magic, version, reserved, layers, width, height

FALSE_WORDS = ("", "0", "false", "no", "off")


def env_flag(name: str) -> bool:
    """True unless the variable is unset or one of FALSE_WORDS (any case)."""
    return os.environ.get(name, "").strip().lower() not in FALSE_WORDS


LOG_LEVEL = os.environ.get("HYPERSTENCIL_LOG_LEVEL", "INFO").upper()
USE_COLOR = "NO_COLOR" not in os.environ
LEGACY_WRAP = env_flag("HYPERSTENCIL_LEGACY_WRAP")
