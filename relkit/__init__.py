"""relkit - toolchain bridging, release builds and triple-qualified packaging."""

__version__ = "0.1.0"
