"""Protocol buffers wire-format decoding, bitfield checks, base64 and file helpers."""

__version__ = "1.0.0"
__all__ = ["base64", "bits", "decoder", "fileio", "reader"]