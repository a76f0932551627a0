from .hashing import sha1_hex
from .redact import redact

__all__ = [
    "sha1_hex",
    "redact",
]
