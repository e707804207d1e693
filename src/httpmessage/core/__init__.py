"""
=============================================================================
CORE I/O
=============================================================================

The byte-resource layer under every message body.

    Stream     wraps a binary file object: read / write / seek / tell,
               capability flags, metadata, idempotent close

=============================================================================
"""

from .stream import Stream

__all__ = ["Stream"]
