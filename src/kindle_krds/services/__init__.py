"""Service layer for KRDS tools.

This package wraps the codec with file handling and error reporting so the
CLI and library callers get the same results and messages.
"""

from kindle_krds.services.krds_service import (
    KRDSService,
    LoadResult,
    SaveResult,
    TreeResult,
    VerifyResult,
)

__all__ = [
    "KRDSService",
    "LoadResult",
    "SaveResult",
    "TreeResult",
    "VerifyResult",
]
