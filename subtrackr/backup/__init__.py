"""Backup export/import package."""

from subtrackr.backup.codec import (
    BackupError,
    InvalidBackup,
    backup_filename,
    build_records,
    export_ledger,
    import_ledger,
    read_backup,
    serialize_ledger,
)

__all__ = [
    "BackupError",
    "InvalidBackup",
    "backup_filename",
    "build_records",
    "export_ledger",
    "import_ledger",
    "read_backup",
    "serialize_ledger",
]
