from .entities import DigitizedFile, MetadataTitle, MetadataRawInput, MetadataSettingsSnapshot, User
from .backup import BackupData, BackupSnapshot

__all__ = [
    "DigitizedFile",
    "MetadataTitle",
    "MetadataRawInput",
    "MetadataSettingsSnapshot",
    "User",
    "BackupData",
    "BackupSnapshot",
]
