from .service import BackupService

__all__ = ["BackupService"]
