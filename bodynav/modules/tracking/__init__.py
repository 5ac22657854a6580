"""Subject lock-on."""
from .subject_lock import SubjectLockManager, update_lock, locked_body

__all__ = ["SubjectLockManager", "update_lock", "locked_body"]
