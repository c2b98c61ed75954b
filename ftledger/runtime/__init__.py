"""Host boundary and the local KV-backed host."""

from .host import Host, KVHost
from .notices import Notice, NoticeLog

__all__ = ["Host", "KVHost", "Notice", "NoticeLog"]
