# aicoder/core/context.py
"""
文件上下文读取：每次请求都从磁盘重新读取活动文件。
缺失或不可读的文件只给出警告，不会中止请求。
"""

from typing import Iterable, List

from rich.markup import escape

from .errors import FileStoreError
from .models import FileContextEntry
from .storage import IFileStore
from ..utils.console import warning, debug


class FileContextReader:
    def __init__(self, store: IFileStore, encoding: str = "utf-8"):
        self.store = store
        self.encoding = encoding

    def read_entry(self, path: str) -> FileContextEntry:
        try:
            data = self.store.read(path)
        except FileStoreError as e:
            return FileContextEntry(path=path, content=None, exists=True, error=str(e))
        if data is None:
            return FileContextEntry(path=path, content=None, exists=False)
        try:
            return FileContextEntry(path=path, content=data.decode(self.encoding))
        except UnicodeDecodeError as e:
            return FileContextEntry(path=path, content=None, exists=True, error=f"{path}: not {self.encoding} text ({e.reason})")

    def read(self, paths: Iterable[str]) -> List[FileContextEntry]:
        entries = []
        for path in paths:
            entry = self.read_entry(path)
            if not entry.exists:
                warning(f"{escape(path)} does not exist yet, sending it as a new file.")
            elif not entry.readable:
                warning(f"Skipping unreadable file {escape(entry.error)}")
            else:
                debug(f"{path}: {len(entry.content)} chars", title="context")
            entries.append(entry)
        return entries
