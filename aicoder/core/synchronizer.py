# aicoder/core/synchronizer.py
from typing import Iterable

from rich.markup import escape

from .errors import FileStoreError
from .models import ChangeSet, ChangeStatus, ParsedFileUpdate
from .storage import IFileStore
from ..utils.console import success, error, info


class FileSynchronizer:
    """
    将解析出的文件更新写入工作区。

    - 只做整文件替换，不会删除回复中未出现的文件；
    - 内容与磁盘完全一致时跳过写入；
    - 单个文件失败只记录在 ChangeSet.failures 中，不影响其余文件。
    """

    def __init__(self, store: IFileStore, encoding: str = "utf-8"):
        self.store = store
        self.encoding = encoding

    def apply_one(self, update: ParsedFileUpdate, change_set: ChangeSet) -> None:
        path = update.filename
        data = update.content.encode(self.encoding)
        try:
            existing = self.store.read(path)
            if existing == data:
                info(f"Unchanged: [path]{escape(path)}[/path]")
                return
            self.store.write(path, data)
        except FileStoreError as e:
            change_set.record_failure(path, str(e))
            error(f"Failed to write {escape(str(e))}")
            return

        status = ChangeStatus.CREATED if existing is None else ChangeStatus.UPDATED
        change_set.record(path, status)
        success(f"{status.value.capitalize()}: [path]{escape(path)}[/path]")

    def apply(self, updates: Iterable[ParsedFileUpdate]) -> ChangeSet:
        change_set = ChangeSet()
        for update in updates:
            self.apply_one(update, change_set)
        return change_set
