# aicoder/core/models.py
"""
定义 ai-coder 核心数据结构，例如 Message、ParsedFileUpdate 和 ChangeSet。
这些模型在请求组装、响应解析、文件同步和提交之间传递数据。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional


class Role(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChangeStatus(Enum):
    CREATED = "created"
    UPDATED = "updated"


class FileStatus(Enum):
    TRACKED = "tracked"  # 加入上下文时文件已存在
    NEW = "new"          # 加入上下文时文件尚不存在


@dataclass(frozen=True)
class Message:
    """对话中的一条消息，追加后不可变"""
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class FileContextEntry:
    path: str
    content: Optional[str] = None
    exists: bool = True
    error: Optional[str] = None

    @property
    def readable(self) -> bool:
        return self.content is not None


@dataclass(frozen=True)
class ParsedFileUpdate:
    """从模型回复中解析出的一个完整文件"""
    filename: str
    content: str


@dataclass(frozen=True)
class FileChange:
    path: str
    status: ChangeStatus


@dataclass
class ChangeSet:
    """
    一次同步过程中实际写入磁盘的文件记录。

    同一文件被写入多次时，每次写入都各占一条记录；
    paths 对路径去重，用于暂存和生成 diff。
    """
    changes: List[FileChange] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    def record(self, path: str, status: ChangeStatus) -> None:
        self.changes.append(FileChange(path=path, status=status))

    def record_failure(self, path: str, reason: str) -> None:
        self.failures[path] = reason

    @property
    def paths(self) -> List[str]:
        seen = []
        for change in self.changes:
            if change.path not in seen:
                seen.append(change.path)
        return seen

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[FileChange]:
        return iter(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)


class ActiveFiles:
    """
    当前会话的活动文件上下文：按插入顺序排列的 path -> FileStatus 映射。
    只由 /add、/drop 修改，与 ChangeSet 相互独立。
    """

    def __init__(self, paths=None):
        self._files: Dict[str, FileStatus] = {}
        for path in paths or []:
            self.add(path)

    def add(self, path: str, status: FileStatus = FileStatus.TRACKED) -> bool:
        """加入文件；已存在时返回 False 且保持原位置"""
        if path in self._files:
            return False
        self._files[path] = status
        return True

    def drop(self, path: str) -> bool:
        return self._files.pop(path, None) is not None

    def status(self, path: str) -> Optional[FileStatus]:
        return self._files.get(path)

    @property
    def paths(self) -> List[str]:
        return list(self._files)

    def items(self):
        return list(self._files.items())

    def __contains__(self, path) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._files))
