# aicoder/core/storage.py
"""
文件系统能力接口 (IFileStore) 及其本地实现。
同步、上下文读取等逻辑只依赖该接口，测试中可用内存实现替换。
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .errors import FileStoreError


class IFileStore(ABC):
    @abstractmethod
    def read(self, path: str) -> Optional[bytes]:
        """读取整个文件；文件不存在时返回 None，其它失败抛出 FileStoreError"""
        pass

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """整体替换文件内容，按需创建父目录"""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass


class LocalFileStore(IFileStore):
    """以 root 为根目录的本地文件存储，拒绝越出根目录的路径"""

    def __init__(self, root: Union[str, Path] = "."):
        self.root = Path(root).resolve()

    def resolve(self, path: str) -> Path:
        if not path or not str(path).strip():
            raise FileStoreError(str(path), "empty path")
        try:
            full_path = (self.root / path).resolve()
        except (OSError, ValueError) as e:
            # 含 NUL 的名字或过长的路径
            raise FileStoreError(path, f"invalid path: {e}")
        if full_path != self.root and self.root not in full_path.parents:
            raise FileStoreError(path, f"path is outside of {self.root}")
        return full_path

    def _is_file(self, path: str, full_path: Path) -> Optional[bool]:
        """True 为普通文件，False 为其它类型，None 为不存在"""
        try:
            if not full_path.exists():
                return None
            return full_path.is_file()
        except (OSError, ValueError) as e:
            raise FileStoreError(path, getattr(e, "strerror", None) or str(e))

    def read(self, path: str) -> Optional[bytes]:
        full_path = self.resolve(path)
        kind = self._is_file(path, full_path)
        if kind is None:
            return None
        if not kind:
            raise FileStoreError(path, "not a regular file")
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise FileStoreError(path, e.strerror or str(e))

    def write(self, path: str, data: bytes) -> None:
        full_path = self.resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as e:
            raise FileStoreError(path, e.strerror or str(e))

    def exists(self, path: str) -> bool:
        try:
            return bool(self._is_file(path, self.resolve(path)))
        except FileStoreError:
            return False
