# aicoder/core/vcs.py
"""
版本控制能力接口 (IVersionControl) 及 git 实现。

子进程一旦启动就运行到结束，输出完整捕获后才返回。
提交信息通过标准输入传给 git，避免 shell 转义问题。
"""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import VersionControlError
from ..utils.console import debug


class IVersionControl(ABC):
    @abstractmethod
    def stage(self, path: str) -> None:
        pass

    @abstractmethod
    def diff(self, paths: Sequence[str]) -> str:
        """已暂存的变更 diff 文本"""
        pass

    @abstractmethod
    def commit(self, message: str, paths: Sequence[str]) -> str:
        pass


class GitVersionControl(IVersionControl):
    def __init__(self, cwd: Union[str, Path] = ".", executable: str = "git"):
        self.cwd = str(cwd)
        self.executable = executable

    def run(self, args: List[str], input_text: Optional[str] = None) -> str:
        command = [self.executable, *args]
        debug(" ".join(command), title="git")
        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise VersionControlError(command, f"Could not run {self.executable}: {e}")
        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip() or f"exit status {result.returncode}"
            raise VersionControlError(command, message, returncode=result.returncode)
        return result.stdout

    def stage(self, path: str) -> None:
        self.run(["add", "--", path])

    def diff(self, paths: Sequence[str]) -> str:
        return self.run(["diff", "--cached", "--no-color", "--", *paths])

    def commit(self, message: str, paths: Sequence[str]) -> str:
        # 指定路径时 git 只提交这些文件，不会带上用户之前暂存的其它内容
        return self.run(["commit", "-F", "-", "--", *paths], input_text=message)
