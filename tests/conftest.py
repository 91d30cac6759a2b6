# tests/conftest.py
"""
ai-coder 测试配置和共享 fixtures
文件系统、git 和模型客户端都有内存替身，核心逻辑可以脱离网络和子进程测试。
"""

import os
import tempfile
from pathlib import Path

import pytest

from aicoder.core.errors import FileStoreError, VersionControlError
from aicoder.core.storage import IFileStore
from aicoder.core.vcs import IVersionControl
from aicoder.utils import console as console_module


class MemoryFileStore(IFileStore):
    def __init__(self, files=None):
        self.files = {path: data.encode("utf-8") if isinstance(data, str) else data
                      for path, data in (files or {}).items()}
        self.writes = []
        self.fail_on = set()
        self.unreadable = set()

    def read(self, path):
        if path in self.unreadable:
            raise FileStoreError(path, "Permission denied")
        return self.files.get(path)

    def write(self, path, data):
        if path in self.fail_on:
            raise FileStoreError(path, "Read-only file system")
        self.writes.append(path)
        self.files[path] = data

    def exists(self, path):
        return path in self.files

    def text(self, path):
        return self.files[path].decode("utf-8")


class FakeVersionControl(IVersionControl):
    def __init__(self):
        self.calls = []
        self.staged = []
        self.commits = []
        self.fail_stage = set()
        self.fail_commit = False
        self.diff_text = "diff --git a/file b/file\n+change\n"

    def stage(self, path):
        self.calls.append(("stage", path))
        if path in self.fail_stage:
            raise VersionControlError(["git", "add", path], f"fatal: pathspec '{path}' did not match any files", 128)
        self.staged.append(path)

    def diff(self, paths):
        self.calls.append(("diff", list(paths)))
        return self.diff_text

    def commit(self, message, paths):
        self.calls.append(("commit", list(paths)))
        if self.fail_commit:
            raise VersionControlError(["git", "commit"], "nothing to commit, working tree clean", 1)
        self.commits.append((message, list(paths)))
        return "[main abc1234] commit\n"


class FakeChatClient:
    """按顺序返回预设回复；回复可以是字符串或要抛出的异常"""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def send(self, messages, stream=True, sink=None):
        self.calls.append({"messages": list(messages), "stream": stream})
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if stream and sink is not None:
            for i in range(0, len(reply), 7):
                sink(reply[i:i + 7])
        return reply

    def cancel(self):
        pass


@pytest.fixture(autouse=True)
def quiet_console():
    """每个测试结束后恢复 verbose 开关"""
    yield
    console_module.set_verbose(False)


@pytest.fixture(scope="function")
def isolated_filesystem():
    """
    提供一个隔离的临时文件系统，并切换当前工作目录。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        original_cwd = os.getcwd()
        os.chdir(temp_path)
        yield temp_path
        os.chdir(original_cwd)


@pytest.fixture
def memory_store():
    return MemoryFileStore()


@pytest.fixture
def fake_vcs():
    return FakeVersionControl()


@pytest.fixture
def make_client():
    return FakeChatClient


@pytest.fixture
def runner():
    """提供一个 Click CliRunner 实例用于测试 CLI 命令"""
    from click.testing import CliRunner
    return CliRunner()
