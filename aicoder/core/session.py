# aicoder/core/session.py
"""
会话对象：持有对话历史、活动文件和各协作组件。

会话在启动时创建、结束时丢弃，状态只能通过这里定义的操作修改。
同一时间只允许一个模型请求；请求成功后才写入对话历史。
"""

from contextlib import contextmanager
from typing import Iterable, List, Optional, Sequence

from rich.markup import escape

from .client import ChatClient, Sink
from .committer import NO_CHANGES, CommitOrchestrator, CommitResult
from .context import FileContextReader
from .conversation import Conversation
from .errors import SessionBusyError
from .models import ActiveFiles, FileStatus, Message
from .parser import ResponseParser
from .prompts import question_prompt, system_prompt, user_prompt
from .storage import IFileStore
from .synchronizer import FileSynchronizer
from .vcs import IVersionControl
from ..utils.console import info, warning, stream_text, console


class Session:
    def __init__(
        self,
        client: ChatClient,
        store: IFileStore,
        vcs: IVersionControl,
        files: Iterable[str] = (),
        sink: Optional[Sink] = stream_text,
    ):
        self.client = client
        self.store = store
        self.vcs = vcs
        self.sink = sink
        self.conversation = Conversation()
        self.active_files = ActiveFiles()
        self.reader = FileContextReader(store)
        self.parser = ResponseParser()
        self.synchronizer = FileSynchronizer(store)
        self.committer = CommitOrchestrator(vcs, self._complete)
        self._in_flight = False
        self.add_files(files)

    # ==================== 请求生命周期 ====================

    @property
    def busy(self) -> bool:
        return self._in_flight

    @contextmanager
    def _request(self):
        if self._in_flight:
            raise SessionBusyError("A request is already in progress")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def _complete(self, messages: Sequence[Message]) -> str:
        return self.client.send(messages, stream=False)

    def _exchange(self, user_turn: str, stream: bool) -> str:
        messages = self.conversation.compose(system_prompt(), user_turn)
        with self._request():
            reply = self.client.send(messages, stream=stream, sink=self.sink if stream else None)
        if stream and self.sink is not None:
            console.print()
        # 中止或失败时不会走到这里，历史保持不变
        self.conversation.record_turn(user_turn, reply)
        return reply

    def build_user_turn(self, request: str) -> str:
        return user_prompt(request, self.reader.read(self.active_files.paths))

    # ==================== 会话操作 ====================

    def ask(self, request: str, stream: bool = True) -> str:
        """带文件上下文提问，只显示回复，不写文件"""
        return self._exchange(self.build_user_turn(request), stream)

    def question(self, text: str, stream: bool = True) -> str:
        """不带文件上下文的提问"""
        return self._exchange(question_prompt(text), stream)

    def commit(self, request: str, stream: bool = True) -> CommitResult:
        """请求 -> 解析 -> 同步 -> 提交"""
        reply = self._exchange(self.build_user_turn(request), stream)
        updates = self.parser.parse(reply)
        if not updates:
            warning(NO_CHANGES)
            return CommitResult(committed=False, reason=NO_CHANGES)
        change_set = self.synchronizer.apply(updates)
        with self._request():
            return self.committer.commit(change_set, request)

    def add_files(self, paths: Iterable[str]) -> List[str]:
        added = []
        for path in paths:
            status = FileStatus.TRACKED if self.store.exists(path) else FileStatus.NEW
            if self.active_files.add(path, status):
                added.append(path)
                info(f"Added [path]{escape(path)}[/path] to context" + (" (new file)" if status is FileStatus.NEW else ""))
            else:
                info(f"[path]{escape(path)}[/path] is already in context")
        return added

    def drop_files(self, paths: Iterable[str]) -> List[str]:
        dropped = []
        for path in paths:
            if self.active_files.drop(path):
                dropped.append(path)
                info(f"Removed [path]{escape(path)}[/path] from context")
            else:
                warning(f"{escape(path)} is not in context")
        return dropped

    def clear_history(self) -> None:
        self.conversation.clear()
        info("Conversation history cleared")
