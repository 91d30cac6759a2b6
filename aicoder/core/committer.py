# aicoder/core/committer.py
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from rich.markup import escape

from .errors import TransportError, VersionControlError
from .models import ChangeSet, Message, Role
from .prompts import commit_messages_prompt
from .vcs import IVersionControl
from ..utils.console import info, success, warning, error

DEFAULT_COMMIT_SUMMARY = "Apply AI-generated changes"
NO_CHANGES = "No changes found"

# 缓冲模式的模型调用：messages -> 完整回复
Completer = Callable[[Sequence[Message]], str]


@dataclass
class CommitResult:
    committed: bool
    message: Optional[str] = None
    staged: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    reason: Optional[str] = None
    output: str = ""


def summary_line(reply: str) -> str:
    """取模型回复的第一行非空文本，去掉包裹的引号和反引号"""
    for line in reply.splitlines():
        line = line.strip().strip("`\"'").strip()
        if line:
            return line
    return ""


def build_commit_message(summary: str, request: str) -> str:
    return f"{summary}\n\nOriginal prompt:\n{request.rstrip()}\n"


class CommitOrchestrator:
    """
    把一次同步产生的 ChangeSet 变成一个 git 提交：
    逐个暂存 -> 取 diff -> 第二次模型调用生成提交信息 -> 通过 stdin 提交。
    """

    def __init__(self, vcs: IVersionControl, completer: Completer):
        self.vcs = vcs
        self.completer = completer

    def stage(self, paths: Sequence[str], result: CommitResult) -> None:
        for path in paths:
            try:
                self.vcs.stage(path)
                result.staged.append(path)
            except VersionControlError as e:
                result.errors[path] = str(e)
                error(f"Failed to stage [path]{escape(path)}[/path]: {escape(str(e))}")

    def generate_summary(self, request: str, diff: str) -> str:
        system, user = commit_messages_prompt(request, diff)
        messages = [Message(Role.SYSTEM, system), Message(Role.USER, user)]
        try:
            summary = summary_line(self.completer(messages))
        except TransportError as e:
            warning(f"Commit message request failed ({escape(str(e))}), using a generic message.")
            return DEFAULT_COMMIT_SUMMARY
        if not summary:
            warning("Model returned an empty commit message, using a generic message.")
            return DEFAULT_COMMIT_SUMMARY
        return summary

    def commit(self, change_set: ChangeSet, request: str) -> CommitResult:
        result = CommitResult(committed=False)
        if not change_set:
            info(NO_CHANGES)
            result.reason = NO_CHANGES
            return result

        self.stage(change_set.paths, result)
        if not result.staged:
            result.reason = "Nothing could be staged"
            error(result.reason)
            return result

        try:
            diff = self.vcs.diff(result.staged)
        except VersionControlError as e:
            warning(f"Could not produce diff: {escape(str(e))}")
            diff = ""

        result.message = build_commit_message(self.generate_summary(request, diff), request)
        try:
            result.output = self.vcs.commit(result.message, result.staged)
        except VersionControlError as e:
            result.reason = str(e)
            error(f"Commit failed: {escape(str(e))}")
            return result

        result.committed = True
        success(f"Committed {len(result.staged)} file(s): {escape(result.message.splitlines()[0])}")
        return result
