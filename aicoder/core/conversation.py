# aicoder/core/conversation.py
"""
会话消息存储：按顺序保存的带角色消息列表。
只允许追加或显式清空，顺序即模型上下文顺序。
"""

from typing import List

from .models import Message, Role


class Conversation:
    def __init__(self):
        self._history: List[Message] = []

    @property
    def messages(self) -> List[Message]:
        return list(self._history)

    def append(self, role: Role, content: str) -> Message:
        message = Message(role=Role(role), content=content)
        self._history.append(message)
        return message

    def add_user(self, content: str) -> Message:
        return self.append(Role.USER, content)

    def add_assistant(self, content: str) -> Message:
        return self.append(Role.ASSISTANT, content)

    def clear(self) -> None:
        self._history = []

    def compose(self, system_prompt: str, user_turn: str) -> List[Message]:
        """
        组装一次请求的消息列表：system 提示、历史消息、本轮用户消息。
        不修改历史。
        """
        return [
            Message(Role.SYSTEM, system_prompt),
            *self._history,
            Message(Role.USER, user_turn),
        ]

    def record_turn(self, user_turn: str, reply: str) -> None:
        """请求成功完成后才调用，保证中止或失败的一轮不会留下痕迹"""
        self.add_user(user_turn)
        self.add_assistant(reply)

    def __len__(self) -> int:
        return len(self._history)
