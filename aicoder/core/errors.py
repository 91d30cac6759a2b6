# aicoder/core/errors.py
"""
ai-coder 异常层次。

只有 ConfigurationError 会终止进程，其余错误均在会话内报告并恢复。
"""


class AICoderError(Exception):
    """所有 ai-coder 错误的基类"""


class ConfigurationError(AICoderError):
    """缺少凭据、配置文件损坏等不可恢复的配置错误"""


class TransportError(AICoderError):
    """与模型 API 通信失败（网络错误、HTTP 错误、响应格式错误）"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class RequestCancelled(AICoderError):
    """用户主动中止了进行中的请求，不属于失败"""

    def __init__(self, message: str = "Request aborted by user"):
        super().__init__(message)


class SessionBusyError(AICoderError):
    """会话中已有一个请求在进行"""


class FileStoreError(AICoderError):
    """单个文件的读写失败"""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class VersionControlError(AICoderError):
    """版本控制命令执行失败，携带底层工具的输出"""

    def __init__(self, command, message: str, returncode: int = None):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
