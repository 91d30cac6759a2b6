# aicoder/core/client.py
"""
Chat Completions 客户端（基于 requests）。

两种消费模式：
- 流式：逐个片段按到达顺序写到 sink，最终返回拼接后的全文；
- 缓冲：非流式请求，只返回完整文本。

流式响应是 SSE 事件帧 ``data: {...}``，以字面量 ``data: [DONE]`` 结束。
网络分块可能把一帧切开，所以先在字节层面重组行，再逐帧解析；
单帧解析失败只跳过该帧。

Ctrl-C（KeyboardInterrupt）或 cancel() 会关闭底层连接并抛出 RequestCancelled，
与网络错误 TransportError 区分开。
"""

import json
import threading
from contextlib import closing
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Union

import requests

from .errors import RequestCancelled, TransportError
from .models import Message
from ..utils.console import debug

DONE_SENTINEL = "[DONE]"
DATA_PREFIX = "data:"

Sink = Callable[[str], None]


def iter_sse_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """把任意边界的字节块重组为完整的行（按 UTF-8 解码）"""
    buffer = b""
    for chunk in chunks:
        if not chunk:
            continue
        buffer += chunk
        while b"\n" in buffer:
            raw, buffer = buffer.split(b"\n", 1)
            yield raw.rstrip(b"\r").decode("utf-8", errors="replace")
    if buffer:
        yield buffer.rstrip(b"\r").decode("utf-8", errors="replace")


def parse_sse_frame(line: str) -> Optional[Dict[str, Any]]:
    """
    解析单行事件帧。非 data 行、结束标记和损坏的 JSON 都返回 None。
    """
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):].strip()
    if not payload or payload == DONE_SENTINEL:
        return None
    try:
        frame = json.loads(payload)
    except json.JSONDecodeError:
        debug(payload, title="Skipped malformed frame")
        return None
    return frame if isinstance(frame, dict) else None


def frame_content(frame: Dict[str, Any]) -> str:
    try:
        return frame["choices"][0]["delta"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def iter_sse_content(lines: Iterable[str]) -> Iterator[str]:
    """从事件帧中依次取出内容片段，遇到 [DONE] 结束"""
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(DATA_PREFIX) and stripped[len(DATA_PREFIX):].strip() == DONE_SENTINEL:
            return
        frame = parse_sse_frame(stripped)
        if frame is None:
            continue
        if "error" in frame:
            err = frame["error"]
            message = err.get("message") if isinstance(err, dict) else str(err)
            raise TransportError(f"Model API error: {message}")
        content = frame_content(frame)
        if content:
            yield content


def _error_detail(response) -> str:
    try:
        body = response.json()
        if isinstance(body, dict) and "error" in body:
            err = body["error"]
            return err.get("message", str(err)) if isinstance(err, dict) else str(err)
    except ValueError:
        pass
    return (response.text or "")[:500]


MessageLike = Union[Message, Dict[str, str]]


class ChatClient:
    def __init__(self, api_key: str, api_url: str, model: str, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.model = model
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )
        self._cancelled = threading.Event()
        self._response = None

    def build_payload(self, messages: Sequence[MessageLike], stream: bool) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [m.to_dict() if isinstance(m, Message) else dict(m) for m in messages],
            "stream": stream,
        }

    def _post(self, messages: Sequence[MessageLike], stream: bool):
        payload = self.build_payload(messages, stream)
        debug(json.dumps(payload["messages"], indent=2, ensure_ascii=False), title=">>> LLM")
        try:
            response = self.session.post(self.api_url, json=payload, stream=stream)
        except requests.RequestException as e:
            if self._cancelled.is_set():
                raise RequestCancelled() from None
            raise TransportError(f"Request to {self.api_url} failed: {e}") from e
        if response.status_code >= 400:
            detail = _error_detail(response)
            response.close()
            raise TransportError(f"HTTP {response.status_code}: {detail}", status_code=response.status_code)
        return response

    def iter_content(self, messages: Sequence[MessageLike]) -> Iterator[str]:
        """流式请求，按到达顺序产出内容片段；生成器结束或被关闭时释放连接"""
        self._cancelled.clear()
        response = self._post(messages, stream=True)
        self._response = response
        try:
            lines = iter_sse_lines(response.iter_content(chunk_size=None))
            for fragment in iter_sse_content(lines):
                if self._cancelled.is_set():
                    raise RequestCancelled()
                yield fragment
            if self._cancelled.is_set():
                raise RequestCancelled()
        except requests.RequestException as e:
            if self._cancelled.is_set():
                raise RequestCancelled() from None
            raise TransportError(f"Stream interrupted: {e}") from e
        except (AttributeError, ValueError, OSError):
            # cancel() 从其它线程关闭连接后，读取已关闭的 response 会抛出这些异常；
            # 没有取消请求时它们是真正的错误，原样抛出
            if self._cancelled.is_set():
                raise RequestCancelled() from None
            raise
        finally:
            self._response = None
            response.close()

    def complete(self, messages: Sequence[MessageLike]) -> str:
        """非流式请求，返回完整回复"""
        self._cancelled.clear()
        response = self._post(messages, stream=False)
        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TransportError(f"Unexpected response from model API: {e}") from e
        finally:
            response.close()
        if self._cancelled.is_set():
            raise RequestCancelled()
        return content or ""

    def send(self, messages: Sequence[MessageLike], stream: bool = True, sink: Optional[Sink] = None) -> str:
        """
        执行一次请求并返回完整回复文本。

        Args:
            messages: system、历史、本轮用户消息（按顺序）。
            stream: True 时逐片段写到 sink；False 时直到完整回复后才返回。
            sink: 流式模式下的输出回调。

        Raises:
            RequestCancelled: 用户中止；部分内容被丢弃。
            TransportError: 网络或 API 错误。
        """
        try:
            if not stream:
                text = self.complete(messages)
            else:
                parts: List[str] = []
                with closing(self.iter_content(messages)) as fragments:
                    for fragment in fragments:
                        parts.append(fragment)
                        if sink is not None:
                            sink(fragment)
                text = "".join(parts)
        except KeyboardInterrupt:
            self.cancel()
            raise RequestCancelled() from None
        debug(text, title="<<< LLM")
        return text

    def cancel(self) -> None:
        """中止进行中的请求：设置标记并关闭底层连接"""
        self._cancelled.set()
        response = self._response
        if response is not None:
            response.close()
