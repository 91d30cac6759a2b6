# aicoder/__init__.py
"""
ai-coder - 命令行 AI 结对编程工具。
"""

__version__ = "0.1.0"
