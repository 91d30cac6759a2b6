# aicoder/core/__init__.py
