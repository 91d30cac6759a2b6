# aicoder/utils/__init__.py
