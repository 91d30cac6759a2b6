# setup.py
from setuptools import setup, find_packages

setup(
    name="aicoder",
    version="0.1.0",
    description="A command-line AI pair programmer: sends files and a request to a chat-completion API, writes the returned files back and commits them.",
    author="Your Name or Team",
    author_email="your_email@example.com",
    packages=find_packages(include=['aicoder', 'aicoder.*']),
    include_package_data=True,
    install_requires=[
        "click>=8.0",
        "pyyaml",
        "jinja2",
        "rich",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'ai-coder = aicoder.cli:cli',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
