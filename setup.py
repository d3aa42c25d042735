"""
Setup script to make the expense_parser package importable globally.
Install with: pip install -e .
"""

from setuptools import setup, find_packages

setup(
    name="expense-parser",
    version="1.0.0",
    description="Payment notification and screenshot text to structured expense records",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "python-multipart",
        "requests",
        "pytesseract",
        "Pillow",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
