"""
Setup script for html-pdf-service project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="html-pdf-service",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"html_pdf_service": ["public/*"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.115.3",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "playwright>=1.40",
        "python-multipart>=0.0.9",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "html-pdf-service=html_pdf_service.app:main",
        ],
    },
)
