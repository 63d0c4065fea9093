#!/usr/bin/env python3
"""
Setup script for Student Records

Install with:
    pip install -e .

With test tooling:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

# API server dependencies
server_requirements = [
    "fastapi>=0.110.0",
    "starlette>=0.36.0",
    "uvicorn[standard]>=0.27.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "aiosqlite>=0.19.0",
    "asyncpg>=0.29.0",
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "python-dotenv>=1.0.0",
    "bcrypt>=4.1.0",
    "python-jose[cryptography]>=3.3.0",
    "slowapi>=0.1.9",
]

# CLI dependencies
cli_requirements = [
    "httpx>=0.26.0",
    "rich>=13.7.0",
]

setup(
    name="studentrecords",
    version="1.0.0",
    description="Student Records - student record management API and terminal client",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    package_dir={"": "backend", "cli": "cli"},
    packages=find_namespace_packages(where="backend", include=["app", "app.*"]) + ["cli"],
    python_requires=">=3.9",
    install_requires=server_requirements + cli_requirements,
    extras_require={
        "cli": cli_requirements,
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "faker>=22.0.0",
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "studentrecords=cli.main:main",
            "studentrecords-server=app.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="students records fastapi cli",
)
