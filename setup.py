#!/usr/bin/env python3
"""
Setup script for Storefront

Install with:
    pip install -e .

With MySQL support and test tooling:
    pip install -e ".[mysql,dev]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

requirements = [
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "email-validator>=2.1.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "aiosqlite>=0.19.0",
    "bcrypt>=4.1.0",
    "python-jose[cryptography]>=3.3.0",
    "python-multipart>=0.0.9",
    "aiofiles>=23.2.1",
    "python-slugify>=8.0.0",
    "slowapi>=0.1.9",
]

setup(
    name="storefront",
    version="1.0.0",
    description="Storefront - product catalog and user management API with a server-rendered CRUD demo",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Storefront Team",
    license="MIT",
    packages=find_packages(include=["storefront", "storefront.*"]),
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "mysql": [
            "aiomysql>=0.2.0",
        ],
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
            "faker>=22.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "storefront=storefront.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    keywords="ecommerce catalog fastapi sqlalchemy api",
)
