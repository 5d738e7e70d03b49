"""Setup configuration for cinehub."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="cinehub",
    version="0.1.0",
    author="CineHub Contributors",
    description="Movie collection API with scheduled release reminder emails",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cinehub", "cinehub.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Framework :: FastAPI",
    ],
    python_requires=">=3.9",
    install_requires=[
        "asyncpg>=0.27.0",
        "boto3>=1.26.0",
        "pydantic>=2.0.0",
        "fastapi>=0.110.0,<0.137",
        "uvicorn[standard]>=0.20.0",
        "python-multipart>=0.0.6",
        "aiohttp>=3.8.0",
        "PyJWT>=2.8.0",
        "bcrypt>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
            "testcontainers[postgres]>=3.7.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cinehub-api=cinehub.app:main",
            "cinehub-worker=cinehub.worker_main:main",
        ],
    },
)
