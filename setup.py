"""
Setup script for Customs Process Tracker

Backend for tracking customs-logistics process executions: operators walk a
shipment through the ordered steps of a customs process, and reported errors
raise alerts for administrators.
"""

from setuptools import setup, find_packages
import pathlib

here = pathlib.Path(__file__).parent.resolve()

# Get the long description from the README file
try:
    long_description = (here / "README.md").read_text(encoding="utf-8")
except FileNotFoundError:
    long_description = """
    Customs Process Tracker

    Backend for tracking customs-logistics process executions with a per-step
    ledger, error alerts for administrators and a REST API.
    """

setup(
    name="customs-process-tracker",
    version="1.0.0",
    description="Process execution tracker for customs logistics operations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Customs Process Tracker Team",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Topic :: Office/Business",
    ],
    keywords="customs, logistics, process tracking, workflow, async",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "asyncpg>=0.27.0",
        "click>=8.0.0",

        # HTTP API
        "fastapi>=0.95.0",
        "uvicorn>=0.20.0",

        # Identity provider and assistant clients
        "httpx>=0.24.0",

        # Configuration and serialization
        "pyyaml>=6.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "coverage>=6.0.0",
            "flake8>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "customs-tracker=customs_tracker.cli.main:main",
            "ctrack=customs_tracker.cli.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "customs_tracker": [
            "sql/*.sql",
        ],
    },
)
