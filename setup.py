"""
Setup script for redis-zset-ts - time series storage on Redis sorted sets.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

test_requires = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.24.0",
    "pytest-cov>=4.1.0",
]

setup(
    name="redis-zset-ts",
    version="0.1.0",
    description="Simple time series storage using Redis sorted sets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        # Database driver
        "redis>=5.0.1",

        # Member encoding
        "msgpack>=1.0.0",

        # Data validation
        "pydantic>=2.5.0",

        # Monitoring and observability
        "prometheus-client>=0.19.0",

        # Utilities
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": test_requires,
        "dev": test_requires + [
            "black>=23.12.0",
            "mypy>=1.7.0",
            "ruff>=0.1.8",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    include_package_data=True,
    zip_safe=False,
)
