"""Setup configuration for unitrun."""

from setuptools import setup, find_packages

setup(
    name="unitrun",
    version="0.1.0",
    description="Configurable test runner with dot-progress and TAP reporters",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "unitrun=unitrun.cli:main",
        ],
    },
)
