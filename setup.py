"""Setup configuration for crossrun."""

from setuptools import setup, find_packages

setup(
    name="crossrun",
    version="0.1.0",
    description="Run host-process JavaScript tests unmodified inside browsers",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "selenium>=4.10.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "crossrun=crossrun.cli:main",
        ],
    },
)
