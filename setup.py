import re
from pathlib import Path

from setuptools import setup

# lklogger/__init__.py imports the runtime dependencies, so read the version without importing it
__version__ = re.search(
    r'^__version__ = "([^"]+)"', (Path(__file__).parent / "lklogger" / "__init__.py").read_text(), re.M
).group(1)

setup(
    name="lklogger",
    long_description="lklogger gives every service in a process its own leveled, rotated log file "
    "and mirrors selected services into one aggregated All.log stream.",
    version=__version__,
    packages=[
        "lklogger",
    ],
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0.3,<9.0.0",
        "pyyaml>=6.0.0,<7.0.0",
        "beartype>=0.17.0,<1.0.0",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
        ],
    },
    entry_points="""
        [console_scripts]
        lklogger=lklogger.cli:cli
    """,
)
