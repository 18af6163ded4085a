"""Build configuration for typedqs."""
import os
import re

from setuptools import find_packages, setup


def read_version():
    """Read __version__ from the package without importing it."""
    path = os.path.join(os.path.dirname(__file__), "src", "typedqs", "__init__.py")
    with open(path, encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if match is None:
        raise RuntimeError("Unable to find __version__ in typedqs/__init__.py")
    return match.group(1)


setup(
    name="typedqs",
    version=read_version(),
    description="Decode query strings into typed Python values",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "werkzeug>=2.3",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "flask>=2.3",
        ],
    },
)
