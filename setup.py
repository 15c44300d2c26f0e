"""
Setup script for the virtual-marlin package.

This script uses setuptools to package and distribute virtual-marlin,
a simulated Marlin motion-control board with an executor that host
software can drive without physical hardware. It defines metadata,
dependencies, and the entry point for the command-line interface.
"""
import os
import re
from setuptools import find_packages, setup


def get_version_from_init():
    """Reads the __version__ string from virtual_marlin/__init__.py."""
    init_py_path = os.path.join(
        os.path.dirname(__file__), "virtual_marlin", "__init__.py"
    )
    try:
        with open(init_py_path, "r", encoding="utf-8") as f_version:
            version_file_content = f_version.read()
        version_match = re.search(
            r"^__version__\s*=\s*['\"]([^'\"]*)['\"]",
            version_file_content,
            re.M,
        )
        if version_match:
            return version_match.group(1)
        raise RuntimeError(
            f"Unable to find __version__ string in {init_py_path}."
        )
    except FileNotFoundError as exc:
        raise RuntimeError(
            f"{init_py_path} not found. Ensure you are in the correct "
            f"directory."
        ) from exc


try:
    with open("README.md", "r", encoding="utf-8") as f_readme:
        long_description = f_readme.read()
except FileNotFoundError:
    long_description = (
        "Simulated Marlin board and executor for testing host software."
    )


setup(
    name="virtual-marlin",
    version=get_version_from_init(),
    description="Simulated Marlin firmware executor for testing bot-control hosts.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where=".", exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Testing :: Simulation",
        "Topic :: System :: Emulators",
    ],
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",  # For the CLI
        "rich>=10.0.0",  # For console output
        "fastapi>=0.68.0",  # For the HTTP debug server
        "uvicorn>=0.15.0",  # For running the FastAPI server
        "pydantic>=1.8",  # Request models for the debug API
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-asyncio>=0.15",
            "httpx",  # Required by fastapi.testclient
            "flake8>=3.9",
            "black>=21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "virtual_marlin=virtual_marlin.main:main",
            "virtual-marlin=virtual_marlin.main:main",
        ],
    },
    keywords="marlin gcode 3d-printer firmware simulator testing",
)
