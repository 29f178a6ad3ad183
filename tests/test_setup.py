"""Verify project setup is correct."""

import sys
from pathlib import Path


def test_python_version():
    """Verify Python version is 3.10+."""
    assert sys.version_info >= (3, 10), "Python 3.10+ required"


def test_package_directory_exists():
    """Verify heyfocus/ directory structure exists."""
    project_root = Path(__file__).parent.parent
    package = project_root / "heyfocus"

    assert (package / "__init__.py").exists(), "heyfocus/__init__.py should exist"
    assert (package / "models").is_dir(), "heyfocus/models/ should exist"
    assert (package / "services").is_dir(), "heyfocus/services/ should exist"
    assert (package / "routes").is_dir(), "heyfocus/routes/ should exist"


def test_package_importable():
    """Verify heyfocus package is importable."""
    import heyfocus

    assert heyfocus.__version__ == "1.0.0"


def test_pydantic_available():
    """Verify pydantic v2 is installed."""
    import pydantic

    assert pydantic.VERSION.startswith("2.")
