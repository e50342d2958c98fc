"""Loading migration strategies and resolving them by release version."""

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

from tenantshift.core.exceptions import MigrationError
from tenantshift.migrations.base import Migration

logger = logging.getLogger(__name__)


def load_strategies(path: Path | str) -> dict[str, type[Migration]]:
    """Load Migration subclasses from a Python file or a directory of files.

    Files whose names start with an underscore are ignored. Strategies are
    keyed by class name, which is what the version map refers to.

    Args:
        path: A ``.py`` file or a directory containing them

    Returns:
        Mapping of class name to strategy class
    """
    path = Path(path)
    if path.is_dir():
        files = sorted(p for p in path.glob("*.py") if not p.name.startswith("_"))
    elif path.exists():
        files = [path]
    else:
        raise MigrationError(f"Strategy path not found: {path}")

    strategies: dict[str, type[Migration]] = {}
    for file_path in files:
        module_name = f"tenantshift_strategy_{file_path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if not spec or not spec.loader:
            continue

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module

        try:
            spec.loader.exec_module(module)
        except Exception as e:
            logger.warning(f"Failed to load strategies from {file_path}: {e}")
            continue

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (
                inspect.isclass(attr)
                and issubclass(attr, Migration)
                and attr is not Migration
                and not inspect.isabstract(attr)
            ):
                strategies[attr.__name__] = attr

    return strategies


def get_strategy(
    version: str,
    strategies: dict[str, type[Migration]],
) -> type[Migration]:
    """Resolve the strategy class for a release version.

    Args:
        version: Release version, e.g. "0.14.0"
        strategies: Loaded strategies by class name

    Returns:
        The strategy class

    Raises:
        MigrationError: If the version or its strategy is unknown
    """
    identifier = Migration.versions.get(version)
    if identifier is None:
        raise MigrationError(f"No migration for version '{version}'", version=version)

    strategy = strategies.get(identifier)
    if strategy is None:
        raise MigrationError(
            f"Strategy '{identifier}' for version '{version}' is not loaded",
            version=version,
        )
    return strategy
