"""Configuration commands for pipeline-graph CLI."""

from typing import Any

from cyclopts import App

from pipeline_graph.config import SETTINGS, get_config

config_app = App(name="config", help="Manage configuration")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


def _shown(key: str, value: Any) -> Any:
    # Never echo credentials
    return "****" if key.endswith("token") and value else value


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    The value is checked against the key before it is written, so
    ``graph.cluster_problem_limit`` must be a non-negative integer and
    ``source`` must be ``api`` or ``snapshot``.

    Args:
        key: Configuration key, e.g. api.base_url or graph.base_radius
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.

    Raises:
        ValueError: If the key is unknown or the value is invalid for it
    """
    config = get_config(use_global=global_)
    config.set(key, value)
    print(f"Set {key} = {_shown(key, value)} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting.

    Args:
        key: Configuration key
        global_: If True, unset from global config. If False, unset from local config.
    """
    config = get_config(use_global=global_)
    config.unset(key)
    print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Get the value of a configuration setting."""
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {_shown(key, value)}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List all configuration settings."""
    settings = get_config(use_global=global_).list()

    if not settings:
        print(f"No {_scope(global_)} configuration settings")
        return

    print(f"{_scope(global_).capitalize()} settings:\n")
    for key, value in settings.items():
        print(f"{key} = {_shown(key, value)}")


@config_app.command
def keys() -> None:
    """List the configuration keys pipeline-graph understands."""
    for key in SETTINGS:
        print(key)


@config_app.command
def path(global_: bool = False) -> None:
    """Show where the configuration file lives."""
    config = get_config(use_global=global_)
    exists = "" if config.config_file.exists() else " (not created yet)"
    print(f"{config.config_file}{exists}")
