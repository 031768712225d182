"""Package manager command mapping."""

from __future__ import annotations

_INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "i"],
    "yarn": ["yarn", "install"],
}


def pkg_manager_args(npm_client: str) -> list[str]:
    """Return the argv that installs a project's dependencies with *npm_client*.

    Examples::

        pkg_manager_args("npm") -> ["npm", "i"]
        pkg_manager_args("yarn") -> ["yarn", "install"]

    Raises:
        ValueError: For an unknown client.
    """
    try:
        return list(_INSTALL_COMMANDS[npm_client])
    except KeyError:
        raise ValueError(f"Unsupported package manager: {npm_client}") from None
