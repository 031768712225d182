"""appstart -- scaffold a new app from a starter template or a git repository.

The package is organised around the start pipeline:

    start.schema_builder   resolve user input into an immutable creation schema
    start.acquisition      clone or download + extract into the project directory
    start.integration      native integrations, personalization, deps, git
    starters               starter catalog, manifest reader, remote wizard bridge
    project                project config files and personalization

Entry point: ``appstart.pipeline:main``.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
