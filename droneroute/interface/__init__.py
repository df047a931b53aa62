"""Mini README: Outer interfaces (HTTP) for the route engine.

Exports the FastAPI application factory. The Typer CLI lives in
``route_planner_cli.py`` at the repository root.
"""

from .web_app import create_application

__all__ = ["create_application"]
