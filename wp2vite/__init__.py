"""
wp2vite

Migrates webpack-based front-end projects (Create React App, react-app-rewired,
Vue CLI) to a vite configuration.
"""

__version__ = "0.1.0"

from wp2vite.core.migrator import run_migration, synthesize

__all__ = [
    "run_migration",
    "synthesize",
]
