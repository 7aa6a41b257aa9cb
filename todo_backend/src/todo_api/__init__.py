"""
FastAPI Todo Backend package.

Build an application with ``todo_api.main.create_app`` or serve the default
one (configured from environment variables) with ``python -m todo_api``.
"""

__version__ = "0.2.0"
