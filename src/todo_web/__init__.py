"""
Todo list web application package.

The FastAPI app is built by `todo_web.main.create_app`; building it reads the
environment and creates AWS clients, so nothing is constructed at import time.
"""

__version__ = "0.1.0"
