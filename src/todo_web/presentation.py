from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Autoescaping is on for .html templates: todo text and MOTD are untrusted.
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
