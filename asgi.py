"""
asgi.py -- Application assembly for ClubSite.

Adds the /uploads static mount on top of the API app. api/main.py knows
nothing about where files live on disk; content/files.py writes them and this
module serves them back.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from fastapi.staticfiles import StaticFiles

from api.main import app
from core.config import get_settings

# check_dir=False: the directory is created by the lifespan (UploadStorage),
# which runs after this module is imported.
app.mount("/uploads", StaticFiles(directory=get_settings().upload_dir, check_dir=False), name="uploads")
