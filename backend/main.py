"""
Image Proxy Service entry point

Usage:
    cd backend
    python main.py                   # listens on $PORT (default 3000)
    uvicorn main:app --port 3000
"""

import uvicorn

from image_proxy import create_app
from image_proxy.config import settings

app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
