# run.py
import uvicorn
import os
import sys

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from app.core.config import PORT, HOST, APP_NAME

if __name__ == "__main__":
    print(f"===========================================================")
    print(f" [{APP_NAME}] listening on :{PORT}")
    print(f"===========================================================")

    # "app:create_app" refers to the create_app factory in app/__init__.py
    uvicorn.run(
        "app:create_app",
        host=HOST,
        port=PORT,
        factory=True
    )
