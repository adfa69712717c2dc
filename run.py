import logging
import os

from repair_log import create_app

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = create_app()

if __name__ == "__main__":
    try:
        # 0.0.0.0 so a phone on the same network can reach it
        app.run(host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", 3000)))
    finally:
        app.extensions["repair_store_close"]()
