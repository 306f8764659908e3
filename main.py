import os
import logging

from pawfinder import create_app

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = create_app()

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Starting PawFinder API on port {port}")
    app.run(debug=True, host="0.0.0.0", port=port)
