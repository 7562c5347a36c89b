#!/usr/bin/env python3
"""
Run script for the auth service.
This script launches the FastAPI server with uvicorn.
"""
import sys
import traceback

import uvicorn

from auth_service.config import Config

if __name__ == "__main__":
    config = Config.from_env()
    try:
        print("Starting auth service...")
        print(f"Access the API at http://localhost:{config.port}")
        print(f"API documentation at http://localhost:{config.port}/docs")

        uvicorn.run(
            "auth_service.main:app",
            host="0.0.0.0",
            port=config.port,
            reload=config.is_development,
            log_level=config.log_level.lower(),
        )
    except Exception as e:
        print(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)
