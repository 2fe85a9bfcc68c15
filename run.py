#!/usr/bin/env python3
# run.py
"""
Development server runner.

Settings come from the environment and an optional .env file.
"""

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "access_control.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
