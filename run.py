#!/usr/bin/env python3
"""Run script for BasicTodo."""

import os
import logging
import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run(
        "basictodo.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
