"""
Run the API under uvicorn on the configured address.

    python bin/serve.py

HOST and PORT come from the environment or etc/app.conf (defaults
0.0.0.0:3008).  Equivalent to ``uvicorn main:app --app-dir backend``.
"""

import sys
import os

_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

import uvicorn                      # noqa: E402

from core.config import settings    # noqa: E402


def main():
    # log_config=None: keep the handlers core.logger installed from etc/logging.conf
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
