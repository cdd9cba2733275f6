#!/usr/bin/env python3
import os
import sys
from gamelauncher import create_app, ensure_root, BIND, PORT, HOME
from gamelauncher.logs import configure_logging

def _resolve_data_dir() -> str:
    if len(sys.argv) >= 2:
        return os.path.abspath(sys.argv[1])
    return os.path.abspath(HOME)

if __name__ == "__main__":
    configure_logging()
    data_dir = _resolve_data_dir()
    ensure_root(data_dir)
    app = create_app(data_dir)
    app.run(host=BIND, port=PORT, debug=False, threaded=True)
