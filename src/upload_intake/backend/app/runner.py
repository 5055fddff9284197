import subprocess
import sys

from upload_intake.backend.app.core import settings
from upload_intake.shared.proc import popen


def build_api_cmd(host: str, port: int, log_level: str) -> list[str]:
    return [
        sys.executable,
        "-m", "uvicorn",
        "upload_intake.backend.app.main:app",
        "--host", host,
        "--port", str(port),
        "--log-level", log_level.lower(),
    ]


def run() -> subprocess.Popen:
    api_cmd = build_api_cmd(settings.API_HOST, settings.API_PORT, settings.LOG_LEVEL)

    print(f"Server running on port {settings.API_PORT}")
    return popen(api_cmd)
