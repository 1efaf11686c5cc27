from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "voicechat.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
    )


if __name__ == "__main__":
    main()
