"""
Run the API server.

    python -m pharmacy_ledger
"""

import uvicorn

from pharmacy_ledger.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "pharmacy_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    main()
