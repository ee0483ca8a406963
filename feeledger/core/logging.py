import logging
from typing import Optional

from feeledger.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Root logging setup for the API process. Module loggers propagate here."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
