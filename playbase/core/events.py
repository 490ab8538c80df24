from ..store import StoreManager
from ..config import github
from ..logger import get_logger

logger = get_logger()

async def startup_event():
    """Resolve the document store backend for this process"""
    manager = StoreManager.get_instance()
    if manager.backend == 'github':
        if not (github.app_id and github.installation_id and github.private_key):
            logger.warning("GitHub App credentials are not configured; store calls will fail")
        logger.info(f"Using GitHub store {github.owner}/{github.repo}@{github.branch}")
    else:
        logger.info("Using in-memory document store")

async def shutdown_event():
    """Drop the store manager; nothing else is held between requests"""
    StoreManager.reset()
    logger.info("Store manager released")
