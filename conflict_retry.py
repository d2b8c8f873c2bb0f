import logging

from errors import ConcurrentUpdateError

logger = logging.getLogger(__name__)


def retry_on_conflict(operation, retries=0):
    """Run ``operation`` and rerun it up to ``retries`` times after a lost race.

    Each attempt must re-read the branch head itself; only ConcurrentUpdateError
    is retried. The last conflict is re-raised once the attempts run out.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except ConcurrentUpdateError as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.info("retrying after conflict on %s (attempt %d/%d)",
                        e.branch, attempt, retries)
