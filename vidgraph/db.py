import functools
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from vidgraph.config import DATABASE_URL, DB_RETRY_ATTEMPTS, DB_RETRY_MAX_WAIT, DB_RETRY_MIN_WAIT
from vidgraph.errors import StoreUnavailable

logger = logging.getLogger(__name__)

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def get_session() -> Session:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def store_retry(func):
    """
    Retry a read path on transient store failures.

    Only ``OperationalError`` (dropped connection, timeout) is retried. The
    session passed as first argument is rolled back between attempts. Once the
    attempts are exhausted the failure surfaces as ``StoreUnavailable``.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        session = args[0] if args and isinstance(args[0], Session) else None

        def attempt():
            try:
                return func(*args, **kwargs)
            except OperationalError:
                if session is not None:
                    session.rollback()
                raise

        retryer = Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
            wait=wait_exponential(multiplier=1, min=DB_RETRY_MIN_WAIT, max=DB_RETRY_MAX_WAIT),
        )
        try:
            return retryer(attempt)
        except RetryError as e:
            logger.error("Store unavailable after %d attempts in %s", DB_RETRY_ATTEMPTS, func.__name__)
            raise StoreUnavailable() from e.last_attempt.exception()

    return wrapper
