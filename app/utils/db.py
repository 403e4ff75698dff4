from contextlib import contextmanager
import logging
from models import db

@contextmanager
def transactional(message="DB transaction failed"):
    """Context manager to wrap a database transaction."""
    from app.errors import AccessError

    try:
        yield
        db.session.commit()
    except AccessError as e:
        logging.info(f"{message}: %s", e.message)
        db.session.rollback()
        raise
    except Exception as e:
        logging.error(f"{message}: %s", e, exc_info=True)
        db.session.rollback()
        raise
