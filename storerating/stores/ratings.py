from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from loguru import logger
from storerating.errors import NotFound, RatingConflict, is_unique_violation
from storerating.models.store import Store
from storerating.models.rating import Rating
from storerating.stores.service import get_caller


def _find_rating(db: Session, user_id: int, store_id: int) -> Rating | None:
    return (
        db.query(Rating)
          .filter(Rating.user_id == user_id, Rating.store_id == store_id)
          .first()
    )

def submit_rating(db: Session, user_id: int, store_id: int, rating: int) -> Rating:
    """
    Insert or replace the caller's rating for a store.

    A first submission inserts a row; later ones overwrite its value in place,
    so there is never more than one row per (user_id, store_id). When two
    first submissions race, the loser hits ``uq_ratings_user_store`` and gets
    RatingConflict.

    Raises:
        NotFound: no store with ``store_id``
        Unauthenticated: the user behind the token no longer exists
        RatingConflict: a concurrent submission inserted the row first
    """
    if db.get(Store, store_id) is None:
        raise NotFound("Store not found")
    get_caller(db, user_id)

    existing = _find_rating(db, user_id, store_id)
    if existing is not None:
        existing.rating = rating
        db.commit()
        db.refresh(existing)
        logger.info(f"rating of user {user_id} for store {store_id} updated to {rating}")
        return existing

    row = Rating(user_id=user_id, store_id=store_id, rating=rating)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc, "uq_ratings_user_store", "ratings.user_id"):
            logger.warning(f"concurrent rating insert for user {user_id} and store {store_id}")
            raise RatingConflict() from exc
        raise
    db.refresh(row)
    logger.info(f"rating of user {user_id} for store {store_id} set to {rating}")
    return row
