"""
Default administrator and sample data for a fresh database.
"""

import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from store_ratings.config import settings
from store_ratings.core import security
from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import User, Role

logger = logging.getLogger(__name__)

SAMPLE_USERS: List[Tuple[str, str, str, str, Role]] = [
    ("John Doe - Normal User Example", "user@example.com", "User@123",
     "123 Main Street, Example City, EC 12345", Role.NORMAL_USER),
    ("Jane Smith - Another Normal User", "jane@example.com", "User@123",
     "456 Oak Avenue, Sample Town, ST 67890", Role.NORMAL_USER),
    ("Mike Johnson - Store Owner Example", "store@example.com", "Store@123",
     "789 Business Blvd, Commerce City, CC 11111", Role.STORE_OWNER),
    ("Sarah Wilson - Another Store Owner", "sarah@example.com", "Store@123",
     "321 Retail Road, Market Town, MT 22222", Role.STORE_OWNER),
]

# name, email, address, owner email
SAMPLE_STORES = [
    ("Local Grocery Store", "grocery@store.com", "100 Main Street, City Center, CC 33333",
     "store@example.com"),
    ("City Market", "market@city.com", "200 Market Way, Downtown, DT 44444",
     "sarah@example.com"),
]

# user email, store email, rating, comment
SAMPLE_RATINGS = [
    ("user@example.com", "grocery@store.com", 5, "Great products and service!"),
    ("jane@example.com", "grocery@store.com", 4, "Good selection of items"),
    ("user@example.com", "market@city.com", 5, "Excellent quality and service"),
]


def _get_or_create_user(
    db: Session, name: str, email: str, password: str, address: str, role: Role
) -> Tuple[User, bool]:
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user, False
    user = User(
        name=name,
        email=email,
        hashed_password=security.get_password_hash(password),
        address=address,
        role=role,
    )
    db.add(user)
    db.flush()
    return user, True


def seed_default_admin(db: Session) -> User:
    """Create the default system administrator unless it already exists."""
    admin, created = _get_or_create_user(
        db,
        settings.DEFAULT_ADMIN_NAME,
        settings.DEFAULT_ADMIN_EMAIL,
        settings.DEFAULT_ADMIN_PASSWORD,
        settings.DEFAULT_ADMIN_ADDRESS,
        Role.SYSTEM_ADMIN,
    )
    db.commit()
    if created:
        logger.info(f"Default admin created: {admin.email}")
    return admin


def seed_sample_data(db: Session) -> Dict[str, int]:
    """Insert sample users, stores and ratings. Existing rows are left alone."""
    users = {}
    for name, email, password, address, role in SAMPLE_USERS:
        users[email], _ = _get_or_create_user(db, name, email, password, address, role)

    stores = {}
    for name, email, address, owner_email in SAMPLE_STORES:
        store = db.query(Store).filter(Store.email == email).first()
        if not store:
            store = Store(name=name, email=email, address=address, owner_id=users[owner_email].id)
            db.add(store)
            db.flush()
        stores[email] = store

    ratings = 0
    for user_email, store_email, value, comment in SAMPLE_RATINGS:
        user, store = users[user_email], stores[store_email]
        exists = (
            db.query(Rating.id)
            .filter(Rating.user_id == user.id, Rating.store_id == store.id)
            .first()
        )
        if not exists:
            db.add(Rating(user_id=user.id, store_id=store.id, rating=value, comment=comment))
            ratings += 1

    db.commit()
    logger.info("Sample data inserted successfully")
    return {"users": len(users), "stores": len(stores), "ratings": ratings}
