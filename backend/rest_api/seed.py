"""
Seed data for development and testing.
Creates a demo restaurant with one branch, a floor of tables and a small menu.
"""

from sqlalchemy.orm import Session
from sqlalchemy import select

from rest_api.models import Branch, MenuItem, Restaurant, Table
from shared.config.constants import MenuItemStatus, TableSection, TableStatus
from shared.config.logging import get_logger

logger = get_logger(__name__)


DEMO_RESTAURANT_NAME = "Demo Bistro"
DEMO_BRANCH_NAME = "Downtown"

# (number, capacity, section)
DEMO_TABLES = [
    (1, 2, TableSection.INDOOR),
    (2, 2, TableSection.INDOOR),
    (3, 4, TableSection.INDOOR),
    (4, 4, TableSection.INDOOR),
    (5, 6, TableSection.INDOOR),
    (6, 4, TableSection.OUTDOOR),
    (7, 4, TableSection.OUTDOOR),
    (8, 8, TableSection.OUTDOOR),
]

# (title, price_cents, category, status)
DEMO_MENU = [
    ("Bruschetta", 699, "Starters", MenuItemStatus.ACTIVE),
    ("Caesar Salad", 899, "Starters", MenuItemStatus.ACTIVE),
    ("Margherita Pizza", 1299, "Mains", MenuItemStatus.FEATURED),
    ("Grilled Salmon", 1699, "Mains", MenuItemStatus.ACTIVE),
    ("Ribeye Steak", 2499, "Mains", MenuItemStatus.ACTIVE),
    ("Tiramisu", 650, "Desserts", MenuItemStatus.ACTIVE),
    ("Lemonade", 350, "Drinks", MenuItemStatus.ACTIVE),
    ("Seasonal Soup", 550, "Starters", MenuItemStatus.INACTIVE),
]


def seed_demo(db: Session) -> Restaurant:
    """
    Seed the demo restaurant.
    Idempotent: returns the existing restaurant if it was already seeded.
    """
    existing = db.scalar(select(Restaurant).where(Restaurant.name == DEMO_RESTAURANT_NAME))
    if existing is not None:
        logger.info("Demo data already seeded, skipping", restaurant_id=existing.id)
        return existing

    restaurant = Restaurant(name=DEMO_RESTAURANT_NAME)
    db.add(restaurant)
    db.flush()

    branch = Branch(
        restaurant_id=restaurant.id,
        name=DEMO_BRANCH_NAME,
        address="1 Main Street",
        phone="+1 555 0100",
    )
    db.add(branch)
    db.flush()

    for number, capacity, section in DEMO_TABLES:
        db.add(
            Table(
                restaurant_id=restaurant.id,
                branch_id=branch.id,
                number=number,
                capacity=capacity,
                section=section,
                status=TableStatus.AVAILABLE,
            )
        )

    for title, price_cents, category, status in DEMO_MENU:
        db.add(
            MenuItem(
                restaurant_id=restaurant.id,
                title=title,
                price_cents=price_cents,
                category=category,
                status=status,
            )
        )

    db.commit()
    logger.info(
        "Demo data seeded",
        restaurant_id=restaurant.id,
        branch_id=branch.id,
        tables=len(DEMO_TABLES),
        menu_items=len(DEMO_MENU),
    )
    return restaurant
