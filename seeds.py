import logging
from typing import Optional, Union

import sqlalchemy as sa
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session

from models import LOANS_CATEGORY_NAME, normalize_name, utcnow


logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Food & Dining", "expense"),
    ("Transport", "expense"),
    ("Groceries", "expense"),
    ("Bills & Utilities", "expense"),
    ("Entertainment", "expense"),
    ("Health", "expense"),
    ("Shopping", "expense"),
    ("Miscellaneous", "expense"),
    ("Salary", "income"),
    ("Business", "income"),
    ("Interest", "income"),
    ("Gift", "income"),
    (LOANS_CATEGORY_NAME, "both"),
    ("Other", "both"),
]

# Only the columns seeds write; the ORM mapping may grow past this.
categories_table = sa.table(
    "categories",
    sa.column("id", sa.Integer),
    sa.column("name", sa.String),
    sa.column("normalized_name", sa.String),
    sa.column("applies_to", sa.String),
    sa.column("user_created", sa.Boolean),
    sa.column("created_at", sa.DateTime),
)


def _find_category(
    conn: Union[Connection, Session], name: str, applies_to: Optional[str] = None
) -> Optional[int]:
    stmt = sa.select(categories_table.c.id).where(
        categories_table.c.normalized_name == normalize_name(name)
    )
    if applies_to is not None:
        stmt = stmt.where(categories_table.c.applies_to == applies_to)
    return conn.execute(stmt.order_by(categories_table.c.id).limit(1)).scalar()


def ensure_system_category(
    conn: Union[Connection, Session], name: str, applies_to: str
) -> int:
    existing = _find_category(conn, name, applies_to)
    if existing is not None:
        return existing
    result = conn.execute(
        sa.insert(categories_table).values(
            name=name,
            normalized_name=normalize_name(name),
            applies_to=applies_to,
            user_created=False,
            created_at=utcnow(),
        )
    )
    return int(result.lastrowid)


def seed_default_categories(conn: Union[Connection, Session]) -> None:
    for name, applies_to in DEFAULT_CATEGORIES:
        ensure_system_category(conn, name, applies_to)


def ensure_loans_category(conn: Union[Connection, Session]) -> int:
    existing = _find_category(conn, LOANS_CATEGORY_NAME)
    if existing is not None:
        return existing
    category_id = ensure_system_category(conn, LOANS_CATEGORY_NAME, "both")
    logger.info(f"loans_category_created: category_id={category_id}")
    return category_id
