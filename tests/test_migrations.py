import pytest
from sqlalchemy import delete, func, select, text

from database import Store
from exceptions import MigrationError
from models import LOANS_CATEGORY_NAME, Category, CategoryType
from seeds import DEFAULT_CATEGORIES, ensure_loans_category, ensure_system_category


def loans_category_count(store: Store) -> int:
    with store.session() as session:
        return session.execute(
            select(func.count(Category.id)).where(Category.name == LOANS_CATEGORY_NAME)
        ).scalar_one()


def test_fresh_store_migrates_to_head() -> None:
    store = Store("sqlite+pysqlite:///:memory:")
    store.open()
    try:
        store.migrate()

        assert store.engine is not None
        assert store.schema_version() == "0003"
    finally:
        store.close()


def test_migrate_seeds_default_categories(store) -> None:
    with store.session() as session:
        names = {c.name for c in session.scalars(select(Category)).all()}
    assert names == {name for name, _ in DEFAULT_CATEGORIES}
    assert loans_category_count(store) == 1


def test_seeding_returns_id_of_inserted_category(store) -> None:
    with store.engine.begin() as conn:
        new_id = ensure_system_category(conn, "Pets", "expense")
        again = ensure_system_category(conn, "pets", "expense")

    with store.session() as session:
        category = session.get(Category, new_id)
    assert category.name == "Pets"
    assert category.applies_to == CategoryType.expense
    assert again == new_id


def test_loans_category_is_system_wide(store) -> None:
    with store.session() as session:
        category = session.scalar(
            select(Category).where(Category.name == LOANS_CATEGORY_NAME)
        )
    assert category.applies_to == CategoryType.both
    assert category.user_created is False


def test_ensure_loans_category_twice_leaves_one_row(store) -> None:
    with store.engine.begin() as conn:
        first = ensure_loans_category(conn)
        second = ensure_loans_category(conn)

    assert first == second
    assert loans_category_count(store) == 1


def test_ensure_loans_category_recreates_missing_row(store) -> None:
    with store.engine.begin() as conn:
        conn.execute(delete(Category).where(Category.name == LOANS_CATEGORY_NAME))
    assert loans_category_count(store) == 0

    with store.engine.begin() as conn:
        category_id = ensure_loans_category(conn)

    assert loans_category_count(store) == 1
    with store.session() as session:
        assert session.get(Category, category_id).name == LOANS_CATEGORY_NAME


def test_migrate_is_idempotent(store) -> None:
    store.migrate()

    assert store.schema_version() == "0003"
    assert loans_category_count(store) == 1


def test_rerun_after_lost_version_marker_does_not_duplicate(store) -> None:
    with store.session() as session:
        before = session.execute(select(func.count(Category.id))).scalar_one()

    with store.engine.begin() as conn:
        conn.execute(text("DELETE FROM alembic_version"))
    store.migrate()

    with store.session() as session:
        after = session.execute(select(func.count(Category.id))).scalar_one()
    assert store.schema_version() == "0003"
    assert after == before
    assert loans_category_count(store) == 1


def test_migration_failure_is_fatal(tmp_path) -> None:
    store = Store(f"sqlite:///{tmp_path / 'missing' / 'ledger.db'}")
    store.open()

    with pytest.raises(MigrationError):
        store.migrate()
    assert store.engine is None


def test_store_context_manager_opens_and_closes() -> None:
    with Store("sqlite+pysqlite:///:memory:") as store:
        assert store.schema_version() == "0003"
        with store.session_scope() as session:
            assert session.scalar(select(func.count(Category.id))) > 0
    assert store.engine is None
