import pytest

from expense_tracker.core.exceptions import ConflictError
from expense_tracker.models.category import CategoryCreate, CategoryUpdate
from expense_tracker.services import categories as category_service


def test_global_and_user_categories(db, make_user):
    user = make_user()
    other = make_user()
    category_service.create_category(db, CategoryCreate(name="Food", color="#ff0000"))
    category_service.create_category(db, CategoryCreate(name="Hobbies", color="#00ff00", user_id=user.id))
    category_service.create_category(db, CategoryCreate(name="Pets", color="#0000ff", user_id=other.id))

    assert [c.name for c in category_service.get_global_categories(db)] == ["Food"]
    assert sorted(c.name for c in category_service.get_categories(db, user.id)) == ["Food", "Hobbies"]


def test_update_category(db, make_category):
    food = make_category("Food")
    updated = category_service.update_category(db, food.id, CategoryUpdate(name="Groceries", color=None))
    assert updated.name == "Groceries"
    assert updated.color == "#336699"


def test_delete_category_in_use(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    spent = make_category("Spent")
    budgeted = make_category("Budgeted")
    unused = make_category("Unused")
    make_expense(user.id, 10, category_id=spent.id)
    make_budget(user.id, 100, category_id=budgeted.id)

    with pytest.raises(ConflictError, match="existing expenses"):
        category_service.delete_category(db, spent.id)
    with pytest.raises(ConflictError, match="existing budgets"):
        category_service.delete_category(db, budgeted.id)

    assert category_service.delete_category(db, unused.id).success is True
    assert category_service.delete_category(db, unused.id).success is False


def test_category_names_lookup(db, make_category):
    food = make_category("Food")
    assert category_service.category_names(db, [food.id, None, 999]) == {food.id: "Food"}
    assert category_service.category_names(db, []) == {}
