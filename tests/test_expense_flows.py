from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from conftest import FIXED_NOW

from backoffice.domain.entities.expense import Expense
from backoffice.domain.entities.session import RecordStep


def _walk_to_date_option(chat, amount="120.50"):
    chat.press("expense_add")
    assert chat.last.text == "Enter expense category:"
    chat.type("Fuel")
    assert chat.last.text == "Enter expense description:"
    chat.type("Car refill")
    assert chat.last.text == "Enter expense amount:"
    chat.type(amount)


def test_add_expense_dated_today(chat, stores):
    _walk_to_date_option(chat)
    assert chat.last.text == "Choose date option:"
    assert chat.last.tokens == ["expense_date_today", "expense_date_custom"]
    assert chat.session.step == RecordStep.DATE_OPTION

    chat.press("expense_date_today")

    assert chat.last.text == "Expense added successfully!"
    expense = stores.expenses.find()[0]
    assert expense.category == "Fuel"
    assert expense.description == "Car refill"
    assert expense.amount == Decimal("120.50")
    assert expense.date == FIXED_NOW
    assert expense.expense_id


def test_add_expense_with_custom_date(chat, stores):
    _walk_to_date_option(chat)
    chat.press("expense_date_custom")
    assert chat.last.text == "Enter custom date (YYYY-MM-DD):"
    chat.type("2025-03-01")

    assert stores.expenses.find()[0].date == datetime(2025, 3, 1)


def test_add_expense_with_bad_amount(chat, stores):
    _walk_to_date_option(chat, amount="abc")

    assert chat.last.text == "Invalid amount: abc. Please use /start to begin again."
    assert stores.expenses.find() == []


def test_add_expense_with_bad_custom_date(chat, stores):
    _walk_to_date_option(chat)
    chat.press("expense_date_custom")
    chat.type("01-03-2025")

    assert chat.last.text == "Invalid date: 01-03-2025. Please use /start to begin again."
    assert stores.expenses.find() == []


def test_view_expenses(chat, stores):
    stores.expenses.insert(
        Expense(category="Fuel", description="Car", amount=Decimal("120.50"), date=FIXED_NOW, expense_id="e1")
    )
    chat.press("expense_view")

    assert chat.last.text == "Expenses:\nFuel: 120.5 AED on 14-03-2025 - Car"


def test_view_expenses_when_empty(chat):
    chat.press("expense_view")
    assert chat.last.text == "No expenses found."


def test_delete_picker_shows_ten_most_recent(chat, stores):
    base = datetime(2025, 1, 1)
    for i in range(12):
        stores.expenses.insert(
            Expense(
                category=f"C{i}",
                description="d",
                amount=Decimal(i + 1),
                expense_id=f"e{i}",
                created_at=base + timedelta(hours=i),
            )
        )
    chat.press("expense_delete")

    tokens = chat.last.tokens
    assert len(tokens) == 10
    assert tokens[0] == "delete_expense_e11"
    assert chat.last.choices[0][0].label == "C11 - 12 AED"


def test_delete_expense(chat, stores):
    stores.expenses.insert(Expense(category="Fuel", description="Car", amount=Decimal("50"), expense_id="e1"))
    chat.press("expense_delete")
    chat.press("delete_expense_e1")
    assert chat.last.text == "Are you sure you want to delete this expense?"
    chat.press("confirm_delete_expense")

    assert chat.last.text == "Expense deleted successfully!"
    assert stores.expenses.find() == []


def test_update_expense_amount(chat, stores):
    stores.expenses.insert(Expense(category="Fuel", description="Car", amount=Decimal("50"), expense_id="e1"))
    chat.press("expense_update")
    chat.press("select_update_expense_e1")
    assert chat.last.tokens == [
        "update_expense_field_category",
        "update_expense_field_description",
        "update_expense_field_amount",
        "update_expense_field_date",
    ]
    chat.press("update_expense_field_amount")
    chat.type("99")

    assert stores.expenses.find_one({"expense_id": "e1"}).amount == Decimal("99")
    assert chat.last.text == "Expense updated successfully!"


def test_update_expense_date(chat, stores):
    stores.expenses.insert(Expense(category="Fuel", description="Car", amount=Decimal("50"), expense_id="e1"))
    chat.press("expense_update")
    chat.press("select_update_expense_e1")
    chat.press("update_expense_field_date")
    chat.type("2025-02-01")

    assert stores.expenses.find_one({"expense_id": "e1"}).date == datetime(2025, 2, 1)


def test_update_expense_of_vanished_record(chat, stores):
    stores.expenses.insert(Expense(category="Fuel", description="Car", amount=Decimal("50"), expense_id="e1"))
    chat.press("expense_update")
    chat.press("select_update_expense_e1")
    chat.press("update_expense_field_category")
    stores.expenses.delete_one({"expense_id": "e1"})
    chat.type("Rent")

    assert chat.last.text == "Expense not found."
