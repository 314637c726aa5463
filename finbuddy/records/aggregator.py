"""
aggregator.py — RecordAggregator: the in-memory state behind the dashboard views.

Owns four collections (expenses, budgets, goals, documents) and the document
processor, and derives the summary figures the views display.

Form operations take raw free-text forms. A missing or invalid required field
makes the operation a no-op: nothing is stored and None is returned, so the
view can leave its form open.
"""
from __future__ import annotations

import logging
import random
from datetime import date, datetime, timezone
from typing import Optional

from finbuddy.calculator import rollups
from finbuddy.calculator.parsing import parse_amount, parse_count
from finbuddy.calculator.schemas import (
    BudgetLine,
    BudgetSummary,
    ChartPoint,
    ExpenseSummary,
    GoalPlan,
)
from finbuddy.calculator.sip import plan_goal
from finbuddy.clock import Clock
from finbuddy.config import settings
from finbuddy.records.collection import RecordCollection
from finbuddy.records.documents import DocumentProcessor
from finbuddy.records.schemas import (
    BankStatementExtract,
    BillExtract,
    BudgetForm,
    BudgetRecord,
    Category,
    DocumentRecord,
    DocumentStatus,
    ExpenseForm,
    ExpenseRecord,
    GoalForm,
    InvestmentGoal,
    MediaKind,
    RiskProfile,
    TransactionKind,
)

logger = logging.getLogger(__name__)


def goal_from_form(form: GoalForm) -> Optional[InvestmentGoal]:
    """
    Build an unsaved goal from the free-text goal form.
    None when name, target or timeframe is missing or not positive.
    """
    name = (form.name or "").strip()
    target = parse_amount(form.target_amount)
    months = parse_count(form.timeframe)
    if not name or target <= 0 or months <= 0:
        logger.debug("Goal form rejected: missing name, target or timeframe")
        return None
    return InvestmentGoal(
        name=name,
        target_amount=target,
        current_amount=parse_amount(form.current_amount),
        timeframe_months=months,
        risk_profile=form.risk_profile,
    )


class RecordAggregator:
    def __init__(
        self,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        document_delay_seconds: float = settings.document_processing_delay_seconds,
        max_upload_size_bytes: int = settings.max_upload_size_bytes,
    ) -> None:
        self.expenses: RecordCollection[ExpenseRecord] = RecordCollection("exp")
        self.budgets: RecordCollection[BudgetRecord] = RecordCollection("bud")
        self.goals: RecordCollection[InvestmentGoal] = RecordCollection("goal")
        self.documents: RecordCollection[DocumentRecord] = RecordCollection("doc")
        self.processor = DocumentProcessor(
            self.documents,
            clock=clock,
            rng=rng,
            delay_seconds=document_delay_seconds,
            max_size_bytes=max_upload_size_bytes,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop all records and pending document timers."""
        self.processor.cancel_all()
        for collection in (self.expenses, self.budgets, self.goals, self.documents):
            collection.clear()
        logger.info("RecordAggregator reset")

    # ------------------------------------------------------------------
    # Form operations (validation failure → None, no mutation)
    # ------------------------------------------------------------------

    def add_expense_from_form(self, form: ExpenseForm) -> Optional[ExpenseRecord]:
        amount = parse_amount(form.amount)
        category = Category.from_text(form.category)
        description = (form.description or "").strip()
        if amount <= 0 or category is None or not description:
            logger.debug("Expense form rejected: missing amount, category or description")
            return None

        entry_date = date.today()
        date_text = (form.date or "").strip()
        if date_text:
            try:
                entry_date = date.fromisoformat(date_text)
            except ValueError:
                logger.debug("Expense form rejected: unparseable date")
                return None

        return self.expenses.add(
            ExpenseRecord(
                amount=amount,
                category=category,
                description=description,
                date=entry_date,
                kind=form.kind,
            )
        )

    def add_budget_from_form(self, form: BudgetForm) -> Optional[BudgetRecord]:
        category = Category.from_text(form.category)
        budgeted = parse_amount(form.budgeted)
        if category is None or budgeted <= 0:
            logger.debug("Budget form rejected: missing category or amount")
            return None
        return self.budgets.add(BudgetRecord(category=category, budgeted_amount=budgeted))

    def add_goal_from_form(self, form: GoalForm) -> Optional[InvestmentGoal]:
        goal = goal_from_form(form)
        if goal is None:
            return None
        return self.goals.add(goal)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def upload_document(
        self,
        name: str,
        size_bytes: int,
        content_type: Optional[str] = None,
    ) -> DocumentRecord:
        return self.processor.upload(name, size_bytes, content_type)

    def delete_document(self, doc_id: str) -> bool:
        return self.processor.delete(doc_id)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def expense_summary(self) -> ExpenseSummary:
        return rollups.aggregate_expenses(self.expenses.list())

    def expense_breakdown(self) -> list[ChartPoint]:
        return rollups.expense_breakdown(self.expenses.list())

    def savings_rate(self) -> float:
        return rollups.savings_rate(self.expense_summary())

    def budget_summary(self) -> BudgetSummary:
        return rollups.aggregate_budgets(self.budgets.list())

    def budget_lines(self) -> list[BudgetLine]:
        return [rollups.budget_line(record) for record in self.budgets.list()]

    def budget_alerts(self) -> list[BudgetLine]:
        return rollups.budget_alerts(self.budgets.list())

    def goal_plans(self) -> list[GoalPlan]:
        return [plan_goal(goal) for goal in self.goals.list()]

    # ------------------------------------------------------------------
    # Demo data
    # ------------------------------------------------------------------

    def seed_demo_data(self) -> None:
        """Load the dashboard's sample records. Existing records are kept."""
        for amount, category, description, day, kind in (
            (850, Category.food, "Lunch at restaurant", date(2024, 1, 15), TransactionKind.expense),
            (2500, Category.transport, "Uber rides", date(2024, 1, 14), TransactionKind.expense),
            (45000, Category.salary, "Monthly salary", date(2024, 1, 1), TransactionKind.income),
            (1200, Category.entertainment, "Movie tickets", date(2024, 1, 13), TransactionKind.expense),
            (3200, Category.bills, "Electricity bill", date(2024, 1, 12), TransactionKind.expense),
        ):
            self.expenses.add(ExpenseRecord(
                amount=amount, category=category, description=description, date=day, kind=kind,
            ))

        for category, budgeted, spent in (
            (Category.food, 10000, 8500),
            (Category.transport, 5000, 4200),
            (Category.entertainment, 4000, 3100),
            (Category.bills, 15000, 12000),
            (Category.shopping, 6000, 5600),
        ):
            self.budgets.add(BudgetRecord(
                category=category, budgeted_amount=budgeted, spent_amount=spent,
            ))

        for name, target, current, months, risk in (
            ("Emergency Fund", 300000, 150000, 12, RiskProfile.low),
            ("Home Down Payment", 2000000, 400000, 60, RiskProfile.medium),
            ("Retirement Planning", 10000000, 800000, 300, RiskProfile.high),
        ):
            self.goals.add(InvestmentGoal(
                name=name, target_amount=target, current_amount=current,
                timeframe_months=months, risk_profile=risk,
            ))

        self.documents.add(DocumentRecord(
            name="bank_statement_jan2024.pdf",
            media_kind=MediaKind.pdf,
            size_bytes=2_048_000,
            uploaded_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
            status=DocumentStatus.completed,
            extracted_data=BankStatementExtract(
                transactions=45,
                total_income=51000,
                total_expenses=37500,
                categories=["Salary", "Food", "Transport", "Bills"],
            ),
        ))
        self.documents.add(DocumentRecord(
            name="utility_bill_dec2023.jpg",
            media_kind=MediaKind.image,
            size_bytes=1_024_000,
            uploaded_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
            status=DocumentStatus.completed,
            extracted_data=BillExtract(
                amount=3200,
                due_date=date(2024, 2, 15),
                category="Electricity",
                vendor="State Electricity Board",
            ),
        ))
        logger.info(
            "Seeded demo data expenses=%d budgets=%d goals=%d documents=%d",
            len(self.expenses), len(self.budgets), len(self.goals), len(self.documents),
        )
