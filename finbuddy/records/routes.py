"""
RecordAggregator HTTP routes.

  Expenses:  GET/POST /api/expenses, DELETE /api/expenses/{id},
             GET /api/expenses/summary, GET /api/expenses/breakdown
  Budgets:   GET/POST /api/budgets, DELETE /api/budgets/{id},
             GET /api/budgets/summary, GET /api/budgets/alerts
  Goals:     GET/POST /api/goals, DELETE /api/goals/{id}, GET /api/goals/plans
  Documents: GET/POST /api/documents, GET/DELETE /api/documents/{id}

POST on a form endpoint answers 201 with the stored record, or 204 with no
body when a required field is missing (nothing was stored).
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from finbuddy.calculator.schemas import (
    BudgetLine,
    BudgetSummary,
    ChartPoint,
    ExpenseSummary,
    GoalPlan,
)
from finbuddy.dependencies import get_records
from finbuddy.records.aggregator import RecordAggregator
from finbuddy.records.schemas import (
    BudgetForm,
    BudgetRecord,
    DocumentRecord,
    ExpenseForm,
    ExpenseRecord,
    GoalForm,
    InvestmentGoal,
)

router = APIRouter(prefix="/api", tags=["records"])
logger = logging.getLogger(__name__)

UPLOAD_CHUNK_BYTES = 64 * 1024


def _no_content() -> Response:
    return Response(status_code=204)


def _deleted_or_404(removed: bool, kind: str, record_id: str) -> Response:
    if not removed:
        raise HTTPException(status_code=404, detail=f"{kind} {record_id} not found")
    return _no_content()


async def _measure_upload(file: UploadFile, limit: int) -> int:
    """Count bytes chunk by chunk, stopping as soon as the count passes limit."""
    size = 0
    while size <= limit:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        size += len(chunk)
    return size


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

@router.get("/expenses", response_model=list[ExpenseRecord])
async def list_expenses(records: RecordAggregator = Depends(get_records)) -> list[ExpenseRecord]:
    # Newest first, as the transaction list shows them
    return records.expenses.list(newest_first=True)


@router.post("/expenses", response_model=ExpenseRecord, status_code=201)
async def add_expense(
    form: ExpenseForm,
    records: RecordAggregator = Depends(get_records),
):
    created = records.add_expense_from_form(form)
    return created if created is not None else _no_content()


@router.delete("/expenses/{expense_id}", status_code=204)
async def delete_expense(expense_id: str, records: RecordAggregator = Depends(get_records)):
    return _deleted_or_404(records.expenses.remove(expense_id), "Expense", expense_id)


@router.get("/expenses/summary", response_model=ExpenseSummary)
async def expense_summary(records: RecordAggregator = Depends(get_records)) -> ExpenseSummary:
    return records.expense_summary()


@router.get("/expenses/breakdown", response_model=list[ChartPoint])
async def expense_breakdown(records: RecordAggregator = Depends(get_records)) -> list[ChartPoint]:
    return records.expense_breakdown()


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

@router.get("/budgets", response_model=list[BudgetLine])
async def list_budgets(records: RecordAggregator = Depends(get_records)) -> list[BudgetLine]:
    return records.budget_lines()


@router.post("/budgets", response_model=BudgetRecord, status_code=201)
async def add_budget(
    form: BudgetForm,
    records: RecordAggregator = Depends(get_records),
):
    created = records.add_budget_from_form(form)
    return created if created is not None else _no_content()


@router.delete("/budgets/{budget_id}", status_code=204)
async def delete_budget(budget_id: str, records: RecordAggregator = Depends(get_records)):
    return _deleted_or_404(records.budgets.remove(budget_id), "Budget", budget_id)


@router.get("/budgets/summary", response_model=BudgetSummary)
async def budget_summary(records: RecordAggregator = Depends(get_records)) -> BudgetSummary:
    return records.budget_summary()


@router.get("/budgets/alerts", response_model=list[BudgetLine])
async def budget_alerts(records: RecordAggregator = Depends(get_records)) -> list[BudgetLine]:
    return records.budget_alerts()


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

@router.get("/goals", response_model=list[InvestmentGoal])
async def list_goals(records: RecordAggregator = Depends(get_records)) -> list[InvestmentGoal]:
    return records.goals.list()


@router.post("/goals", response_model=InvestmentGoal, status_code=201)
async def add_goal(
    form: GoalForm,
    records: RecordAggregator = Depends(get_records),
):
    created = records.add_goal_from_form(form)
    return created if created is not None else _no_content()


@router.delete("/goals/{goal_id}", status_code=204)
async def delete_goal(goal_id: str, records: RecordAggregator = Depends(get_records)):
    return _deleted_or_404(records.goals.remove(goal_id), "Goal", goal_id)


@router.get("/goals/plans", response_model=list[GoalPlan])
async def goal_plans(records: RecordAggregator = Depends(get_records)) -> list[GoalPlan]:
    return records.goal_plans()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@router.get("/documents", response_model=list[DocumentRecord])
async def list_documents(records: RecordAggregator = Depends(get_records)) -> list[DocumentRecord]:
    return records.documents.list(newest_first=True)


@router.post("/documents", response_model=DocumentRecord, status_code=202)
async def upload_document(
    file: UploadFile = File(...),
    records: RecordAggregator = Depends(get_records),
) -> DocumentRecord:
    """
    Accept a file and queue it for simulated processing.
    Contents are never kept; only the size is recorded.
    """
    size = file.size
    if size is None:
        size = await _measure_upload(file, records.processor.max_size_bytes)
    return records.upload_document(
        name=file.filename or "upload",
        size_bytes=size,
        content_type=file.content_type,
    )


@router.get("/documents/{doc_id}", response_model=DocumentRecord)
async def get_document(doc_id: str, records: RecordAggregator = Depends(get_records)) -> DocumentRecord:
    record = records.documents.get(doc_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Document {doc_id} not found")
    return record


@router.delete("/documents/{doc_id}", status_code=204)
async def delete_document(doc_id: str, records: RecordAggregator = Depends(get_records)):
    return _deleted_or_404(records.delete_document(doc_id), "Document", doc_id)
