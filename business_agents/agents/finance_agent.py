"""Finance Agent"""

import json

from ..llm import QueryComplexity
from .base_agent import BaseAgent, pick


def _categorize_expense(task):
    return f"""
Categorize this business expense:
- Amount: ${pick(task, "amount")}
- Description: {pick(task, "description", "content")}
- Date: {pick(task, "date")}

Choose from: Office Supplies, Software/SaaS, Marketing/Advertising,
Travel/Transportation, Meals/Entertainment, Equipment/Hardware, Other.
"""


def _generate_report(task):
    return f"""
Generate a {pick(task, "reportType", default="summary")} financial report for the {pick(task, "period", default="current")} period.

Transaction data: {json.dumps(task.get("transactions", []), indent=2, default=str)}

Please provide:
1. Executive Summary (2-3 sentences)
2. Key Financial Metrics
3. Notable Trends or Patterns
4. Recommendations for improvement
5. Action Items
"""


def _analyze_transaction(task):
    return f"""
Analyze this business transaction for potential issues or insights:

Amount: ${pick(task, "amount")}
Description: {pick(task, "description", "content")}
Date: {pick(task, "date")}

Look for unusual patterns, tax implications, cost optimization suggestions
and compliance considerations.
"""


def _budget_forecast(task):
    return f"""
Create a budget forecast based on this historical data:

Transactions: {json.dumps(task.get("transactions", []), indent=2, default=str)}
Period: {pick(task, "period", default="next quarter")}

Provide revenue projections, expense forecasts by category, cash flow
predictions and risk factors to consider.
"""


def _generate_invoice(task):
    invoice = task.get("invoiceData") or {}
    items = invoice.get("items", [])
    total = sum(float(item.get("amount", 0)) * float(item.get("quantity", 1)) for item in items)
    return f"""
Generate a professional invoice with this information:

Client: {pick(invoice, "clientName")}
Items: {json.dumps(items, indent=2, default=str)}
Due Date: {pick(invoice, "dueDate")}
Total: ${total:.2f}

Include a header, client details, itemized lines and payment terms.
"""


class FinanceAgent(BaseAgent):
    """Expense categorization, reporting, forecasting and invoicing"""

    agent_type = "finance"
    system_prompt = "You are a meticulous small-business financial analyst."
    PROMPTS = {
        "categorize_expense": (QueryComplexity.SIMPLE, _categorize_expense),
        "generate_report": (QueryComplexity.COMPLEX, _generate_report),
        "analyze_transaction": (QueryComplexity.MEDIUM, _analyze_transaction),
        "budget_forecast": (QueryComplexity.COMPLEX, _budget_forecast),
        "generate_invoice": (QueryComplexity.MEDIUM, _generate_invoice),
    }
