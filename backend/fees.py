from typing import Iterable, Tuple


def compute_fee_status(amount: float, amount_paid: float) -> Tuple[float, str]:
    """Return ``(balance, status)`` for a fee.

    Anything paid but short of the amount is ``partial``; nothing paid is
    ``unpaid`` even when the amount itself is zero.
    """
    balance = amount - amount_paid
    if amount_paid <= 0:
        status = "unpaid"
    elif amount_paid < amount:
        status = "partial"
    elif balance <= 0:
        status = "paid"
    else:
        status = "unpaid"
    return balance, status


def apply_fee_status(doc: dict) -> dict:
    doc["balance"], doc["status"] = compute_fee_status(doc["amount"], doc["amountPaid"])
    return doc


def summarize_fees(fees: Iterable[dict]) -> dict:
    total_amount = 0
    total_paid = 0
    counts = {"paid": 0, "partial": 0, "unpaid": 0}
    for fee in fees:
        total_amount += fee.get("amount", 0)
        total_paid += fee.get("amountPaid", 0)
        status = fee.get("status")
        if status in counts:
            counts[status] += 1
    return {
        "totalAmount": total_amount,
        "totalPaid": total_paid,
        "totalPending": total_amount - total_paid,
        "paidCount": counts["paid"],
        "partialCount": counts["partial"],
        "unpaidCount": counts["unpaid"],
    }
