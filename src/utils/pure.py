from decimal import Decimal
from typing import List, Literal, Optional

from db.models import CartLine


def format_price(amount: Decimal) -> str:
    return f"${amount:.2f}"


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(str(c) for c in row) + " |" for row in rows]
    return "\n".join(lines)


def order_summary_markdown(lines: List[CartLine], total: Decimal) -> str:
    """Order summary shown in the checkout dialog."""
    rows = [
        [
            line.medicine.name,
            format_price(line.medicine.price),
            line.quantity,
            format_price(line.subtotal),
        ]
        for line in lines
    ]
    md = "### Order Summary\n\n"
    md += generate_markdown_table(
        ["Medicine", "Unit Price", "Quantity", "Subtotal"], rows, ["l", "r", "c", "r"]
    )
    md += f"\n\n**Total:** {format_price(total)}"
    return md
