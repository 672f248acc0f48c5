# -*- coding: utf-8 -*-
"""
academic_tables.py

Purpose
-------
Write the pronoun-skew display tables as complete LaTeX table environments so
the report can \\input them directly.

Creates
-------
- One .tex file (\\begin{table} ... \\end{table}) per call, usually under
  outputs/tables/.
"""

import os
import time
from typing import Optional, Sequence

import pandas as pd


def _display_frame(table: pd.DataFrame, pronouns: Sequence[str]) -> pd.DataFrame:
    """Rename skew columns to report headings and index by the following word."""
    first, second = pronouns
    renames = {
        'word2': 'Word',
        f'{first}_count': f"After ``{first}''",
        f'{second}_count': f"After ``{second}''",
        'total': 'Total',
        f'{first}_share': f'Share ({first})',
        f'{second}_share': f'Share ({second})',
        'log_ratio': 'log2 ratio',
        'direction': 'Leans',
    }
    keep = [c for c in renames if c in table.columns]
    return table[keep].rename(columns=renames).set_index('Word')


def skew_table_to_latex(
    table: pd.DataFrame,
    save_path: str,
    caption: str,
    label: str,
    pronouns: Sequence[str] = ("he", "she"),
    note: Optional[str] = None,
    precision: int = 3,
) -> Optional[str]:
    """
    Write a scored pronoun-skew table to a .tex file.

    Parameters
    ----------
    table : pd.DataFrame
        Output of `score_skew` / `top_skewed` (extra columns are ignored).
    save_path : str
        Full path of the .tex file.
    caption, label : str
        LaTeX caption and \\label (e.g. 'tab:pronoun-skew').
    pronouns : (first, second)
        Used for the column headings.
    note : str, optional
        Placed under the table in a tablenotes block.
    precision : int
        Decimal places for the ratio column; shares use precision + 2.

    Returns
    -------
    str | None
        The path written, or None if the file could not be written.

    Raises
    ------
    TypeError
        If `table` is not a pandas DataFrame.
    """
    t0 = time.perf_counter()
    if not isinstance(table, pd.DataFrame):
        raise TypeError("Input 'table' must be a pandas DataFrame.")

    print(f"Generating LaTeX table for: {label}...")
    shown = _display_frame(table, pronouns)
    formatters = {}
    for col in shown.columns:
        if col.startswith('Share'):
            formatters[col] = lambda v, p=precision + 2: f"{v:.{p}f}"
        elif col == 'log2 ratio':
            formatters[col] = lambda v, p=precision: f"{v:+.{p}f}"
        elif pd.api.types.is_integer_dtype(shown[col]):
            formatters[col] = lambda v: f"{int(v):,}"

    body = shown.to_latex(
        index=True,
        header=True,
        formatters=formatters,
        column_format="l" + "r" * len(shown.columns),
        escape=True,
        na_rep='-',
    )

    lines = [
        "\\begin{table}[htbp]",
        "\\centering",
        f"\\caption{{{caption}}}",
        f"\\label{{{label}}}",
        body,
    ]
    if note:
        lines += ["\\begin{tablenotes}[flushleft]", f"\\item \\small{{{note}}}", "\\end{tablenotes}"]
    lines.append("\\end{table}")

    try:
        out_dir = os.path.dirname(save_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(save_path, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines))
        print(f"✓ Artefact saved: {os.path.abspath(save_path)}")
        return save_path
    except OSError as e:
        print(f"✗ ERROR: Could not write LaTeX table to {save_path}. Reason: {e}")
        return None
    finally:
        print(f"[TIME] academic_tables.skew_table_to_latex: {time.perf_counter() - t0:.2f}s")
