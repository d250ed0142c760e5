"""
PNG charts for a funnel run: stage funnel, pending-by-stage, screening
outcomes, top vendors/technologies and the experience distribution.
"""

from __future__ import annotations

import os
import textwrap

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.ticker import FuncFormatter

from funnel_analytics import FunnelResult
from funnel_report import STAGE_LABELS
from funnel_stages import PENDING_STAGES, PIPELINE_STAGES
from funnel_values import EXPERIENCE_BRACKETS


def format_count(value) -> str:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return "0"
    return f"{int(round(v)):,}"


def wrap_text(text: str, width: int) -> str:
    return "\n".join(textwrap.wrap(text, width=width))


def add_footer(fig, note: str | None) -> int:
    if not note:
        return 0
    wrapped = wrap_text(note, width=110)
    fig.text(0.01, 0.01, wrapped, ha="left", va="bottom", fontsize=9, color="0.35")
    return wrapped.count("\n") + 1


def bar_chart(
    series: pd.Series,
    title: str,
    xlabel: str,
    ylabel: str,
    outpath: str,
    topn: int | None = None,
    keep_order: bool = False,
    show_pct: bool = False,
    note: str | None = None,
) -> str | None:
    if series is None or len(series) == 0 or float(series.sum()) == 0:
        return None

    data = series.copy()
    if topn is not None:
        data = data.sort_values(ascending=False).head(topn)

    fig, ax = plt.subplots(figsize=(14, 7))
    # barh draws bottom-up; reverse so the first item sits on top
    plot_data = data.iloc[::-1] if keep_order else data.sort_values(ascending=True)
    plot_data.plot(kind="barh", ax=ax)

    ax.set_title(wrap_text(title, width=55), fontsize=14, pad=20)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)

    max_val = float(plot_data.max())
    if max_val > 0:
        ax.set_xlim(0, max_val * 1.15)
    ax.xaxis.set_major_formatter(FuncFormatter(lambda v, _pos: format_count(v)))

    total = float(plot_data.sum())
    for bar in ax.patches:
        value = bar.get_width()
        if value == 0:
            continue
        label = format_count(value)
        if show_pct and total:
            label = f"{label} ({value / total * 100:.1f}%)"
        ax.text(
            value + max_val * 0.01,
            bar.get_y() + bar.get_height() / 2,
            label,
            va="center",
            ha="left",
            fontsize=9,
        )

    footer_lines = add_footer(fig, note)
    bottom = 0.12 + max(0, footer_lines - 1) * 0.03
    plt.subplots_adjust(top=0.88, left=0.25, bottom=min(bottom, 0.25))
    plt.savefig(outpath, dpi=200)
    plt.close(fig)
    return outpath


def render_charts(result: FunnelResult, outdir: str, topn: int = 15) -> list[str]:
    os.makedirs(outdir, exist_ok=True)
    c = result.counters
    written: list[str] = []

    funnel = pd.Series(
        {
            "Profiles": c["total_profiles"],
            "Screened": c["interviews_scheduled"],
            "Screening Selected": c["screening_selected"],
            **{f"{STAGE_LABELS[s]} Reached": c[f"{s}_reached"] for s in PIPELINE_STAGES},
            "Offers": c["total_offers"],
            "Onboarded": c["total_onboarded"],
        }
    )
    written.append(
        bar_chart(
            funnel,
            "Recruitment Funnel — Candidates Reaching Each Stage",
            "Candidates",
            "Stage",
            os.path.join(outdir, "funnel_stages.png"),
            keep_order=True,
            note="Stage counts include only screening-selected candidates with a value in the stage column.",
        )
    )

    pending = pd.Series({STAGE_LABELS[s]: c[f"{s}_pending"] for s in PENDING_STAGES})
    written.append(
        bar_chart(
            pending,
            "Pipeline — Candidates Pending at Each Stage",
            "Candidates",
            "Stage",
            os.path.join(outdir, "funnel_pending.png"),
            keep_order=True,
            show_pct=True,
        )
    )

    screening = pd.Series(
        {
            "Pending": c["screening_pending"],
            "Feedback Pending": c["screening_feedback_pending"],
            "Selected": c["screening_selected"],
            "Rejected": c["screening_rejected"],
            "Hold": c["screening_hold"],
            "No-show": c["screening_no_show"],
        }
    )
    written.append(
        bar_chart(
            screening,
            "Screening Outcomes",
            "Candidates",
            "Outcome",
            os.path.join(outdir, "funnel_screening.png"),
            keep_order=True,
            show_pct=True,
        )
    )

    vendors = pd.Series({k: v["profiles"] for k, v in result.vendor_summary.items()}, dtype="int64")
    written.append(
        bar_chart(
            vendors,
            f"Top Vendors — Profiles Submitted (Top {topn})",
            "Profiles",
            "Vendor",
            os.path.join(outdir, "funnel_vendors.png"),
            topn=topn,
        )
    )

    techs = pd.Series({k: v["profiles"] for k, v in result.tech_summary.items()}, dtype="int64")
    written.append(
        bar_chart(
            techs,
            f"Top Technologies — Profiles (Top {topn})",
            "Profiles",
            "Technology",
            os.path.join(outdir, "funnel_technologies.png"),
            topn=topn,
        )
    )

    experience = pd.Series({b: result.exp_summary.get(b, 0) for b in EXPERIENCE_BRACKETS})
    written.append(
        bar_chart(
            experience,
            "Experience Distribution — Years of Experience",
            "Profiles",
            "Experience",
            os.path.join(outdir, "funnel_experience.png"),
            keep_order=True,
            show_pct=True,
            note="Unparseable or empty experience counts as 0 years.",
        )
    )

    return [p for p in written if p]
