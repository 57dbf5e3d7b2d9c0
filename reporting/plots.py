"""
Plotting utilities for planning logs.

Purpose: Generate matplotlib charts from the per-request CSV logs.

Inputs:
    - CSV log files from data/logs/
    - Output directory (docs/img/)

Outputs:
    - outcomes.png: request count per outcome, per room
    - cost.png: expansions and planning time against route length

Params:
    input_pattern: str - Glob pattern for CSV files
    output_dir: str - Output directory for plots
"""

import argparse
import glob
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd


# Columns the charts read; other logger columns are optional
REQUIRED_COLUMNS = ["room", "outcome", "path_len", "expansions", "cpu_ms"]


def load_logs(input_pattern):
    """
    Load planning logs matching a glob pattern into one DataFrame.

    Files that cannot be parsed or lack the charted columns are reported and
    skipped. A `session` column records which file each request came from.

    Returns:
        DataFrame, or None when nothing usable was found
    """
    frames = []
    for path in sorted(glob.glob(input_pattern)):
        try:
            frame = pd.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            print(f"Skipping {path}: {e}")
            continue
        missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
        if missing:
            print(f"Skipping {path}: missing columns {', '.join(missing)}")
            continue
        frames.append(frame.assign(session=os.path.splitext(os.path.basename(path))[0]))

    if not frames:
        print(f"No planning logs found matching {input_pattern}")
        return None
    return pd.concat(frames, ignore_index=True)


def plot_outcomes(df, output_dir):
    """Bar chart of request outcomes per room."""
    os.makedirs(output_dir, exist_ok=True)

    counts = df.groupby(["room", "outcome"]).size().unstack(fill_value=0)

    fig, ax = plt.subplots(figsize=(10, 6))
    counts.plot(kind="bar", stacked=True, ax=ax)
    ax.set_xlabel("Room")
    ax.set_ylabel("Requests")
    ax.set_title("Path Request Outcomes")
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    out_path = os.path.join(output_dir, "outcomes.png")
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"Saved outcome plot to {out_path}")
    plt.close(fig)
    return out_path


def plot_cost(df, output_dir):
    """Scatter of search cost against route length for successful requests."""
    os.makedirs(output_dir, exist_ok=True)
    found = df[df["outcome"] == "success"]

    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    for room in found["room"].unique():
        room_df = found[found["room"] == room]
        axes[0].scatter(room_df["path_len"], room_df["expansions"], label=room, alpha=0.6)
        axes[1].scatter(room_df["path_len"], room_df["cpu_ms"], label=room, alpha=0.6)

    axes[0].set_xlabel("Route Length")
    axes[0].set_ylabel("Nodes Expanded")
    axes[0].set_title("Expansions vs Route Length")
    axes[1].set_xlabel("Route Length")
    axes[1].set_ylabel("Planning Time (ms)")
    axes[1].set_title("Planning Time vs Route Length")
    for ax in axes:
        ax.grid(True, alpha=0.3)
        if len(found):
            ax.legend()

    plt.tight_layout()
    out_path = os.path.join(output_dir, "cost.png")
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"Saved cost plot to {out_path}")
    plt.close(fig)
    return out_path


def main():
    """Main plotting function."""
    parser = argparse.ArgumentParser(description="Generate plots from planning logs")
    parser.add_argument('--in', '--input', dest='input_pattern',
                        default='data/logs/*.csv',
                        help='Input CSV file pattern (glob)')
    parser.add_argument('--out', '--output', dest='output_dir',
                        default='docs/img/',
                        help='Output directory for plots')

    args = parser.parse_args()

    df = load_logs(args.input_pattern)
    if df is None:
        print("No data to plot")
        return

    print(f"Loaded {len(df)} log entries")
    plot_outcomes(df, args.output_dir)
    plot_cost(df, args.output_dir)
    print(f"\nPlots saved to {args.output_dir}")


if __name__ == "__main__":
    main()
