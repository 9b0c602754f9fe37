# Author      : Tyson Limato
# Date        : 2025-10-18
# File Name   : report.py
import os.path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

COLUMNS = ['processes', 'workers', 'n', 'sum', 'negated_sum', 'product', 'elapsed_s']


def make_record(processes: int, n: int, results, elapsed: float) -> dict:
    total, negated, product = results
    return {
        'processes': processes,
        'workers': processes - 1,
        'n': n,
        'sum': total,
        'negated_sum': negated,
        'product': product,
        'elapsed_s': elapsed,
    }


def append_run_record(csv_path: str, record: dict):
    """
    Append one pipeline run to `csv_path`, writing the header the first time.

    Parameters:
    -----------
    csv_path : str
        Destination CSV file.
    record : dict
        Row produced by make_record().
    """
    row = pd.DataFrame([record], columns=COLUMNS)
    write_header = not os.path.isfile(csv_path)
    row.to_csv(csv_path, mode='a', header=write_header, index=False)


def load_runs(csv_path: str) -> pd.DataFrame:
    return pd.read_csv(csv_path)


def plot_timings(csv_path: str, filename: str = 'pipeline_timings.png'):
    """
    Plot mean and best elapsed time per process count from the run log and
    save it to `filename`.
    """
    df = load_runs(csv_path)
    stats = df.groupby('processes')['elapsed_s'].agg(['mean', 'min']).sort_index()

    fig, ax = plt.subplots(figsize=(8,5))
    ax.plot(stats.index, stats['mean'],
            label='Mean', linestyle='-', marker='o')
    ax.plot(stats.index, stats['min'],
            label='Best', linestyle='--', marker='x')
    ax.set_xlabel('Processes')
    ax.set_ylabel('Elapsed Time (s)')
    ax.set_xticks(list(stats.index))
    ax.legend(loc='upper left', fontsize='small')

    plt.title('Pipeline Drain Time per Process Count')
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)
