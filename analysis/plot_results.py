"""
Analysis and visualization of session sync metrics.
Generates plots for RTT, jitter, stale network ticks, server dispatch
times and session counts.
"""

import json
import os


def load_metrics(filepath: str) -> dict:
    """Load a metrics JSON file."""
    with open(filepath) as f:
        return json.load(f)


def plot_latency_analysis(data: dict, output_dir: str = 'analysis'):
    """Generate latency, jitter and stale-tick plots for a client run."""
    try:
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError:
        print("[ANALYSIS] matplotlib/numpy not available. Skipping plots.")
        return

    os.makedirs(output_dir, exist_ok=True)

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle('Client Sync Loop Analysis', fontsize=14, fontweight='bold')

    # ── 1. RTT over time, per command ──
    ax = axes[0][0]
    rtts = data.get('rtt', [])
    if rtts:
        for command in sorted({r['command'] for r in rtts}):
            samples = [r for r in rtts if r['command'] == command]
            ax.plot([r['t'] for r in samples], [r['rtt_ms'] for r in samples],
                    linewidth=0.8, label=command)
        mean_rtt = np.mean([r['rtt_ms'] for r in rtts])
        ax.axhline(y=mean_rtt, color='red', linestyle='--', linewidth=1,
                   label=f'Mean: {mean_rtt:.1f} ms')
        ax.legend(fontsize=9)
    ax.set_title('Round-Trip Time (RTT)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('RTT (ms)')
    ax.grid(True, alpha=0.3)

    # ── 2. Jitter over time ──
    ax = axes[0][1]
    jitters = data.get('jitter', [])
    if jitters:
        jtimes = [j['t'] for j in jitters]
        jvalues = [j['jitter_ms'] for j in jitters]
        instant = [j.get('instant_jitter_ms', 0) for j in jitters]
        ax.plot(jtimes, instant, linewidth=0.5, alpha=0.5, color='orange',
                label='Instantaneous')
        ax.plot(jtimes, jvalues, linewidth=1.5, color='red',
                label='Smoothed (RFC 3550)')
        ax.legend(fontsize=9)
    ax.set_title('Jitter')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Jitter (ms)')
    ax.grid(True, alpha=0.3)

    # ── 3. RTT Distribution ──
    ax = axes[1][0]
    if rtts:
        values = [r['rtt_ms'] for r in rtts]
        ax.hist(values, bins=50, edgecolor='black', alpha=0.7, color='#4CAF50')
        arr = np.array(values)
        stats_text = (f'Mean: {np.mean(arr):.1f} ms\n'
                      f'Std:  {np.std(arr):.1f} ms\n'
                      f'P50:  {np.percentile(arr, 50):.1f} ms\n'
                      f'P95:  {np.percentile(arr, 95):.1f} ms\n'
                      f'P99:  {np.percentile(arr, 99):.1f} ms')
        ax.text(0.95, 0.95, stats_text, transform=ax.transAxes,
                verticalalignment='top', horizontalalignment='right',
                fontsize=9, family='monospace',
                bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.8))
    ax.set_title('RTT Distribution')
    ax.set_xlabel('RTT (ms)')
    ax.set_ylabel('Frequency')
    ax.grid(True, alpha=0.3)

    # ── 4. Stale network ticks (cumulative) ──
    ax = axes[1][1]
    stale = data.get('stale_ticks', [])
    if stale:
        stimes = [s['t'] for s in stale]
        ax.step(stimes, np.arange(1, len(stale) + 1), where='post',
                linewidth=1.2, color='red')
    ax.set_title('Stale Network Ticks')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Count')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'sync_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()


def plot_dispatch_times(data: dict, output_dir: str = 'analysis'):
    """Box plot of server dispatch time per command."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        return

    os.makedirs(output_dir, exist_ok=True)
    samples = data.get('dispatch_times', [])
    if not samples:
        return

    commands = sorted({d['command'] for d in samples})
    grouped = [[d['duration_ms'] for d in samples if d['command'] == c]
               for c in commands]

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.boxplot(grouped, showfliers=False)
    ax.set_xticks(range(1, len(commands) + 1))
    ax.set_xticklabels(commands)
    ax.set_title('Server Dispatch Time per Command')
    ax.set_ylabel('Duration (ms)')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'dispatch_time_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()


def plot_sessions(data: dict, output_dir: str = 'analysis'):
    """Plot hosted and open session counts over time."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        return

    os.makedirs(output_dir, exist_ok=True)
    sessions = data.get('sessions', [])
    if not sessions:
        return

    fig, ax = plt.subplots(figsize=(10, 4))
    times = [s['t'] for s in sessions]
    ax.plot(times, [s['total'] for s in sessions], label='Hosted',
            color='#2196F3')
    ax.plot(times, [s['open'] for s in sessions], label='Open',
            color='#4CAF50')
    ax.set_title('Sessions')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Count')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'session_analysis.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close()


def analyze_all(filepath: str, output_dir: str = 'analysis'):
    """Run all analysis on a metrics file."""
    import numpy as np

    print(f"[ANALYSIS] Loading {filepath}...")
    data = load_metrics(filepath)

    plot_latency_analysis(data, output_dir)
    plot_dispatch_times(data, output_dir)
    plot_sessions(data, output_dir)

    # Print summary
    print("\n=== Metrics Summary ===")
    rtts = [r['rtt_ms'] for r in data.get('rtt', [])]
    if rtts:
        arr = np.array(rtts)
        print(f"  RTT:    mean={np.mean(arr):.1f} ms, "
              f"std={np.std(arr):.1f} ms, "
              f"P95={np.percentile(arr, 95):.1f} ms, "
              f"P99={np.percentile(arr, 99):.1f} ms")

    jitters = [j['jitter_ms'] for j in data.get('jitter', [])]
    if jitters:
        print(f"  Jitter: mean={np.mean(jitters):.1f} ms")

    stale = data.get('stale_ticks', [])
    if stale:
        print(f"  Stale ticks: {len(stale)}")

    dispatch = [d['duration_ms'] for d in data.get('dispatch_times', [])]
    if dispatch:
        print(f"  Dispatch:   mean={np.mean(dispatch):.3f} ms, "
              f"max={np.max(dispatch):.3f} ms")

    dropped = data.get('dropped_packets', [])
    if dropped:
        print(f"  Dropped packets: {len(dropped)}")


if __name__ == '__main__':
    import argparse
    parser = argparse.ArgumentParser(description='Analyze sync metrics')
    parser.add_argument('file', help='Metrics JSON file to analyze')
    parser.add_argument('--output', default='analysis', help='Output directory')
    args = parser.parse_args()
    analyze_all(args.file, args.output)
