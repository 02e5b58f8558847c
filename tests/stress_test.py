"""
Stress test: measure server dispatch cost with an increasing number of
concurrent two-player sessions.
"""

import os
import time
import threading
import random
import json

from common.config import CLIENT_RECV_TIMEOUT
from common.metrics_logger import MetricsLogger
from common.models import Direction
from client.client import GameClient, ClientState


class StressBotClient:
    """Headless GameClient that wanders with random input."""

    def __init__(self, name: str, port: int, game_id: str = None,
                 log_dir: str = 'analysis/logs'):
        self.client = GameClient(
            name, server_port=port, game_id=game_id,
            timeout=CLIENT_RECV_TIMEOUT, headless=True, verbose=False,
            metrics=MetricsLogger(log_dir=log_dir)
        )

    def step(self, now: float):
        if self.client.state == ClientState.RUNNING and random.random() < 0.1:
            self.client.set_input(Direction(
                up=random.random() < 0.5, down=random.random() < 0.5,
                left=random.random() < 0.5, right=random.random() < 0.5
            ), jump=random.random() < 0.05)
        self.client.tick(now)


def run_stress_test(num_sessions: int, duration: float = 10.0) -> dict:
    """Run a stress test with N sessions (2N bots) for a given duration."""
    from server.server import GameServer

    server = GameServer(host='127.0.0.1', port=0, recv_timeout=0.05,
                        verbose=False)
    server_thread = threading.Thread(target=server.run, daemon=True)
    server_thread.start()

    # Create and join bots, two per session
    bots = []
    for i in range(num_sessions):
        first = StressBotClient(f"bot{i}a", server.port)
        first.client.join()
        second = StressBotClient(f"bot{i}b", server.port,
                                 game_id=first.client.game_id)
        second.client.join()
        bots += [first, second]

    # Run for duration
    start = time.perf_counter()
    while time.perf_counter() - start < duration:
        now = time.perf_counter()
        for bot in bots:
            bot.step(now)
        time.sleep(0.001)

    elapsed = time.perf_counter() - start
    running = sum(1 for b in bots if b.client.state == ClientState.RUNNING)

    # Collect results
    network_ticks = sum(b.client.network_ticks for b in bots)
    stale_ticks = sum(b.client.stale_ticks for b in bots)

    result = {
        'sessions': num_sessions,
        'bots': len(bots),
        'running': running,
        'duration_s': round(elapsed, 2),
        'packets_handled': server.packets_handled,
        'network_ticks': network_ticks,
        'stale_ticks': stale_ticks,
        'stale_pct': round(100.0 * stale_ticks / max(network_ticks, 1), 2),
        'server_bytes_sent_kb': round(server.total_bytes_sent / 1024, 1),
        'server_bytes_recv_kb': round(server.total_bytes_recv / 1024, 1),
    }

    # Server dispatch times
    dispatch = [d['duration_ms']
                for d in server.metrics.data.get('dispatch_times', [])]
    if dispatch:
        result['avg_dispatch_ms'] = round(sum(dispatch) / len(dispatch), 4)
        result['max_dispatch_ms'] = round(max(dispatch), 4)

    # Cleanup
    server.stop()
    server_thread.join(timeout=2)

    return result


def main():
    """Run stress tests with increasing session counts."""
    import argparse
    parser = argparse.ArgumentParser(description='Stress test')
    parser.add_argument('--sessions', type=int, default=0,
                        help='Single session count (overrides sweep)')
    parser.add_argument('--duration', type=float, default=3.0,
                        help='Duration per test in seconds')
    args = parser.parse_args()

    SESSION_COUNTS = [args.sessions] if args.sessions > 0 else [1, 2, 4, 8]
    DURATION = args.duration

    print("=" * 70)
    print("  Stress Test: Session Sync Server")
    print(f"  Duration: {DURATION}s per test")
    print("=" * 70)

    results = []
    for n in SESSION_COUNTS:
        print(f"\n--- Testing with {n} sessions ({2 * n} bots) ---")
        result = run_stress_test(n, duration=DURATION)
        results.append(result)
        print(f"  Running bots:      {result['running']}/{result['bots']}")
        print(f"  Packets handled:   {result['packets_handled']}")
        print(f"  Stale ticks:       {result['stale_ticks']} "
              f"({result['stale_pct']}%)")
        print(f"  Avg dispatch time: {result.get('avg_dispatch_ms', 'N/A')} ms")
        print(f"  Max dispatch time: {result.get('max_dispatch_ms', 'N/A')} ms")

    # Save results
    output_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                               'analysis', 'logs', 'stress_test_results.json')
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n[STRESS] Results saved to {output_path}")

    # Summary table
    print("\n" + "=" * 70)
    print(f"{'Sessions':<10} {'Running':<10} {'Packets':<10} "
          f"{'Stale %':<10} {'Sent KB':<10} {'Dispatch ms':<12}")
    print("-" * 70)
    for r in results:
        print(f"{r['sessions']:<10} {r['running']:<10} "
              f"{r['packets_handled']:<10} "
              f"{r['stale_pct']:<10} "
              f"{r['server_bytes_sent_kb']:<10} "
              f"{r.get('avg_dispatch_ms', 'N/A'):<12}")
    print("=" * 70)


if __name__ == '__main__':
    main()
