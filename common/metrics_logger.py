"""
Metrics logging for performance analysis.
Logs RTT, jitter, stale network ticks, dispatch times and session counts.
"""

import json
import os
import time


class MetricsLogger:
    """Collects and persists network/session performance metrics."""

    def __init__(self, log_dir: str = 'analysis/logs'):
        os.makedirs(log_dir, exist_ok=True)
        self.log_dir = log_dir
        self.start_time = time.time()
        self.data = {
            'rtt': [],
            'jitter': [],
            'stale_ticks': [],
            'dispatch_times': [],
            'dropped_packets': [],
            'sessions': [],
        }
        # Running jitter computation (RFC 3550)
        self._prev_rtt = None
        self._smoothed_jitter = 0.0

    def _now(self) -> float:
        return round(time.time() - self.start_time, 4)

    def log_rtt(self, command: str, rtt_ms: float):
        """Log a round-trip time sample."""
        t = self._now()
        self.data['rtt'].append({'t': t, 'command': command,
                                 'rtt_ms': round(rtt_ms, 3)})

        # Compute jitter
        if self._prev_rtt is not None:
            diff = abs(rtt_ms - self._prev_rtt)
            self._smoothed_jitter += (diff - self._smoothed_jitter) / 16.0
            self.data['jitter'].append({
                't': t,
                'jitter_ms': round(self._smoothed_jitter, 3),
                'instant_jitter_ms': round(diff, 3)
            })
        self._prev_rtt = rtt_ms

    def log_stale_tick(self, reason: str):
        """A network tick that produced no update."""
        self.data['stale_ticks'].append({'t': self._now(), 'reason': reason})

    def log_dispatch_time(self, command: str, duration_ms: float):
        self.data['dispatch_times'].append({
            't': self._now(), 'command': command,
            'duration_ms': round(duration_ms, 4)
        })

    def log_dropped_packet(self, reason: str):
        self.data['dropped_packets'].append({'t': self._now(), 'reason': reason})

    def log_sessions(self, total: int, open_count: int):
        self.data['sessions'].append({
            't': self._now(), 'total': total, 'open': open_count
        })

    def save(self, filename: str = 'metrics.json'):
        path = os.path.join(self.log_dir, filename)
        with open(path, 'w') as f:
            json.dump(self.data, f, indent=2)
        print(f"[METRICS] Saved to {path}", flush=True)
        return path

    def get_summary(self) -> dict:
        """Compute summary statistics."""
        summary = {}
        rtts = [r['rtt_ms'] for r in self.data['rtt']]
        if rtts:
            rtts_sorted = sorted(rtts)
            summary['rtt_mean'] = sum(rtts) / len(rtts)
            summary['rtt_min'] = min(rtts)
            summary['rtt_max'] = max(rtts)
            summary['rtt_p50'] = rtts_sorted[len(rtts_sorted) // 2]
            summary['rtt_p95'] = rtts_sorted[int(len(rtts_sorted) * 0.95)]
            summary['rtt_p99'] = rtts_sorted[int(len(rtts_sorted) * 0.99)]

        jitters = [j['jitter_ms'] for j in self.data['jitter']]
        if jitters:
            summary['jitter_mean'] = sum(jitters) / len(jitters)

        if self.data['stale_ticks']:
            summary['stale_ticks'] = len(self.data['stale_ticks'])

        dispatch = [d['duration_ms'] for d in self.data['dispatch_times']]
        if dispatch:
            summary['dispatch_time_mean'] = sum(dispatch) / len(dispatch)
            summary['dispatch_time_max'] = max(dispatch)

        if self.data['dropped_packets']:
            summary['dropped_packets'] = len(self.data['dropped_packets'])

        return summary
