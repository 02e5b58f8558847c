"""
Session server: single-threaded, UDP, one request at a time.

Handles:
- Decoding JSON command datagrams
- Dispatching them against the session registry
- Replying to the datagram's origin address
- Periodic garbage collection of completed sessions
"""

import socket
import time

from common.protocol import Command, decode_request, encode_response, DecodeError
from common.net import create_server_socket, NetworkSimulator
from common.config import (
    DEFAULT_HOST, DEFAULT_PORT, DEFAULT_BUFFER_SIZE,
    SERVER_RECV_TIMEOUT, SESSION_TTL, GC_INTERVAL
)
from common.metrics_logger import MetricsLogger
from server.registry import SessionRegistry
from server.dispatcher import dispatch


class GameServer:
    """
    Hosts any number of two-player sessions.

    Every packet is decoded, dispatched and answered before the next one is
    read, so registry mutations never interleave and need no locking.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 recv_timeout: float = SERVER_RECV_TIMEOUT,
                 session_ttl: float = SESSION_TTL,
                 loss_sim: float = 0.0, latency_sim: float = 0.0,
                 verbose: bool = True):
        self.host = host
        self.running = False
        self.verbose = verbose

        # Socket
        self.sock = create_server_socket(host, port, recv_timeout)
        self.port = self.sock.getsockname()[1]

        # Optional network simulation
        self.net_sim = None
        if loss_sim > 0 or latency_sim > 0:
            self.net_sim = NetworkSimulator(
                loss_rate=loss_sim,
                min_latency=latency_sim * 0.5,
                max_latency=latency_sim * 1.5
            )

        # Core systems
        self.registry = SessionRegistry(session_ttl=session_ttl)
        self.metrics = MetricsLogger()

        # Statistics
        self.packets_handled = 0
        self.total_bytes_sent = 0
        self.total_bytes_recv = 0
        self._last_gc = time.monotonic()

    def _log(self, msg: str):
        """Print a message if verbose mode is enabled."""
        if self.verbose:
            print(msg, flush=True)

    def _sendto(self, data: bytes, addr: tuple):
        """Send data through the socket or network simulator."""
        try:
            if self.net_sim:
                self.net_sim.sendto(self.sock, data, addr)
            else:
                self.sock.sendto(data, addr)
        except OSError as e:
            self._log(f"[SERVER] Send to {addr} failed: {e}")
            return
        self.total_bytes_sent += len(data)

    def handle_datagram(self, data: bytes, addr: tuple):
        """
        Turn one received datagram into the reply bytes.

        Returns None for datagrams that cannot be decoded; those get no reply.
        """
        try:
            request = decode_request(data)
        except DecodeError as e:
            self._log(f"[SERVER] Dropped packet from {addr}: {e}")
            self.metrics.log_dropped_packet(str(e))
            return None

        start = time.perf_counter()
        response = dispatch(self.registry, request)
        duration = (time.perf_counter() - start) * 1000.0
        self.metrics.log_dispatch_time(request.command or 'invalid', duration)

        if 'error' in response:
            self._log(f"[SERVER] {request!r} from {addr} -> {response['error']}")
        elif request.command in (Command.NEW_GAME, Command.JOIN_GAME,
                                 Command.END_GAME):
            self._log(f"[SERVER] {request.command} from {addr} -> {response}")

        self.packets_handled += 1
        return encode_response(response)

    def collect_garbage(self):
        """Expire completed sessions whose TTL ran out."""
        self._last_gc = time.monotonic()
        expired = self.registry.collect_garbage()
        for gid in expired:
            self._log(f"[SERVER] Session {gid} expired")
        if expired:
            self.metrics.log_sessions(self.registry.count,
                                      len(self.registry.list_open()))

    def serve_once(self):
        """Wait for one datagram (bounded by the socket timeout) and answer it."""
        try:
            data, addr = self.sock.recvfrom(DEFAULT_BUFFER_SIZE)
        except socket.timeout:
            self.collect_garbage()
            return
        except OSError as e:
            # e.g. ICMP port unreachable surfacing on some platforms
            self._log(f"[SERVER] Receive failed: {e}")
            return

        self.total_bytes_recv += len(data)
        try:
            reply = self.handle_datagram(data, addr)
        except Exception as e:
            # One bad packet must never take the loop down
            print(f"[SERVER] Failed to handle packet from {addr}: "
                  f"{type(e).__name__}: {e}", flush=True)
            self.metrics.log_dropped_packet(f"{type(e).__name__}: {e}")
            reply = None
        if reply is not None:
            self._sendto(reply, addr)

        if time.monotonic() - self._last_gc >= GC_INTERVAL:
            self.collect_garbage()

    def run(self):
        """Main server loop: Listening -> Dispatching -> Listening."""
        self.running = True
        self._log(f"[SERVER] Listening on {self.host}:{self.port}")

        last_stats_time = time.perf_counter()
        stats_interval = 5.0  # Print stats every 5 seconds

        try:
            while self.running:
                self.serve_once()

                now = time.perf_counter()
                if now - last_stats_time >= stats_interval:
                    self._log(f"[SERVER] Sessions: {self.registry.count} | "
                              f"Open: {len(self.registry.list_open())} | "
                              f"Packets: {self.packets_handled} | "
                              f"Sent: {self.total_bytes_sent / 1024:.1f} KB | "
                              f"Recv: {self.total_bytes_recv / 1024:.1f} KB")
                    self.metrics.log_sessions(self.registry.count,
                                              len(self.registry.list_open()))
                    last_stats_time = now

        except KeyboardInterrupt:
            self._log("\n[SERVER] Shutting down...")
        finally:
            self.running = False
            self.sock.close()
            self.metrics.save('server_metrics.json')
            summary = self.metrics.get_summary()
            if summary:
                self._log(f"[SERVER] Metrics summary: {summary}")

    def stop(self):
        """Ask the loop to exit; it notices within one receive timeout."""
        self.running = False


def main():
    """Entry point for running the server standalone."""
    import argparse
    parser = argparse.ArgumentParser(description='Duel Sync Session Server')
    parser.add_argument('--host', default=DEFAULT_HOST, help='Bind address')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help='Bind port')
    parser.add_argument('--recv-timeout', type=float, default=SERVER_RECV_TIMEOUT,
                        help='Seconds the loop waits before waking up idle')
    parser.add_argument('--session-ttl', type=float, default=SESSION_TTL,
                        help='Seconds a completed session is kept')
    parser.add_argument('--loss', type=float, default=0.0,
                        help='Simulated packet loss rate (0.0-1.0)')
    parser.add_argument('--latency', type=float, default=0.0,
                        help='Simulated base latency (seconds)')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress per-request log lines')
    args = parser.parse_args()

    server = GameServer(
        host=args.host, port=args.port, recv_timeout=args.recv_timeout,
        session_ttl=args.session_ttl, loss_sim=args.loss,
        latency_sim=args.latency, verbose=not args.quiet
    )
    server.run()


if __name__ == '__main__':
    main()
