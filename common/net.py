"""
Networking utilities: socket creation, request/reply round trips,
network simulation.
"""

import socket
import time
import random

from common.config import (
    DEFAULT_HOST, DEFAULT_PORT, DEFAULT_BUFFER_SIZE,
    SERVER_RECV_TIMEOUT, CLIENT_RECV_TIMEOUT
)


def create_server_socket(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                         timeout: float = SERVER_RECV_TIMEOUT) -> socket.socket:
    """Create and bind a UDP socket whose receives wake up after *timeout*."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    # Increase OS send/receive buffers
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, 262144)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, 262144)
    sock.bind((host, port))
    sock.settimeout(timeout)
    return sock


def create_client_socket(timeout: float = CLIENT_RECV_TIMEOUT) -> socket.socket:
    """Create a UDP socket bound to an ephemeral local port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('', 0))
    sock.settimeout(timeout)
    return sock


def round_trip(data: bytes, addr: tuple,
               timeout: float = CLIENT_RECV_TIMEOUT,
               net_sim: 'NetworkSimulator' = None) -> bytes:
    """
    Send one datagram from a fresh ephemeral port and wait for the reply.

    Raises socket.timeout when nothing arrives within *timeout*, and OSError
    for any other transport failure.
    """
    sock = create_client_socket(timeout)
    try:
        if net_sim:
            net_sim.sendto(sock, data, addr)
        else:
            sock.sendto(data, addr)
        reply, _ = sock.recvfrom(DEFAULT_BUFFER_SIZE)
        return reply
    finally:
        sock.close()


class NetworkSimulator:
    """
    Applies simulated network conditions to outgoing datagrams:
    latency, jitter, packet loss.

    Delivery is delayed in place (the caller sleeps), which keeps the
    one-request-at-a-time flow of both ends intact.
    """

    def __init__(self, loss_rate: float = 0.0,
                 min_latency: float = 0.0, max_latency: float = 0.0,
                 rng: random.Random = None):
        self.loss_rate = loss_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.rng = rng or random.Random()
        self.dropped = 0

    def sendto(self, sock: socket.socket, data: bytes, addr: tuple) -> bool:
        """Send with simulated conditions. Returns False if the packet was dropped."""
        if self.rng.random() < self.loss_rate:
            self.dropped += 1
            return False

        if self.min_latency > 0 or self.max_latency > 0:
            time.sleep(self.rng.uniform(self.min_latency, self.max_latency))
        sock.sendto(data, addr)
        return True
