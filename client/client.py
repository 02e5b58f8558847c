"""
Main game client — joins a session, waits for the opponent, then runs the
local simulation and the network sync on two independent cadences.
"""

import socket
import time

from common.config import (
    DEFAULT_PORT, RENDER_TICK, NETWORK_TICK, WAITING_POLL_INTERVAL,
    CLIENT_RECV_TIMEOUT
)
from common.metrics_logger import MetricsLogger
from common.models import Player, Direction
from common.net import NetworkSimulator
from client import physics
from client.connection import ServerConnection, ServerError
from client.renderer import GameRenderer
from client.sync import reconcile


class ClientState:
    """Pre-game state machine."""
    WAITING_FOR_START = 'waiting_for_start'
    RUNNING = 'running'


class GameClient:
    """
    Game client that synchronizes with the authoritative session server.

    The render tick advances the local simulation; the network tick pushes
    the local player and pulls the session. A network tick that fails
    (timeout, transport error, error response, unreadable reply) leaves the
    opponent at its previous state.
    """

    def __init__(self, name: str, server_host: str = '127.0.0.1',
                 server_port: int = DEFAULT_PORT, game_id: str = None,
                 render_tick: float = RENDER_TICK,
                 network_tick: float = NETWORK_TICK,
                 poll_interval: float = WAITING_POLL_INTERVAL,
                 timeout: float = CLIENT_RECV_TIMEOUT,
                 headless: bool = False,
                 loss_sim: float = 0.0, latency_sim: float = 0.0,
                 metrics: MetricsLogger = None, verbose: bool = True):
        if network_tick > render_tick:
            raise ValueError(
                f"Network tick ({network_tick}s) must not be slower than "
                f"the render tick ({render_tick}s)"
            )
        self.name = name
        self.game_id = game_id
        self.render_tick = render_tick
        self.network_tick = network_tick
        self.poll_interval = poll_interval
        self.headless = headless
        self.verbose = verbose
        self.running = False

        # Optional network simulation
        net_sim = None
        if loss_sim > 0 or latency_sim > 0:
            net_sim = NetworkSimulator(
                loss_rate=loss_sim,
                min_latency=latency_sim * 0.5,
                max_latency=latency_sim * 1.5
            )

        self.metrics = metrics if metrics is not None else MetricsLogger()
        self.conn = ServerConnection(server_host, server_port, timeout,
                                     net_sim=net_sim, metrics=self.metrics)

        # Game state
        self.state = ClientState.WAITING_FOR_START
        self.local = Player(name)
        self.opponent = Player('')
        self.potion = None
        self.pending_pickup = False

        # Cadence bookkeeping (wall-clock of last firing)
        self.last_render = None
        self.last_network = None
        self.last_poll = None

        # Statistics
        self.network_ticks = 0
        self.stale_ticks = 0
        self.last_rtt = 0.0

    def _log(self, msg: str):
        if self.verbose:
            print(msg, flush=True)

    def join(self) -> str:
        """Create a session if none was given, then join it as ``self.name``."""
        if self.game_id is None:
            self.game_id = self.conn.new_game()
            self._log(f"[CLIENT] Created game {self.game_id}")
        info = self.conn.join_game(self.game_id, self.name)
        self._log(f"[CLIENT] {info}")

        # Adopt the spawn position the server picked for us
        session = self.conn.get_world(self.game_id)
        me = session.find_player(self.name)
        if me is not None:
            self.local = me.copy()
        self.potion = session.potion
        return info

    def set_input(self, direction: Direction, jump: bool = False):
        """Called by the input layer before each render tick."""
        self.local.direction = direction
        if jump:
            physics.start_jump(self.local)

    # ── Cadences ──

    def _due(self, last: float, period: float, now: float) -> bool:
        return last is None or now - last >= period

    def tick(self, now: float = None):
        """Fire whichever cadences are due at *now*."""
        now = time.perf_counter() if now is None else now

        if self.state == ClientState.WAITING_FOR_START:
            if self._due(self.last_poll, self.poll_interval, now):
                self.last_poll = now
                self.poll_start()
            return

        if self._due(self.last_render, self.render_tick, now):
            self.last_render = now
            self.render_step()

        if self._due(self.last_network, self.network_tick, now):
            self.last_network = now
            self.network_step()

    def poll_start(self) -> bool:
        """While waiting: check whether the session has started."""
        session = self._fetch(lambda: self.conn.get_world(self.game_id))
        if session is None or not session.started:
            return False

        self._absorb(session)
        self.state = ClientState.RUNNING
        self._log(f"[CLIENT] Game {self.game_id} started, "
                  f"opponent: {self.opponent.name}")
        return True

    def render_step(self):
        """Local simulation only; never touches the network."""
        if physics.step(self.local, self.potion):
            self.pending_pickup = True
        physics.step(self.opponent)

    def network_step(self) -> bool:
        """Push the local player, pull the session, reconcile the opponent."""
        self.network_ticks += 1

        def exchange():
            self.conn.send_position(self.game_id, self.local)
            if self.pending_pickup:
                self.conn.eat_potion(self.game_id, self.name)
                self.pending_pickup = False
            return self.conn.get_world(self.game_id)

        session = self._fetch(exchange)
        if session is None:
            return False
        self._absorb(session)
        return True

    def _fetch(self, call):
        """Run one network exchange; None means "no update this tick"."""
        start = time.perf_counter()
        try:
            result = call()
        except socket.timeout:
            self._stale('timeout')
            return None
        except ServerError as e:
            self._stale(f"server error: {e}")
            return None
        except OSError as e:
            self._stale(f"transport error: {e}")
            return None
        except ValueError as e:
            self._stale(f"unreadable reply: {e}")
            return None
        self.last_rtt = (time.perf_counter() - start) * 1000.0
        return result

    def _stale(self, reason: str):
        self.stale_ticks += 1
        self.metrics.log_stale_tick(reason)
        self._log(f"[CLIENT] No update this tick ({reason})")

    def _absorb(self, session):
        reconcile(self.opponent, session, self.name)
        self.potion = session.potion

    def get_metrics_display(self) -> dict:
        """Get metrics dict for HUD display."""
        return {
            'RTT': f"{self.last_rtt:.1f} ms",
            'Stale': f"{self.stale_ticks}/{self.network_ticks}",
            'State': self.state,
        }

    def run(self):
        """Main client loop."""
        self.running = True

        # Create renderer
        if self.headless:
            renderer = GameRenderer.__new__(GameRenderer)
            renderer.headless = True
        else:
            renderer = GameRenderer()

        try:
            self.join()

            while self.running:
                if not self.headless and renderer.check_quit():
                    break

                direction, jump = renderer.get_input()
                self.set_input(direction, jump)

                self.tick()

                if not self.headless:
                    renderer.render(
                        self.local, self.opponent, self.potion,
                        self.state == ClientState.WAITING_FOR_START,
                        self.get_metrics_display()
                    )

                # Yield CPU
                time.sleep(0.001)

        except KeyboardInterrupt:
            print("\n[CLIENT] Interrupted")
        finally:
            self.running = False
            if not self.headless:
                renderer.close()

            # Save metrics
            self.metrics.save(f'client_{self.name}_metrics.json')
            summary = self.metrics.get_summary()
            if summary:
                print(f"[CLIENT] Metrics summary: {summary}")


def main():
    """Entry point for running the client standalone."""
    import argparse
    parser = argparse.ArgumentParser(description='Duel Sync Client')
    parser.add_argument('name', help='Player name (unique within the game)')
    parser.add_argument('--game', default=None,
                        help='Join this game id instead of creating one')
    parser.add_argument('--host', default='127.0.0.1', help='Server address')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help='Server port')
    parser.add_argument('--render-tick', type=float, default=RENDER_TICK,
                        help='Render/physics period (seconds)')
    parser.add_argument('--network-tick', type=float, default=NETWORK_TICK,
                        help='Network sync period (seconds)')
    parser.add_argument('--timeout', type=float, default=CLIENT_RECV_TIMEOUT,
                        help='Seconds to wait for each reply')
    parser.add_argument('--headless', action='store_true',
                        help='Run without pygame (for bots/testing)')
    parser.add_argument('--loss', type=float, default=0.0,
                        help='Simulated packet loss rate (0.0-1.0)')
    parser.add_argument('--latency', type=float, default=0.0,
                        help='Simulated base latency (seconds)')
    args = parser.parse_args()

    client = GameClient(
        args.name, server_host=args.host, server_port=args.port,
        game_id=args.game, render_tick=args.render_tick,
        network_tick=args.network_tick, timeout=args.timeout,
        headless=args.headless, loss_sim=args.loss, latency_sim=args.latency
    )
    client.run()


if __name__ == '__main__':
    main()
