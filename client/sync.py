"""
Opponent reconciliation: copy the remote participant's authoritative
state out of a fetched session into the local simulation.
"""

from common.models import Player, Session


def find_opponent(session: Session, local_name: str):
    """First player in *session* whose name differs from *local_name*."""
    for player in session.players:
        if player.name != local_name:
            return player
    return None


def apply_remote(opponent: Player, remote: Player):
    """
    Overwrite the synced fields of the local *opponent* from *remote*.

    Vitals, acceleration and animation timers stay local.
    """
    opponent.name = remote.name
    opponent.body = remote.body.copy()
    opponent.direction = remote.direction.copy()
    opponent.last_direction = remote.last_direction.copy()
    opponent.jump = remote.jump.copy()


def reconcile(opponent: Player, session: Session, local_name: str) -> bool:
    """
    Pull the opponent's state out of *session*.

    Returns False (and leaves *opponent* untouched) if the session holds no
    one but the local player.
    """
    remote = find_opponent(session, local_name)
    if remote is None:
        return False
    apply_remote(opponent, remote)
    return True
