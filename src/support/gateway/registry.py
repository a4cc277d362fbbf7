"""In-process registry of who is connected to the chat gateway."""

from dataclasses import dataclass


@dataclass
class Participant:
    participant_id: str
    room_id: str | None = None


class SessionRegistry:
    """Maps socket ids to chat participants and tracks connected admins."""

    def __init__(self):
        self._participants: dict[str, Participant] = {}
        self._admins: set[str] = set()

    def register_participant(self, sid, participant_id, room_id=None) -> Participant:
        participant = Participant(participant_id=str(participant_id), room_id=room_id)
        self._participants[sid] = participant
        return participant

    def participant(self, sid) -> Participant | None:
        return self._participants.get(sid)

    def register_admin(self, sid):
        self._admins.add(sid)

    def is_admin(self, sid) -> bool:
        return sid in self._admins

    @property
    def admins_online(self) -> bool:
        return bool(self._admins)

    def forget(self, sid):
        self._participants.pop(sid, None)
        self._admins.discard(sid)
