from datetime import UTC, datetime, timedelta

from protean.utils.globals import current_domain
from support.message.history import recent_messages
from support.room.cleanup import CloseInactiveRooms, MergeDuplicateRooms
from support.room.room import ChatRoom, RoomStatus


def _room(participant_id, days_idle=0):
    room = ChatRoom.open(participant_id, "guest", "Khách")
    if days_idle:
        room.last_active_at = datetime.now(UTC) - timedelta(days=days_idle)
    current_domain.repository_for(ChatRoom).add(room)
    return str(room.id)


class TestCloseInactiveRooms:
    def test_closes_idle_rooms_only(self):
        idle = _room("guest-1", days_idle=45)
        fresh = _room("guest-2", days_idle=2)

        closed = current_domain.process(CloseInactiveRooms(older_than_days=30), asynchronous=False)

        repo = current_domain.repository_for(ChatRoom)
        assert closed == 1
        assert repo.get(idle).status == RoomStatus.CLOSED.value
        assert repo.get(fresh).status == RoomStatus.ACTIVE.value

    def test_as_of_moves_the_cutoff(self):
        _room("guest-1", days_idle=2)
        as_of = datetime.now(UTC) + timedelta(days=40)
        assert current_domain.process(CloseInactiveRooms(older_than_days=30, as_of=as_of), asynchronous=False) == 1


class TestMergeDuplicateRooms:
    def test_keeps_busiest_room_and_moves_messages(self, send_message):
        quiet = _room("guest-1")
        busy = _room("guest-1")
        send_message(quiet, "Alo")
        send_message(busy, "Cho hỏi giá ghế")
        send_message(busy, "Ghế lưới ấy")

        removed = current_domain.process(MergeDuplicateRooms(), asynchronous=False)

        assert removed == 1
        rooms = current_domain.repository_for(ChatRoom)._dao.query.all().items
        assert [str(r.id) for r in rooms] == [busy]
        assert len(recent_messages(busy)) == 3

    def test_single_rooms_untouched(self):
        _room("guest-1")
        _room("guest-2")
        assert current_domain.process(MergeDuplicateRooms(), asynchronous=False) == 0

    def test_live_room_survives_over_busier_closed_room(self, join_chat, send_message):
        old = join_chat(guest_id="guest-1")["room_id"]
        for text in ("Alo shop", "Cho hỏi ghế lưới", "Còn màu đen không"):
            send_message(old, text)
        repo = current_domain.repository_for(ChatRoom)
        stale = repo.get(old)
        stale.last_active_at = datetime.now(UTC) - timedelta(days=40)
        repo.add(stale)
        current_domain.process(CloseInactiveRooms(older_than_days=30), asynchronous=False)

        live = join_chat(guest_id="guest-1")["room_id"]
        assert live != old
        send_message(live, "Mình quay lại hỏi tiếp")

        removed = current_domain.process(MergeDuplicateRooms(), asynchronous=False)

        assert removed == 1
        kept = repo.get(live)
        assert kept.status == RoomStatus.ACTIVE.value
        assert len(recent_messages(live)) == 4
        send_message(live, "Vẫn gửi được")

    def test_kept_room_summary_reflects_merged_history(self, send_message):
        first = _room("guest-1")
        second = _room("guest-1")
        send_message(first, "Tin cũ")
        send_message(second, "Tin mới hơn")
        send_message(second, "Tin mới nhất")

        current_domain.process(MergeDuplicateRooms(), asynchronous=False)

        kept = current_domain.repository_for(ChatRoom).get(second)
        assert kept.last_message == "Tin mới nhất"
        assert kept.unread_count == 3
