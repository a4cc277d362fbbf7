import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def support_bed():
    from support.domain import support

    bed = DomainFixture(support)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(support_bed):
    with support_bed.domain_context():
        yield


@pytest.fixture()
def join_chat():
    """Join (or rejoin) a chat and return ``{room_id, created}``."""
    from support.room.session import JoinChat

    def _join(user_id=None, guest_id=None, user_name="Nguyễn Thu Trang", user_email=None):
        command = JoinChat(user_id=user_id, guest_id=guest_id, user_name=user_name, user_email=user_email)
        return current_domain.process(command, asynchronous=False)

    return _join


@pytest.fixture()
def send_message():
    """Send a message into a room and return the message id."""
    from support.message.messaging import SendMessage

    def _send(room_id, content, sender="user", sender_name="Nguyễn Thu Trang"):
        command = SendMessage(room_id=room_id, sender=sender, sender_name=sender_name, content=content)
        return current_domain.process(command, asynchronous=False)

    return _send
