import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def identity_bed():
    from identity.domain import identity

    bed = DomainFixture(identity)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(identity_bed):
    with identity_bed.domain_context():
        yield


@pytest.fixture()
def register():
    """Register an account and return its id."""
    from identity.user.registration import RegisterUser

    def _register(**overrides):
        defaults = {
            "email": "lan.nguyen@example.com",
            "name": "Nguyễn Thị Lan",
            "password": "matkhau123",
            "phone": "0901234567",
        }
        defaults.update(overrides)
        return current_domain.process(RegisterUser(**defaults), asynchronous=False)

    return _register


@pytest.fixture(autouse=True)
def mailer():
    """Reset links go through the shared mail port; keep them in memory."""
    from storefront.mail import reset_mailer, set_mailer
    from storefront.mail.fake_email import FakeEmailAdapter

    fake = FakeEmailAdapter()
    set_mailer(fake)
    yield fake
    reset_mailer()
