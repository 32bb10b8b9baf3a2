import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ratings_bed():
    from ratings.domain import ratings

    bed = DomainFixture(ratings)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ratings_bed):
    with ratings_bed.domain_context():
        yield

        # Clear stored reviews/ratings so tests stay independent
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def verifier():
    """The active FakeTokenVerifier."""
    from ratings.auth import FakeTokenVerifier, set_verifier

    fake = FakeTokenVerifier()
    set_verifier(fake)
    return fake
