import pytest

from adcpscreen.pipeline import ConfigRegistry, MembershipNotifier, OptionsStore


@pytest.fixture
def store(temp_dir):
    s = OptionsStore(temp_dir / "options.db")
    yield s
    s.close()


@pytest.fixture
def notifier():
    """Notifier that is never started; tests pump it with process_pending()."""
    return MembershipNotifier()


@pytest.fixture
def events(notifier):
    """Events delivered by the notifier, in order."""
    received = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def registry(store, notifier):
    return ConfigRegistry(store=store, notifier=notifier, exclude_averaged=True)
