import pytest

from cluebowl.messages.localization import Localization


@pytest.fixture(autouse=True)
def localization():
    """Load the bundled message files for every test."""
    Localization.init()
    yield
    Localization.init()
