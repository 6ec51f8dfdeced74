import pytest

from ircflow.config.model import IRCConfig
from tests.fixtures.streams import FakeStreamReader, FakeStreamWriter


@pytest.fixture
def irc_config() -> IRCConfig:
    return IRCConfig(
        host="irc.example.net",
        port=6667,
        nick="alice",
        user="alice_u",
        realname="Alice Example",
        channels=["#a", "#b"],
    )


@pytest.fixture
def stream_writer() -> FakeStreamWriter:
    return FakeStreamWriter()


@pytest.fixture
def stream_reader() -> FakeStreamReader:
    return FakeStreamReader()
