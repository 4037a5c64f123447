import pytest
from click.testing import CliRunner

from hipchat_cli import config, main as main_module


class FakeHipChat:
    """Stands in for HipChat: records every API call instead of sending it."""

    instances: list = []
    result = {"ok": True}
    error = None

    def __init__(self, token, server, **kwargs):
        self.token = token
        self.server = server
        self.kwargs = kwargs
        self.calls = []
        self.closed = False
        FakeHipChat.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def call(*args):
            self.calls.append((name, args))
            if FakeHipChat.error is not None:
                raise FakeHipChat.error
            return FakeHipChat.result

        return call


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.delenv(config.TOKEN_ENV, raising=False)
    monkeypatch.delenv(config.SERVER_ENV, raising=False)
    return tmp_path / "config.json"


@pytest.fixture
def fake_client(monkeypatch):
    FakeHipChat.instances = []
    FakeHipChat.result = {"ok": True}
    FakeHipChat.error = None
    monkeypatch.setattr(main_module, "HipChat", FakeHipChat)
    return FakeHipChat


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, fake_client):
    """Run the CLI with a token already supplied."""

    def _invoke(*args):
        return runner.invoke(main_module.main, ["--auth-token", "tok", *args])

    return _invoke
